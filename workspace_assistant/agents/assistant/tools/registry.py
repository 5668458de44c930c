"""Tool catalog and required-argument validation."""

from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from workspace_assistant.platform.agent.exceptions import MissingToolArguments, ToolNotFoundError

if TYPE_CHECKING:
    from workspace_assistant.agents.assistant.context import RequestContext
    from workspace_assistant.agents.assistant.preferences import ToolPreferences

ToolHandler = Callable[[dict[str, Any], "RequestContext"], Awaitable[Any]]

# Tools whose argument requirements are known even when they are not registered
# in this process.
REQUIRED_TOOL_ARGUMENTS: Mapping[str, tuple[str, ...]] = {
    "web_search": ("query",),
    "docx_ai": ("action",),
    "sheet_ai": ("action",),
    "tldraw_ai": ("action",),
    "generate_image": ("prompt",),
    "create_file": ("fileName", "filePath", "content"),
    "download_from_url": ("url",),
    "stagehand_goto": ("url",),
    "stagehand_observe": ("instruction",),
    "stagehand_act": ("suggestion",),
    "stagehand_extract": ("instruction", "schema"),
}


@dataclass(frozen=True)
class ToolSpec:
    """A tool the model may call.

    Attributes:
        name: Tool name as bound to the model
        description: Description shown to the model
        parameters: JSON schema of the arguments object
        handler: Coroutine function ``(args, context)`` returning a string or JSON value
        required_args: Required argument names; empty means the fallback table applies
        preference: ToolPreferences flag gating the tool, None if always on
    """

    name: str
    description: str
    parameters: dict[str, Any]
    handler: ToolHandler
    required_args: tuple[str, ...] = ()
    preference: str | None = None

    def as_openai_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return not value
    return False


def get_missing_tool_arguments(
    tool_name: str,
    args: Mapping[str, Any] | None,
    document_context: str = "",
    required: Sequence[str] | None = None,
) -> list[str]:
    """Return the required arguments that are absent or empty.

    Args:
        tool_name: Requested tool
        args: Arguments produced by the model
        document_context: Open document text; satisfies ``create_file`` content
        required: Required names; defaults to REQUIRED_TOOL_ARGUMENTS

    Returns:
        Missing names in declaration order, empty for unknown tools
    """
    if required is None:
        required = REQUIRED_TOOL_ARGUMENTS.get(tool_name, ())
    args = args or {}

    missing = []
    for name in required:
        if tool_name == "create_file" and name == "content" and document_context:
            continue
        if _is_empty(args.get(name)):
            missing.append(name)
    return missing


def ensure_tool_arguments(
    tool_name: str,
    args: Mapping[str, Any] | None,
    document_context: str = "",
    required: Sequence[str] | None = None,
) -> None:
    """Raise MissingToolArguments unless every required argument is present."""
    missing = get_missing_tool_arguments(tool_name, args, document_context, required)
    if missing:
        raise MissingToolArguments(tool_name, missing)


@dataclass
class ToolRegistry:
    """Process-wide, read-only-after-startup catalog of ToolSpecs."""

    _specs: dict[str, ToolSpec] = field(default_factory=dict)

    @classmethod
    def of(cls, specs: Iterable[ToolSpec]) -> "ToolRegistry":
        registry = cls()
        for spec in specs:
            registry.register(spec)
        return registry

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"Tool {spec.name} is already registered")
        self._specs[spec.name] = spec

    def get(self, name: str) -> ToolSpec:
        try:
            return self._specs[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def names(self) -> list[str]:
        return list(self._specs)

    def required_args(self, name: str) -> tuple[str, ...]:
        """Declared requirements of a registered tool, else the fallback table."""
        spec = self._specs.get(name)
        if spec is not None and spec.required_args:
            return spec.required_args
        return REQUIRED_TOOL_ARGUMENTS.get(name, ())

    def enabled_for(self, preferences: "ToolPreferences") -> list[ToolSpec]:
        return [spec for spec in self._specs.values() if preferences.is_enabled(spec.preference)]
