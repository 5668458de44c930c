"""Immutable request-scoped context passed to the model adapter and tools."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Self

from workspace_assistant.agents.assistant.preferences import ToolPreferences
from workspace_assistant.platform.agent.config import LlmConfig


@dataclass(frozen=True)
class DateTimeContext:
    """The user's notion of "now", as sent by the client or taken from the server clock."""

    formatted: str
    iso_string: str

    @classmethod
    def now(cls, now: datetime | None = None) -> Self:
        now = (now or datetime.now(UTC)).astimezone()
        formatted = (
            f"{now:%A, %B} {now.day}, {now.year} at {now:%I:%M %p} ({now.tzname() or 'UTC'})"
        )
        iso_string = now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(formatted=formatted, iso_string=iso_string)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> Self | None:
        if not raw or not raw.get("formatted") or not raw.get("isoString"):
            return None
        return cls(formatted=str(raw["formatted"]), iso_string=str(raw["isoString"]))

    def describe(self) -> str:
        return f"Current date and time: {self.formatted}. ISO timestamp: {self.iso_string}"


@dataclass(frozen=True)
class RequestContext:
    """Everything one request's tool calls and model calls may read.

    Built once per request and never mutated, so concurrent requests on the
    same process cannot see each other's preferences or credentials.

    Attributes:
        preferences: Normalized tool preferences
        llm: Model selection for this request
        enabled_tools: Names of the tools offered to the model
        recursion_limit: Maximum tool rounds
        document_context: Text of the document open in the editor, may be empty
        date_time: The user's current date and time
        web_search_defaults: Default options merged into web_search calls
        auth_token: Caller's bearer token, forwarded to workspace APIs
        thread_id: Client conversation id, for logs only
    """

    preferences: ToolPreferences
    llm: LlmConfig
    enabled_tools: frozenset[str]
    recursion_limit: int
    document_context: str = ""
    date_time: DateTimeContext = field(default_factory=DateTimeContext.now)
    web_search_defaults: Mapping[str, Any] = field(default_factory=dict)
    auth_token: str | None = None
    thread_id: str | None = None

    def __post_init__(self):
        object.__setattr__(
            self, "web_search_defaults", MappingProxyType(dict(self.web_search_defaults))
        )
