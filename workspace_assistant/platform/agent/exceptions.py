"""Exception hierarchy for the assistant agent.

Only MissingToolArguments and model failures abort a streamed response;
the other tool errors are folded into failed tool results.
"""

import re
from collections.abc import Sequence


class AssistantError(Exception):
    """Base exception for all assistant errors."""


class MessageNormalizationError(AssistantError):
    """Raised when a client message cannot be turned into a canonical Message."""

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        position = f" (message {index})" if index is not None else ""
        super().__init__(f"Invalid message{position}: {message}")


class MissingToolArguments(AssistantError):
    """Raised when a tool call lacks required arguments.

    Attributes:
        tool_name: Name of the requested tool
        missing_args: Required argument names that were absent or empty
    """

    def __init__(self, tool_name: str, missing_args: Sequence[str]):
        self.tool_name = tool_name
        self.missing_args = list(missing_args)
        super().__init__(
            f'Tool "{tool_name}" is missing required arguments: {", ".join(self.missing_args)}'
        )


class ToolNotFoundError(AssistantError):
    """Raised when a tool name is not in the registry."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f'Tool "{tool_name}" is not available')


class ToolExecutionError(AssistantError):
    """Raised by built-in tools when an external call fails."""

    def __init__(self, tool_name: str, message: str, status_code: int | None = None):
        self.tool_name = tool_name
        self.status_code = status_code
        status_info = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"{tool_name} failed{status_info}: {message}")


class ModelTimeoutError(AssistantError):
    """Raised when one model call exceeds its wall-clock budget."""

    def __init__(self, model: str, timeout_seconds: float):
        self.model = model
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Model {model} did not respond within {timeout_seconds}s")


_PROVIDER_MESSAGE_RE = re.compile(r'"message"\s*:\s*"((?:[^"\\]|\\.)+)"')


def describe_error(exc: BaseException) -> str:
    """Return the user-facing message for an error that aborted a stream.

    Provider errors for oversized images embed a JSON body; the inner
    ``message`` is more readable than the whole payload.
    """
    message = str(exc) or type(exc).__name__
    if "image exceeds 5 MB maximum" in message:
        match = _PROVIDER_MESSAGE_RE.search(message)
        if match:
            return match.group(1).replace('\\"', '"')
        return "File size exceeds 5 MB maximum limit"
    return message
