"""Client-side consumption of the assistant event stream."""

from workspace_assistant.client.reducer import (
    AssistantMessageReducer,
    StreamProgress,
    parse_sse_lines,
)
from workspace_assistant.client.stream import AssistantStreamClient, AssistantStreamError

__all__ = [
    "AssistantMessageReducer",
    "AssistantStreamClient",
    "AssistantStreamError",
    "StreamProgress",
    "parse_sse_lines",
]
