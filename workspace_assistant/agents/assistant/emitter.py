"""Per-request stream emitter.

Graph nodes push wire events through a StreamEmitter, which publishes them
on LangGraph's custom stream in the order they are produced and suppresses
turns and tool calls that were already surfaced.
"""

import asyncio
from collections.abc import Callable

from workspace_assistant.platform.agent import events
from workspace_assistant.platform.agent.messages import StreamEvent, ToolCallRecord

EventSink = Callable[[StreamEvent], None]

_STATUS_MESSAGES = {
    "web_search": "Searching the web...",
    "tiptap_ai": "Processing document content...",
    "sheet_ai": "Processing spreadsheet edits...",
    "store_memory": "Storing information in memory...",
    "search_memory": "Searching memory...",
    "create_file": "Creating file...",
}

_COMPLETION_MESSAGES = {
    "web_search": "Web search completed",
    "tiptap_ai": "Document processing completed",
    "sheet_ai": "Spreadsheet edits ready",
    "store_memory": "Memory stored successfully",
    "search_memory": "Memory search completed",
    "create_file": "File created successfully",
}


def tool_status_message(tool_name: str) -> str:
    if tool_name in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[tool_name]
    if tool_name.startswith("gmail"):
        return "Accessing Gmail..."
    return f"Executing {tool_name}..."


def tool_completion_message(tool_name: str) -> str:
    if tool_name in _COMPLETION_MESSAGES:
        return _COMPLETION_MESSAGES[tool_name]
    if tool_name.startswith("gmail"):
        return "Gmail operation completed"
    return f"{tool_name} completed"


def split_text_chunks(text: str) -> list[str]:
    """Split text into word deltas that concatenate back to ``text``.

    Splits on single spaces; every word but the last keeps its trailing
    space. Empty chunks are dropped.
    """
    words = text.split(" ")
    chunks = [word + " " for word in words[:-1]] + [words[-1]]
    return [chunk for chunk in chunks if chunk]


class StreamEmitter:
    """Publishes one request's wire events.

    Attributes:
        processed_ai_messages: Ids of model turns whose text was streamed
        processed_tool_call_ids: Ids of tool calls that were started
    """

    def __init__(self, send: EventSink, word_delay_seconds: float = 0.0):
        """Initialize the emitter.

        Args:
            send: Delivers one event to the transport
            word_delay_seconds: Pause between text deltas (0 disables)
        """
        self._send = send
        self.word_delay_seconds = word_delay_seconds
        self.processed_ai_messages: set[str] = set()
        self.processed_tool_call_ids: set[str] = set()

    def emit(self, event: StreamEvent) -> None:
        self._send(event)

    async def emit_text(self, turn_id: str, text: str) -> bool:
        """Stream a model turn's text as word deltas.

        Returns:
            False if the turn was already streamed or has no visible text
        """
        if turn_id in self.processed_ai_messages:
            return False
        self.processed_ai_messages.add(turn_id)
        if not text.strip():
            return False

        chunks = split_text_chunks(text)
        for i, chunk in enumerate(chunks):
            self.emit(events.text_delta(chunk))
            if self.word_delay_seconds and i < len(chunks) - 1:
                await asyncio.sleep(self.word_delay_seconds)
        return True

    def tool_call_start(self, record: ToolCallRecord) -> bool:
        """Announce a validated tool call once per id."""
        if record.id in self.processed_tool_call_ids:
            return False
        self.processed_tool_call_ids.add(record.id)
        self.emit(events.tool_call_start(record))
        return True

    def tool_status(self, tool_name: str) -> None:
        self.emit(events.tool_status(tool_name, tool_status_message(tool_name)))

    def tool_result(self, record: ToolCallRecord) -> None:
        self.emit(events.tool_result(record))

    def tool_completion(self, tool_name: str) -> None:
        self.emit(events.tool_completion(tool_name, tool_completion_message(tool_name)))

    def thinking(self, message: str) -> None:
        self.emit(events.thinking(message))

    def step_progression(self, step: int, total_steps: int) -> None:
        self.emit(events.step_progression(step, total_steps))
