"""Folding a stream of wire events into one assistant message.

This is the consumer side of the stream protocol: it keeps a growing,
wire-shaped content list for the assistant turn and a separate progress
view for status-only events.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
INVALID_FORMAT_MESSAGE = "Invalid response format received"

_STATUS_ONLY_EVENTS = frozenset(
    {
        "message-start",
        "thinking",
        "step-progression",
        "tool-status",
        "tool-completion",
        "completion-summary",
    }
)


def parse_sse_lines(lines: Iterable[str]) -> Iterator[dict[str, Any]]:
    """Yield events from the ``data:`` lines of an event stream.

    Lines without the prefix are ignored. A line that is not valid JSON
    yields an ``error`` event instead.
    """
    for line in lines:
        if not line.startswith(DATA_PREFIX):
            continue
        try:
            event = json.loads(line[len(DATA_PREFIX) :])
        except json.JSONDecodeError:
            logger.warning("Unparseable stream line: %.200s", line)
            yield {"type": "error", "error": INVALID_FORMAT_MESSAGE}
            continue
        if isinstance(event, dict):
            yield event
        else:
            yield {"type": "error", "error": INVALID_FORMAT_MESSAGE}


@dataclass
class StreamProgress:
    """Latest values of the status-only events."""

    thinking: str | None = None
    tool_status: str | None = None
    tool_completion: str | None = None
    step: int = 0
    total_steps: int = 0
    summary: dict[str, Any] | None = None


@dataclass
class AssistantMessageReducer:
    """Accumulates one assistant turn from stream events.

    Attributes:
        content: Wire-shaped content parts
        status: Final status, set by ``message-end`` or an error
        done: Whether the ``done`` event arrived
        progress: Status-only event view
    """

    content: list[dict[str, Any]] = field(default_factory=list)
    status: dict[str, Any] | None = None
    done: bool = False
    progress: StreamProgress = field(default_factory=StreamProgress)

    @property
    def text(self) -> str:
        return "".join(part["text"] for part in self.content if part.get("type") == "text")

    @property
    def is_finished(self) -> bool:
        return self.status is not None

    def tool_calls(self) -> list[dict[str, Any]]:
        return [part for part in self.content if part.get("type") == "tool-call"]

    def apply(self, event: dict[str, Any]) -> None:
        """Fold one event into the message."""
        event_type = event.get("type")

        if event_type in _STATUS_ONLY_EVENTS:
            self._apply_progress(event_type, event)
            return
        if event_type == "done":
            self.done = True
            return
        if self.is_finished:
            logger.debug("Ignoring %s after message end", event_type)
            return

        match event_type:
            case "text-delta":
                self._append_text(event.get("text", ""))
            case "tool-call-start":
                part = dict(event.get("part") or {})
                part["type"] = "tool-call"
                part["status"] = "running"
                self.content.append(part)
            case "tool-result":
                self._attach_result(event.get("part") or {})
            case "error":
                self.content.append({"type": "text", "text": f"❌ Error: {event.get('error')}"})
                self.status = {"type": "incomplete", "reason": "error"}
            case "message-end":
                self.status = dict(event.get("status") or {"type": "complete", "reason": "stop"})
            case _:
                logger.debug("Ignoring unknown event type %s", event_type)

    def apply_all(self, events: Iterable[dict[str, Any]]) -> "AssistantMessageReducer":
        for event in events:
            self.apply(event)
        return self

    def to_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": list(self.content)}
        if self.status is not None:
            message["status"] = self.status
        return message

    def _append_text(self, text: str) -> None:
        if self.content and self.content[-1].get("type") == "text":
            last = self.content[-1]
            self.content[-1] = {**last, "text": last["text"] + text}
        else:
            self.content.append({"type": "text", "text": text})

    def _attach_result(self, result_part: dict[str, Any]) -> None:
        tool_call_id = result_part.get("toolCallId")
        for part in self.content:
            if part.get("type") == "tool-call" and part.get("toolCallId") == tool_call_id:
                part["result"] = result_part.get("result")
                part["status"] = "completed"
                return
        logger.debug("Dropping result for unknown tool call %s", tool_call_id)

    def _apply_progress(self, event_type: str, event: dict[str, Any]) -> None:
        progress = self.progress
        match event_type:
            case "thinking":
                progress.thinking = event.get("message")
            case "step-progression":
                progress.step = event.get("step", progress.step)
                progress.total_steps = event.get("totalSteps", progress.total_steps)
            case "tool-status":
                progress.tool_status = event.get("message")
            case "tool-completion":
                progress.tool_completion = event.get("message")
            case "completion-summary":
                progress.summary = {k: v for k, v in event.items() if k != "type"}
