"""Constructors for the wire events streamed to clients."""

import json
from collections.abc import Sequence
from typing import Any

from workspace_assistant.platform.agent.messages import (
    StreamEvent,
    StreamEventType,
    ToolCallRecord,
)


def message_start(role: str = "assistant") -> StreamEvent:
    return StreamEvent(StreamEventType.MESSAGE_START, {"role": role})


def text_delta(text: str) -> StreamEvent:
    return StreamEvent(StreamEventType.TEXT_DELTA, {"text": text})


def tool_call_start(record: ToolCallRecord) -> StreamEvent:
    return StreamEvent(
        StreamEventType.TOOL_CALL_START,
        {
            "part": {
                "type": "tool-call",
                "toolCallId": record.id,
                "toolName": record.tool_name,
                "args": record.args,
                "argsText": json.dumps(record.args, indent=2, ensure_ascii=False, default=str),
            }
        },
    )


def tool_status(tool_name: str, message: str) -> StreamEvent:
    return StreamEvent(StreamEventType.TOOL_STATUS, {"tool": tool_name, "message": message})


def tool_result(record: ToolCallRecord) -> StreamEvent:
    return StreamEvent(
        StreamEventType.TOOL_RESULT,
        {
            "part": {
                "type": "tool-result",
                "toolCallId": record.id,
                "toolName": record.tool_name,
                "result": record.payload,
            }
        },
    )


def tool_completion(tool_name: str, message: str) -> StreamEvent:
    return StreamEvent(StreamEventType.TOOL_COMPLETION, {"tool": tool_name, "message": message})


def thinking(message: str) -> StreamEvent:
    return StreamEvent(StreamEventType.THINKING, {"message": message})


def step_progression(step: int, total_steps: int) -> StreamEvent:
    return StreamEvent(StreamEventType.STEP_PROGRESSION, {"step": step, "totalSteps": total_steps})


def completion_summary(
    total_steps: int, tool_executions: int, tools_used: Sequence[str]
) -> StreamEvent:
    return StreamEvent(
        StreamEventType.COMPLETION_SUMMARY,
        {
            "totalSteps": total_steps,
            "toolExecutions": tool_executions,
            "toolsUsed": list(tools_used),
        },
    )


def message_end(complete: bool = True, reason: str | None = None) -> StreamEvent:
    """End of the assistant turn.

    A complete turn defaults to reason "stop"; an incomplete one must say why.
    """
    status: dict[str, Any] = {
        "type": "complete" if complete else "incomplete",
        "reason": reason or ("stop" if complete else "unknown"),
    }
    return StreamEvent(StreamEventType.MESSAGE_END, {"status": status})


def error(message: str) -> StreamEvent:
    return StreamEvent(StreamEventType.ERROR, {"error": message})


def done() -> StreamEvent:
    return StreamEvent(StreamEventType.DONE)
