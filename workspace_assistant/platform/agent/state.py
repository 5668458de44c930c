"""Base LangGraph state definition for agents."""

from collections.abc import Iterable
from enum import StrEnum
from typing import Annotated, TypedDict

from workspace_assistant.platform.agent.messages import Message


def append_messages(existing: list[Message], new: list[Message]) -> list[Message]:
    """Reducer that appends new messages; history only ever grows."""
    return [*(existing or []), *(new or [])]


def merge_ids(existing: frozenset[str], new: Iterable[str]) -> frozenset[str]:
    """Reducer that unions id sets."""
    return frozenset(existing or ()) | frozenset(new or ())


def merge_unique(existing: list[str], new: list[str]) -> list[str]:
    """Reducer that appends unseen values, keeping first-seen order."""
    result = list(existing or [])
    for value in new or []:
        if value not in result:
            result.append(value)
    return result


class LoopStatus(StrEnum):
    RUNNING = "running"
    AWAITING_TOOLS = "awaiting_tools"
    COMPLETED = "completed"
    ABORTED = "aborted"


class BaseAgentState(TypedDict):
    """Base LangGraph state shared across agents.

    Attributes:
        messages: Canonical conversation history, appended via reducer
        step_count: Completed tool rounds
        status: Current loop state
        abort_reason: Why the loop aborted, when status is ABORTED
    """

    messages: Annotated[list[Message], append_messages]
    step_count: int
    status: LoopStatus
    abort_reason: str | None
