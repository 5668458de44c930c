"""Framework-agnostic message, tool-call and stream event types.

These types are the common vocabulary between the normalizer, the agent
loop, the model adapter and the wire protocol. Every type is immutable;
state transitions produce new values.
"""

import json
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, ClassVar


class Role(StrEnum):
    """Conversation roles accepted from clients."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    text: str

    type: ClassVar[str] = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolCallPart:
    """A tool invocation requested by the model."""

    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = field(default_factory=dict)

    type: ClassVar[str] = "tool-call"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "args": self.args,
        }


@dataclass(frozen=True)
class ToolResultPart:
    """The outcome of a tool call, referencing it by id."""

    tool_call_id: str
    tool_name: str
    result: Any
    is_error: bool = False

    type: ClassVar[str] = "tool-result"

    def to_dict(self) -> dict[str, Any]:
        data = {
            "type": self.type,
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "result": self.result,
        }
        if self.is_error:
            data["isError"] = True
        return data


@dataclass(frozen=True)
class FileAttachmentPart:
    """A file the user attached, optionally with inline base64 data."""

    file_id: str
    file_name: str
    file_path: str
    file_data: str | None = None
    mime_type: str | None = None

    type: ClassVar[str] = "file-attachment"

    def to_dict(self) -> dict[str, Any]:
        data = {
            "type": self.type,
            "fileId": self.file_id,
            "fileName": self.file_name,
            "filePath": self.file_path,
        }
        if self.file_data is not None:
            data["fileData"] = self.file_data
        if self.mime_type is not None:
            data["mimeType"] = self.mime_type
        return data


ContentPart = TextPart | ToolCallPart | ToolResultPart | FileAttachmentPart


@dataclass(frozen=True)
class Message:
    """One conversation turn in canonical form.

    Attributes:
        role: Conversation role
        content: Ordered content parts
    """

    role: Role
    content: tuple[ContentPart, ...] = ()

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role=Role.SYSTEM, content=(TextPart(text),))

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=(TextPart(text),))

    @classmethod
    def assistant(cls, *parts: ContentPart) -> "Message":
        return cls(role=Role.ASSISTANT, content=tuple(parts))

    @property
    def text(self) -> str:
        """Text parts joined by blank lines."""
        return "\n\n".join(p.text for p in self.content if isinstance(p, TextPart))

    def parts_of(self, part_type: type) -> list:
        return [p for p in self.content if isinstance(p, part_type)]

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": [p.to_dict() for p in self.content]}


@dataclass(frozen=True)
class ToolCallRequest:
    """A tool call as returned by the model, before validation."""

    id: str
    tool_name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelTurn:
    """One model response: text, tool calls, or both.

    Attributes:
        id: Provider message id, used to suppress re-surfaced turns
        text: Assistant text, possibly empty
        tool_calls: Requested tool calls in model order
    """

    id: str
    text: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = ()


class ToolCallStatus(StrEnum):
    REQUESTED = "requested"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ToolCallRecord:
    """Lifecycle of one tool call within a loop round.

    ``result`` is set only when completed and ``error`` only when failed.
    """

    id: str
    tool_name: str
    args: dict[str, Any]
    status: ToolCallStatus = ToolCallStatus.REQUESTED
    result: Any = None
    error: str | None = None

    @classmethod
    def from_request(cls, request: ToolCallRequest) -> "ToolCallRecord":
        return cls(id=request.id, tool_name=request.tool_name, args=request.args)

    def executing(self) -> "ToolCallRecord":
        return replace(self, status=ToolCallStatus.EXECUTING)

    def completed(self, result: Any) -> "ToolCallRecord":
        return replace(self, status=ToolCallStatus.COMPLETED, result=result, error=None)

    def failed(self, error: str) -> "ToolCallRecord":
        return replace(self, status=ToolCallStatus.FAILED, result=None, error=error)

    @property
    def payload(self) -> Any:
        """Result sent to the client and the model; failures become an error envelope."""
        if self.status == ToolCallStatus.FAILED:
            return {"success": False, "error": self.error}
        return self.result

    def to_call_part(self) -> ToolCallPart:
        return ToolCallPart(tool_call_id=self.id, tool_name=self.tool_name, args=self.args)

    def to_result_part(self) -> ToolResultPart:
        return ToolResultPart(
            tool_call_id=self.id,
            tool_name=self.tool_name,
            result=self.payload,
            is_error=self.status == ToolCallStatus.FAILED,
        )


class StreamEventType(StrEnum):
    MESSAGE_START = "message-start"
    TEXT_DELTA = "text-delta"
    TOOL_CALL_START = "tool-call-start"
    TOOL_STATUS = "tool-status"
    TOOL_RESULT = "tool-result"
    TOOL_COMPLETION = "tool-completion"
    THINKING = "thinking"
    STEP_PROGRESSION = "step-progression"
    COMPLETION_SUMMARY = "completion-summary"
    MESSAGE_END = "message-end"
    ERROR = "error"
    DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    """Streaming execution event.

    Attributes:
        event_type: Wire event type
        data: Event-specific payload, merged into the top-level JSON object
    """

    event_type: StreamEventType
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.event_type.value, **self.data}

    def to_sse(self) -> str:
        """Serialize as one server-sent-events frame."""
        return f"data: {json.dumps(self.to_dict(), ensure_ascii=False, default=str)}\n\n"
