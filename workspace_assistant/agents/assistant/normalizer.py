"""Normalization of loosely-typed client messages into canonical Messages.

Clients send history in several shapes: plain string content, part lists
produced by the client-side reducer (tool calls with their results folded
in), and a separate ``attachments`` array. Everything downstream relies on
the canonical form produced here.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from workspace_assistant.platform.agent.exceptions import MessageNormalizationError
from workspace_assistant.platform.agent.messages import (
    ContentPart,
    FileAttachmentPart,
    Message,
    Role,
    TextPart,
    ToolCallPart,
    ToolResultPart,
)

logger = logging.getLogger(__name__)


def normalize_messages(raw_messages: Sequence[Mapping[str, Any] | Message]) -> list[Message]:
    """Convert client messages to canonical Messages.

    Args:
        raw_messages: Message dicts as received on the wire, or Messages

    Returns:
        A new list of Messages; the input is not modified

    Raises:
        MessageNormalizationError: If a message is not an object or has an unknown role
    """
    return [_normalize_message(raw, index) for index, raw in enumerate(raw_messages)]


def _normalize_message(raw: Mapping[str, Any] | Message, index: int) -> Message:
    if isinstance(raw, Message):
        return raw
    if not isinstance(raw, Mapping):
        raise MessageNormalizationError("Message must be an object", index=index)

    try:
        role = Role(raw.get("role"))
    except ValueError:
        raise MessageNormalizationError(
            f"Unknown message role: {raw.get('role')!r}", index=index
        ) from None

    parts = list(_content_parts(raw.get("content"), index))
    parts.extend(_attachment_parts(raw.get("attachments"), parts, index))
    return Message(role=role, content=tuple(parts))


def _content_parts(content: Any, index: int) -> Iterable[ContentPart]:
    if content is None:
        return
    if isinstance(content, str):
        yield TextPart(content)
        return
    if not isinstance(content, list):
        raise MessageNormalizationError("Message content must be a string or a list", index=index)

    for part in content:
        if not isinstance(part, Mapping):
            logger.warning("Dropping non-object content part in message %d", index)
            continue
        yield from _normalize_part(part, index)


def _normalize_part(part: Mapping[str, Any], index: int) -> Iterable[ContentPart]:
    part_type = part.get("type")
    match part_type:
        case "text":
            text = part.get("text", part.get("value"))
            if isinstance(text, str):
                yield TextPart(text)
            else:
                logger.warning("Dropping text part without text in message %d", index)
        case "tool-call":
            call = ToolCallPart(
                tool_call_id=str(part.get("toolCallId", "")),
                tool_name=str(part.get("toolName", "")),
                args=dict(part.get("args") or {}),
            )
            yield call
            # The client reducer folds results into the call part
            if "result" in part:
                yield ToolResultPart(
                    tool_call_id=call.tool_call_id,
                    tool_name=call.tool_name,
                    result=part["result"],
                    is_error=bool(part.get("isError", False)),
                )
        case "tool-result":
            yield ToolResultPart(
                tool_call_id=str(part.get("toolCallId", "")),
                tool_name=str(part.get("toolName", "")),
                result=part.get("result"),
                is_error=bool(part.get("isError", False)),
            )
        case "file-attachment":
            attachment = _attachment(part)
            if attachment is not None:
                yield attachment
            else:
                logger.warning("Dropping incomplete file attachment in message %d", index)
        case _:
            logger.warning("Dropping unknown content part %r in message %d", part_type, index)


def _attachment_parts(
    attachments: Any, existing: list[ContentPart], index: int
) -> Iterable[FileAttachmentPart]:
    if not attachments:
        return
    if not isinstance(attachments, list):
        logger.warning("Ignoring non-list attachments in message %d", index)
        return

    seen_ids = {p.file_id for p in existing if isinstance(p, FileAttachmentPart)}
    for raw in attachments:
        attachment = _attachment(raw) if isinstance(raw, Mapping) else None
        if attachment is None:
            logger.warning("Dropping incomplete file attachment in message %d", index)
            continue
        if attachment.file_id in seen_ids:
            continue
        seen_ids.add(attachment.file_id)
        yield attachment


def _attachment(raw: Mapping[str, Any]) -> FileAttachmentPart | None:
    file_id = _first(raw, "fileId", "id", "file_id")
    file_name = _first(raw, "fileName", "name")
    file_path = _first(raw, "filePath", "path")
    if not (file_id and file_name and file_path):
        return None

    file_data = raw.get("fileData")
    mime_type = raw.get("mimeType")
    return FileAttachmentPart(
        file_id=str(file_id),
        file_name=str(file_name),
        file_path=str(file_path),
        file_data=file_data if isinstance(file_data, str) else None,
        mime_type=mime_type if isinstance(mime_type, str) else None,
    )


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def enrich_with_document_context(messages: list[Message], document_context: str) -> list[Message]:
    """Append the open document's text to the latest user message.

    Args:
        messages: Canonical history
        document_context: Document text; nothing happens when empty

    Returns:
        A new list; the last message is replaced when it is a user message
    """
    if not document_context or not messages or messages[-1].role != Role.USER:
        return list(messages)

    last = messages[-1]
    content = list(last.content)
    for i, part in enumerate(content):
        if isinstance(part, TextPart):
            content[i] = TextPart(f"{part.text}\n\n{document_context}")
            break
    else:
        content.insert(0, TextPart(document_context))

    return [*messages[:-1], replace(last, content=tuple(content))]
