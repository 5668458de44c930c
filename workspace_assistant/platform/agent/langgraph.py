"""LangGraph integration components.

This module provides LangGraph-specific implementations including:
- LangGraphMessageParser: Converts canonical messages to and from LangChain messages
- LangGraphAgent: A streaming agent that implements the Agent protocol
"""

import base64
import binascii
import json
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing
from typing import Any, Protocol

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from langchain_core.runnables import RunnableConfig
from langgraph.graph.state import CompiledStateGraph
from opentelemetry import trace

from workspace_assistant.platform.agent import events
from workspace_assistant.platform.agent.config import AgentIdentity
from workspace_assistant.platform.agent.exceptions import AssistantError, describe_error
from workspace_assistant.platform.agent.messages import (
    FileAttachmentPart,
    Message,
    ModelTurn,
    Role,
    StreamEvent,
    ToolCallPart,
    ToolCallRequest,
    ToolResultPart,
)
from workspace_assistant.platform.agent.metrics import (
    AgentMetricsLabels,
    collect_agent_metrics,
)
from workspace_assistant.platform.agent.protocol import Agent

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_TEXT_MIME_PREFIXES = ("text/",)
_TEXT_MIME_TYPES = frozenset(
    {"application/json", "application/xml", "application/csv", "application/x-yaml"}
)


class LangGraphMessageParser:
    """Parser between canonical Messages and LangChain messages.

    Outbound, the canonical history becomes the message list a chat model
    accepts: tool calls without results are left out, as are results whose
    call is unknown. Inbound, an AIMessage becomes a ModelTurn.
    """

    def to_langchain_messages(self, messages: Sequence[Message]) -> list[BaseMessage]:
        """Convert canonical history to LangChain messages.

        Args:
            messages: Canonical conversation history

        Returns:
            LangChain messages in the same order
        """
        resolved_ids = {
            part.tool_call_id for message in messages for part in message.parts_of(ToolResultPart)
        }
        announced_ids: set[str] = set()
        answered_ids: set[str] = set()

        converted: list[BaseMessage] = []
        for message in messages:
            if message.role == Role.SYSTEM:
                converted.append(SystemMessage(content=message.text))
            elif message.role == Role.USER:
                converted.append(HumanMessage(content=self._user_content(message)))
            else:
                converted.extend(
                    self._assistant_messages(message, resolved_ids, announced_ids, answered_ids)
                )
        return converted

    def to_model_turn(self, message: AIMessage) -> ModelTurn:
        """Convert a model reply to a ModelTurn.

        Args:
            message: AIMessage returned by the chat model

        Returns:
            ModelTurn with text and tool calls in model order
        """
        tool_calls = [
            ToolCallRequest(
                id=call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
                tool_name=call["name"],
                args=dict(call.get("args") or {}),
            )
            for call in message.tool_calls
        ]
        # Unparseable arguments still surface as calls so validation can reject them
        for call in getattr(message, "invalid_tool_calls", None) or []:
            logger.warning("Model produced unparseable arguments for tool %s", call.get("name"))
            tool_calls.append(
                ToolCallRequest(
                    id=call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
                    tool_name=call.get("name") or "unknown",
                    args={},
                )
            )
        return ModelTurn(
            id=message.id or f"turn_{uuid.uuid4().hex}",
            text=self._extract_content(message),
            tool_calls=tuple(tool_calls),
        )

    def _assistant_messages(
        self,
        message: Message,
        resolved_ids: set[str],
        announced_ids: set[str],
        answered_ids: set[str],
    ) -> list[BaseMessage]:
        calls = [
            part
            for part in message.parts_of(ToolCallPart)
            if part.tool_call_id in resolved_ids and part.tool_call_id not in announced_ids
        ]
        text = message.text

        converted: list[BaseMessage] = []
        if text or calls:
            converted.append(
                AIMessage(
                    content=text,
                    tool_calls=[
                        {
                            "id": call.tool_call_id,
                            "name": call.tool_name,
                            "args": call.args,
                            "type": "tool_call",
                        }
                        for call in calls
                    ],
                )
            )
            announced_ids.update(call.tool_call_id for call in calls)

        for result in message.parts_of(ToolResultPart):
            if result.tool_call_id not in announced_ids or result.tool_call_id in answered_ids:
                continue
            converted.append(
                ToolMessage(
                    content=self._stringify(result.result),
                    tool_call_id=result.tool_call_id,
                    name=result.tool_name,
                    status="error" if result.is_error else "success",
                )
            )
            answered_ids.add(result.tool_call_id)
        return converted

    def _user_content(self, message: Message) -> str | list[dict[str, Any]]:
        """Build user content, inlining attachments the model can read."""
        attachments = message.parts_of(FileAttachmentPart)
        text = message.text
        if not attachments:
            return text

        notes: list[str] = []
        blocks: list[dict[str, Any]] = []
        for attachment in attachments:
            block = self._attachment_block(attachment)
            if block is not None:
                blocks.append(block)
            else:
                notes.append(self._attachment_note(attachment))

        head = "\n\n".join(segment for segment in [text, *notes] if segment)
        if not blocks:
            return head or "User attached files."
        return [{"type": "text", "text": head or "User attached files."}, *blocks]

    @staticmethod
    def _attachment_block(attachment: FileAttachmentPart) -> dict[str, Any] | None:
        mime_type = attachment.mime_type or ""
        if not attachment.file_data or not mime_type:
            return None
        if mime_type.startswith("image/"):
            return {
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{attachment.file_data}"},
            }
        if mime_type.startswith(_TEXT_MIME_PREFIXES) or mime_type in _TEXT_MIME_TYPES:
            try:
                decoded = base64.b64decode(attachment.file_data, validate=True)
            except (binascii.Error, ValueError):
                logger.warning("Attachment %s has invalid base64 data", attachment.file_name)
                return None
            return {
                "type": "text",
                "text": f"Attachment: {attachment.file_name}\n\n"
                + decoded.decode("utf-8", errors="replace"),
            }
        return None

    @staticmethod
    def _attachment_note(attachment: FileAttachmentPart) -> str:
        if attachment.file_data:
            size_kb = max(1, round(len(attachment.file_data) * 3 / 4 / 1024))
            return f"Attachment: {attachment.file_name} (~{size_kb} KB)"
        return f"Attachment: {attachment.file_name} ({attachment.file_path})"

    @staticmethod
    def _stringify(result: Any) -> str:
        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False, default=str)

    @staticmethod
    def _extract_content(msg: BaseMessage) -> str:
        """Extract text content from a message.

        Args:
            msg: LangChain message

        Returns:
            Text content; block lists keep only their text blocks
        """
        content = msg.content
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return "".join(
                p if isinstance(p, str) else p.get("text", "")
                for p in content
                if isinstance(p, str) or (isinstance(p, dict) and p.get("type") == "text")
            )
        return str(content)


class InitialStateBuilder(Protocol):
    """Protocol for building the initial graph state for one request."""

    def __call__(self, messages: list[Message], context: Any) -> dict[str, Any]: ...


class RunConfigBuilder(Protocol):
    """Protocol for building the per-request LangGraph run configuration."""

    def __call__(self, context: Any) -> RunnableConfig: ...


OutcomeBuilder = Callable[[dict[str, Any]], list[StreamEvent]]


class LangGraphAgent(Agent):
    """A configured, streaming LangGraph agent instance.

    Graph nodes publish wire events through LangGraph's custom stream; this
    class frames them with ``message-start``, the terminal events derived
    from the final state, and ``done``. Errors raised by the graph end the
    stream with ``error`` followed by ``done``.
    """

    def __init__(
        self,
        graph: CompiledStateGraph,
        identity: AgentIdentity,
        initial_state_builder: InitialStateBuilder,
        run_config_builder: RunConfigBuilder,
        outcome_builder: OutcomeBuilder,
    ) -> None:
        """Initialize the agent.

        Args:
            graph: Compiled LangGraph ready for execution
            identity: Agent identity information
            initial_state_builder: Builds the initial state from history and context
            run_config_builder: Builds the per-request run configuration
            outcome_builder: Turns the final state into terminal events
        """
        self._graph = graph
        self._identity = identity
        self._initial_state_builder = initial_state_builder
        self._run_config_builder = run_config_builder
        self._outcome_builder = outcome_builder

    @property
    def identity(self) -> AgentIdentity:
        return self._identity

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def slug(self) -> str:
        return self._identity.slug

    async def run_stream(
        self,
        messages: list[Message],
        context: Any,
    ) -> AsyncIterator[StreamEvent]:
        """Run the agent with streaming output.

        Args:
            messages: Canonical conversation history
            context: Immutable request-scoped context

        Yields:
            Wire events in emission order, always ending with ``done``
        """
        init_state = self._initial_state_builder(messages=messages, context=context)
        run_config = self._run_config_builder(context)
        final_state: dict[str, Any] = init_state

        yield events.message_start()
        try:
            with tracer.start_as_current_span(self.name):
                async with collect_agent_metrics(AgentMetricsLabels(self.slug)):
                    stream = self._graph.astream(
                        init_state,
                        config=run_config,
                        stream_mode=["custom", "values"],
                    )
                    # Closing this generator early cancels the graph run
                    async with aclosing(stream):
                        async for mode, chunk in stream:
                            if mode == "custom":
                                yield chunk
                            elif mode == "values":
                                final_state = chunk
        except AssistantError as exc:
            logger.warning("Agent %s aborted: %s", self.slug, exc)
            yield events.error(describe_error(exc))
            yield events.done()
            return
        except Exception as exc:
            logger.exception("Agent %s failed: %s", self.slug, exc)
            yield events.error(describe_error(exc))
            yield events.done()
            return

        for event in self._outcome_builder(final_state):
            yield event
        yield events.done()
