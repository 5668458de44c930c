"""Reasoner node for LLM-based reasoning."""

import asyncio
import logging
from typing import Any

from langchain_core.runnables import RunnableConfig

from workspace_assistant.agents.assistant.state import AgentState
from workspace_assistant.agents.assistant.tools.registry import ToolRegistry
from workspace_assistant.platform.agent.config import AgentConfig
from workspace_assistant.platform.agent.exceptions import ModelTimeoutError
from workspace_assistant.platform.agent.llm_client import ModelAdapter
from workspace_assistant.platform.agent.messages import (
    Message,
    ModelTurn,
    TextPart,
    ToolCallRequest,
)
from workspace_assistant.platform.agent.state import LoopStatus

from .base import Node, run_resources

logger = logging.getLogger(__name__)

STEP_LIMIT_REASON = "step-limit"


class ReasonerNode(Node):
    """Node that asks the model for the next turn.

    Streams the turn's text, then either hands the new tool calls to the
    tools node or records the final answer. New tool calls after
    ``recursion_limit`` completed rounds abort the run unexecuted; a final
    answer is always accepted.
    """

    def __init__(
        self,
        model_adapter: ModelAdapter,
        registry: ToolRegistry,
        config: AgentConfig,
    ):
        """Initialize the reasoner node.

        Args:
            model_adapter: Adapter that calls the language model
            registry: Tool catalog
            config: Agent configuration
        """
        self.model_adapter = model_adapter
        self.registry = registry
        self.config = config

    async def _invoke_model(self, state: AgentState, config: RunnableConfig) -> ModelTurn:
        context, _ = run_resources(config)
        enabled = [
            self.registry.get(name)
            for name in self.registry.names()
            if name in context.enabled_tools
        ]
        try:
            async with asyncio.timeout(self.config.model_timeout_seconds):
                return await self.model_adapter.invoke(state["messages"], enabled, context.llm)
        except TimeoutError:
            raise ModelTimeoutError(context.llm.model, self.config.model_timeout_seconds) from None

    def _new_tool_calls(
        self, turn: ModelTurn, state: AgentState, config: RunnableConfig
    ) -> list[ToolCallRequest]:
        """Drop calls that were already executed, repeated, or not offered."""
        context, _ = run_resources(config)
        processed = state.get("processed_tool_call_ids") or frozenset()
        seen: set[str] = set()
        calls = []
        for call in turn.tool_calls:
            if call.id in processed or call.id in seen:
                logger.debug("Skipping duplicate tool call %s", call.id)
                continue
            if call.tool_name not in context.enabled_tools:
                logger.warning("Dropping call to disabled tool %s", call.tool_name)
                continue
            seen.add(call.id)
            calls.append(call)
        return calls

    async def __call__(self, state: AgentState, config: RunnableConfig) -> dict[str, Any]:
        """Invoke the model and decide whether tools run next.

        Args:
            state: Current agent state
            config: Run configuration

        Returns:
            State update with pending tool calls or the final answer
        """
        context, emitter = run_resources(config)
        logger.debug(
            "Step %d, messages count: %d", state.get("step_count", 0), len(state["messages"])
        )

        turn = await self._invoke_model(state, config)
        await emitter.emit_text(turn.id, turn.text)

        calls = self._new_tool_calls(turn, state, config)
        content = (TextPart(turn.text),) if turn.text else ()
        if calls and state.get("step_count", 0) >= context.recursion_limit:
            logger.info(
                "Step limit %d reached, dropping %d tool calls",
                context.recursion_limit,
                len(calls),
            )
            return {
                "messages": [Message.assistant(*content)] if content else [],
                "status": LoopStatus.ABORTED,
                "abort_reason": STEP_LIMIT_REASON,
                "pending_tool_calls": [],
                "pending_text": "",
            }
        if calls:
            return {
                "status": LoopStatus.AWAITING_TOOLS,
                "pending_tool_calls": calls,
                "pending_text": turn.text,
            }

        return {
            "messages": [Message.assistant(*content)],
            "status": LoopStatus.COMPLETED,
            "pending_tool_calls": [],
            "pending_text": "",
        }
