"""Tool node: runs one round of validated tool calls in model order."""

from typing import Any

from langchain_core.runnables import RunnableConfig

from workspace_assistant.agents.assistant.dispatcher import ToolDispatcher
from workspace_assistant.agents.assistant.state import AgentState
from workspace_assistant.platform.agent.messages import Message, TextPart
from workspace_assistant.platform.agent.state import LoopStatus

from .base import Node, run_resources


class ToolsNode(Node):
    """Node that executes the pending tool calls sequentially.

    A call with missing arguments aborts the run before it is announced.
    Any other tool failure is recorded as a failed result and the loop
    continues.
    """

    def __init__(self, dispatcher: ToolDispatcher):
        """Initialize the tools node.

        Args:
            dispatcher: Validates and executes tool calls
        """
        self.dispatcher = dispatcher

    async def __call__(self, state: AgentState, config: RunnableConfig) -> dict[str, Any]:
        """Execute the pending round and fold it into history.

        Args:
            state: Current agent state
            config: Run configuration

        Returns:
            State update with the round's messages and counters
        """
        context, emitter = run_resources(config)
        step = state.get("step_count", 0) + 1

        emitter.thinking(f"Processing step {step}...")
        emitter.step_progression(step, step + 1)

        records = []
        for request in state.get("pending_tool_calls") or []:
            record = self.dispatcher.prepare(request, context)
            if not emitter.tool_call_start(record):
                continue
            emitter.tool_status(record.tool_name)
            record = await self.dispatcher.execute(record, context)
            emitter.tool_result(record)
            emitter.tool_completion(record.tool_name)
            records.append(record)

        pending_text = state.get("pending_text") or ""
        call_message = Message.assistant(
            *([TextPart(pending_text)] if pending_text else []),
            *(record.to_call_part() for record in records),
        )
        result_messages = [Message.assistant(record.to_result_part()) for record in records]

        return {
            "messages": [call_message, *result_messages],
            "step_count": step,
            "processed_tool_call_ids": [record.id for record in records],
            "tool_executions": len(records),
            "tools_used": [record.tool_name for record in records],
            "pending_tool_calls": [],
            "pending_text": "",
            "status": LoopStatus.RUNNING,
        }
