"""LangGraph state definition for the assistant agent."""

import operator
from typing import Annotated

from workspace_assistant.platform.agent.messages import ToolCallRequest
from workspace_assistant.platform.agent.state import BaseAgentState, merge_ids, merge_unique


class AgentState(BaseAgentState):
    """LangGraph state for the assistant agent.

    Inherits from BaseAgentState and adds:
        processed_tool_call_ids: Ids of tool calls already executed
        pending_tool_calls: The round awaiting execution
        pending_text: Text the model produced alongside the pending calls
        tool_executions: Number of tool calls executed
        tools_used: Distinct tool names, in first-use order
    """

    processed_tool_call_ids: Annotated[frozenset[str], merge_ids]
    pending_tool_calls: list[ToolCallRequest]
    pending_text: str
    tool_executions: Annotated[int, operator.add]
    tools_used: Annotated[list[str], merge_unique]
