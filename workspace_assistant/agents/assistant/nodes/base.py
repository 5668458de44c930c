"""Base protocol for agent nodes and access to per-run resources."""

from typing import Any, Protocol, runtime_checkable

from langchain_core.runnables import RunnableConfig

from workspace_assistant.agents.assistant.context import RequestContext
from workspace_assistant.agents.assistant.emitter import StreamEmitter
from workspace_assistant.agents.assistant.state import AgentState


@runtime_checkable
class Node(Protocol):
    """Protocol for agent graph nodes.

    Nodes are callable objects that read AgentState plus the run's
    configurable values and return a partial state update.
    """

    async def __call__(self, state: AgentState, config: RunnableConfig) -> dict[str, Any]:
        """Process state and return a state update.

        Args:
            state: Current agent state
            config: Run configuration carrying the request context and emitter

        Returns:
            Partial state update merged by the graph reducers
        """
        ...


def run_resources(config: RunnableConfig) -> tuple[RequestContext, StreamEmitter]:
    """Return the request context and emitter placed in ``configurable``."""
    configurable = config.get("configurable") or {}
    return configurable["request_context"], configurable["emitter"]
