"""Agent dependencies for FastAPI routes."""

from collections.abc import Callable
from typing import Any

from fastapi import Request

from workspace_assistant.platform.agent.protocol import Agent


def _lookup(registry: dict[type, Any], builder_cls: type) -> Any:
    if builder_cls not in registry:
        raise KeyError(
            f"Agent for {builder_cls.__name__} not found. "
            f"Available: {[cls.__name__ for cls in registry.keys()]}"
        )
    return registry[builder_cls]


def get_agent(builder_cls: type) -> Callable[[Request], Agent]:
    """Create a dependency that retrieves a cached agent by its builder class.

    Args:
        builder_cls: The agent builder class (e.g., AssistantAgentBuilder)

    Returns:
        A FastAPI dependency function that returns the cached agent

    Raises:
        KeyError: If the agent is not found in the registry

    Example:
        from workspace_assistant.agents.assistant.agent import AssistantAgentBuilder

        @router.post("/stream")
        async def stream(
            body: StreamRequestBody,
            agent: Agent = Depends(get_agent(AssistantAgentBuilder)),
        ):
            ...
    """

    def _get_agent(request: Request) -> Agent:
        return _lookup(request.app.state.agents, builder_cls)

    return _get_agent


def get_agent_builder(builder_cls: type) -> Callable[[Request], Any]:
    """Create a dependency that retrieves the builder an agent was built with."""

    def _get_agent_builder(request: Request) -> Any:
        return _lookup(request.app.state.agent_builders, builder_cls)

    return _get_agent_builder
