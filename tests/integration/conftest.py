"""Integration test fixtures.

This module provides shared fixtures for integration tests including:
- A scripted model adapter that drives the real compiled graph
- A tool registry of fake tools
- An app with the production routes and middleware around a stub agent
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Generator
from typing import Any
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from workspace_assistant.agents.assistant.agent import AssistantAgentBuilder
from workspace_assistant.agents.assistant.context import RequestContext
from workspace_assistant.agents.assistant.request import StreamRequestBody
from workspace_assistant.agents.assistant.routes import assistant_router
from workspace_assistant.agents.assistant.tools.registry import ToolRegistry, ToolSpec
from workspace_assistant.platform.agent import events
from workspace_assistant.platform.agent.config import AgentConfig, AgentIdentity
from workspace_assistant.platform.agent.messages import (
    Message,
    ModelTurn,
    StreamEvent,
)
from workspace_assistant.platform.observability.metrics import prometheus_middleware
from workspace_assistant.platform.server.app import request_validation_handler
from workspace_assistant.platform.server.health import HealthCheck
from workspace_assistant.platform.server.middlewares import CorrelationIdMiddleware
from workspace_assistant.platform.server.routes import root as root_router
from workspace_assistant.platform.settings import LlmSettings, Settings

# =============================================================================
# Model and Tool Fixtures
# =============================================================================


class ScriptedModelAdapter:
    """Fake model adapter that returns scripted turns in order.

    A turn may be an exception instance, which is raised instead. Once the
    script is exhausted, ``repeat`` (if set) builds every further turn.
    """

    def __init__(
        self,
        turns: list[ModelTurn | Exception],
        repeat: Callable[[int], ModelTurn] | None = None,
    ):
        self.turns = list(turns)
        self.repeat = repeat
        self.calls: list[dict[str, Any]] = []

    async def invoke(self, history, enabled_tools, llm_config) -> ModelTurn:
        self.calls.append(
            {
                "history": list(history),
                "tools": [tool.name for tool in enabled_tools],
                "model": llm_config.model,
            }
        )
        if self.turns:
            turn = self.turns.pop(0)
        elif self.repeat is not None:
            turn = self.repeat(len(self.calls))
        else:
            raise AssertionError("Model invoked more times than scripted")
        if isinstance(turn, Exception):
            raise turn
        return turn


async def lookup_handler(args: dict[str, Any], context: RequestContext) -> dict[str, Any]:
    return {"answer": f"result for {args['query']}"}


async def explode_handler(args: dict[str, Any], context: RequestContext) -> Any:
    raise RuntimeError("tool exploded")


async def slow_handler(args: dict[str, Any], context: RequestContext) -> str:
    await asyncio.sleep(5)
    return "too late"


def make_registry() -> ToolRegistry:
    return ToolRegistry.of(
        [
            ToolSpec(
                name="lookup",
                description="Look something up",
                parameters={"type": "object", "properties": {"query": {"type": "string"}}},
                handler=lookup_handler,
                required_args=("query",),
            ),
            ToolSpec(
                name="explode",
                description="Always fails",
                parameters={"type": "object", "properties": {}},
                handler=explode_handler,
            ),
            ToolSpec(
                name="slow",
                description="Never finishes in time",
                parameters={"type": "object", "properties": {}},
                handler=slow_handler,
            ),
            ToolSpec(
                name="browse",
                description="Browser tool, off by default",
                parameters={"type": "object", "properties": {}},
                handler=lookup_handler,
                preference="browser",
            ),
        ]
    )


@pytest.fixture
def stub_identity() -> AgentIdentity:
    """Create a stub agent identity with canned test data."""
    return AgentIdentity(
        name="Test Assistant",
        description="An assistant for integration tests",
        slug="test-assistant",
    )


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(
        default_recursion_limit=10,
        max_recursion_limit=50,
        model_timeout_seconds=5.0,
        tool_timeout_seconds=0.2,
        word_delay_seconds=0.0,
    )


@pytest.fixture
def make_builder(
    agent_config: AgentConfig, stub_identity: AgentIdentity
) -> Callable[[ScriptedModelAdapter], AssistantAgentBuilder]:
    """Factory for builders wired to a scripted model and the fake tools."""

    def _make(model: ScriptedModelAdapter) -> AssistantAgentBuilder:
        return AssistantAgentBuilder(
            agent_config=agent_config,
            registry=make_registry(),
            identity=stub_identity,
            model_adapter=model,  # type: ignore[arg-type]
        )

    return _make


@pytest.fixture
def make_model() -> Callable[..., ScriptedModelAdapter]:
    """Factory for scripted model adapters, for tests that build the agent themselves."""
    return ScriptedModelAdapter


@pytest.fixture
def make_context(
    make_builder: Callable[[ScriptedModelAdapter], AssistantAgentBuilder],
) -> Callable[..., RequestContext]:
    """Factory for request contexts resolved from a request payload."""

    def _make(**payload: Any) -> RequestContext:
        builder = make_builder(ScriptedModelAdapter([]))
        body = StreamRequestBody.model_validate({"messages": [], **payload})
        return builder.build_request_context(body, LlmSettings())

    return _make


@pytest.fixture
def run_agent(
    make_builder: Callable[[ScriptedModelAdapter], AssistantAgentBuilder],
    make_context: Callable[..., RequestContext],
):
    """Run the compiled graph against scripted model turns.

    Returns the emitted events and the model, whose ``calls`` record what it was sent.
    """

    async def _run(
        turns: list[ModelTurn | Exception],
        history: list[Message] | None = None,
        repeat: Callable[[int], ModelTurn] | None = None,
        **payload: Any,
    ) -> tuple[list[StreamEvent], ScriptedModelAdapter]:
        model = ScriptedModelAdapter(turns, repeat=repeat)
        agent = make_builder(model).build()
        context = make_context(**payload)
        messages = history if history is not None else [Message.user("Hello")]
        return [event async for event in agent.run_stream(messages, context)], model

    return _run


# =============================================================================
# FastAPI App Fixtures (Shallow - no middleware, minimal lifespan)
# =============================================================================


@pytest.fixture
def stub_agent(stub_identity: AgentIdentity) -> Mock:
    """Create a stub agent that streams canned events.

    This is a stub (not a mock) because it primarily provides predetermined
    return values rather than verifying interactions.
    """
    agent = Mock()
    agent.identity = stub_identity
    agent.name = stub_identity.name
    agent.slug = stub_identity.slug
    agent.received = []

    async def stream_generator(
        messages: list[Message], context: RequestContext
    ) -> AsyncIterator[StreamEvent]:
        agent.received.append((messages, context))
        yield events.message_start()
        yield events.text_delta("Hello ")
        yield events.text_delta("there")
        yield events.message_end()
        yield events.done()

    agent.run_stream = stream_generator
    return agent


@pytest.fixture
def test_app(
    stub_agent: Mock,
    make_builder: Callable[[ScriptedModelAdapter], AssistantAgentBuilder],
) -> FastAPI:
    """App wired like production but without the lifespan.

    The stub agent stands in for the compiled graph, so routes, middleware
    and dependencies are exercised without a model.
    """
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
    app.middleware("http")(prometheus_middleware)
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore

    app.state.settings = Settings()
    app.state.agent_builders = {AssistantAgentBuilder: make_builder(ScriptedModelAdapter([]))}
    app.state.agents = {AssistantAgentBuilder: stub_agent}

    app.include_router(root_router)
    app.include_router(assistant_router)

    return app


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    """Create a test client for the test app.

    No context manager needed since we're not using lifespan.
    """
    return TestClient(test_app)


@pytest.fixture
def client_with_health_enabled(test_app: FastAPI) -> Generator[TestClient]:
    """Create a test client with health checks enabled."""
    HealthCheck.enable()
    yield TestClient(test_app)
    HealthCheck.disable()


@pytest.fixture
def client_with_health_disabled(test_app: FastAPI) -> Generator[TestClient]:
    """Create a test client with health checks disabled."""
    HealthCheck.disable()
    yield TestClient(test_app)
