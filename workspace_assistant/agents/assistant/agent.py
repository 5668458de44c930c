"""LangGraph assistant agent builder module.

This module provides the builder class for constructing the streaming,
tool-orchestrating assistant graph: a reasoner node that calls the model and
a tools node that runs one round of tool calls, looping until the model
answers without tools or asks for another round past the step limit.
"""

from typing import Any, Self

import httpx
from langchain_core.runnables import RunnableConfig
from langgraph.config import get_stream_writer
from langgraph.graph import END, START, StateGraph

from workspace_assistant.agents.assistant.context import RequestContext
from workspace_assistant.agents.assistant.dispatcher import ToolDispatcher
from workspace_assistant.agents.assistant.emitter import StreamEmitter
from workspace_assistant.agents.assistant.nodes import STEP_LIMIT_REASON, ReasonerNode, ToolsNode
from workspace_assistant.agents.assistant.normalizer import enrich_with_document_context
from workspace_assistant.agents.assistant.prompt import with_system_prompt
from workspace_assistant.agents.assistant.request import StreamRequestBody, build_request_context
from workspace_assistant.agents.assistant.state import AgentState
from workspace_assistant.agents.assistant.tools import ToolRegistry, default_registry
from workspace_assistant.platform.agent import events
from workspace_assistant.platform.agent.config import AgentConfig, AgentIdentity
from workspace_assistant.platform.agent.langgraph import LangGraphAgent
from workspace_assistant.platform.agent.llm_client import ModelAdapter
from workspace_assistant.platform.agent.messages import Message, StreamEvent
from workspace_assistant.platform.agent.state import LoopStatus
from workspace_assistant.platform.settings import LlmSettings, Settings


def route_after_reasoner(state: AgentState) -> str:
    if state.get("status") == LoopStatus.AWAITING_TOOLS:
        return "tools"
    return END


def _publish(event: StreamEvent) -> None:
    get_stream_writer()(event)


class AssistantAgentBuilder:
    """Builder for the LangGraph-based workspace assistant.

    This builder assembles all components needed for the assistant:
    - Model adapter that binds the request's enabled tools
    - Tool registry and dispatcher
    - Reasoner and tools nodes wired into a StateGraph
    """

    SLUG = "assistant"

    def __init__(
        self,
        agent_config: AgentConfig,
        registry: ToolRegistry,
        identity: AgentIdentity,
        model_adapter: ModelAdapter | None = None,
    ) -> None:
        """Initialize the builder with configuration.

        Args:
            agent_config: Loop limits, timeouts and pacing
            registry: Tool catalog shared by every request
            identity: Agent identity (name, description, slug)
            model_adapter: Adapter that calls the model. Inject for testing.
        """
        self.agent_config = agent_config
        self.registry = registry
        self.identity = identity
        self.model_adapter = model_adapter or ModelAdapter(identity.slug)

    def build(self) -> LangGraphAgent:
        """Compile the graph and wrap it in a streaming agent.

        Returns:
            A LangGraphAgent ready to run requests concurrently
        """
        reasoner_node = ReasonerNode(self.model_adapter, self.registry, self.agent_config)
        tools_node = ToolsNode(
            ToolDispatcher(
                self.registry, self.identity.slug, self.agent_config.tool_timeout_seconds
            )
        )

        workflow = StateGraph(AgentState)  # type: ignore[bad-specialization]

        workflow.add_node("reasoner", reasoner_node)  # type: ignore
        workflow.add_node("tools", tools_node)  # type: ignore

        workflow.add_edge(START, "reasoner")  # type: ignore
        workflow.add_conditional_edges("reasoner", route_after_reasoner, ["tools", END])
        workflow.add_edge("tools", "reasoner")  # type: ignore

        return LangGraphAgent(
            graph=workflow.compile(),
            identity=self.identity,
            initial_state_builder=self.build_initial_state,
            run_config_builder=self.build_run_config,
            outcome_builder=self.outcome_events,
        )

    @classmethod
    def default_builder(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        identity: AgentIdentity | None = None,
    ) -> Self:
        """Create a builder with the built-in tools and configured limits.

        Args:
            settings: Application settings
            http_client: Shared HTTP client used by the tools
            identity: Optional agent identity. Defaults to the workspace assistant.

        Returns:
            A configured AssistantAgentBuilder instance.
        """
        default_identity = AgentIdentity(
            name="Workspace Assistant",
            description="Answers questions and works in the user's workspace with tools",
            slug=cls.SLUG,
        )
        return cls(
            agent_config=AgentConfig(
                default_recursion_limit=settings.agent.default_recursion_limit,
                max_recursion_limit=settings.agent.max_recursion_limit,
                model_timeout_seconds=settings.agent.model_timeout_seconds,
                tool_timeout_seconds=settings.agent.tool_timeout_seconds,
                word_delay_seconds=settings.agent.word_delay_seconds,
            ),
            registry=default_registry(http_client, settings.tools),
            identity=identity or default_identity,
        )

    def build_request_context(
        self,
        body: StreamRequestBody,
        llm_settings: LlmSettings,
        auth_token: str | None = None,
    ) -> RequestContext:
        """Resolve a validated request payload against this agent's tools and limits."""
        return build_request_context(
            body, self.registry, self.agent_config, llm_settings, auth_token=auth_token
        )

    @staticmethod
    def build_initial_state(messages: list[Message], context: RequestContext) -> AgentState:
        """Get the initial state for one request.

        Args:
            messages: Normalized conversation history
            context: Request context

        Returns:
            Initial agent state with the system prompt and document context applied
        """
        history = enrich_with_document_context(messages, context.document_context)
        return AgentState(
            messages=with_system_prompt(history, context.date_time),
            step_count=0,
            status=LoopStatus.RUNNING,
            abort_reason=None,
            processed_tool_call_ids=frozenset(),
            pending_tool_calls=[],
            pending_text="",
            tool_executions=0,
            tools_used=[],
        )

    def build_run_config(self, context: RequestContext) -> RunnableConfig:
        """Per-request run configuration.

        Each tool round takes two graph steps; LangGraph's own limit sits
        above the tool-round bound so the loop's step limit fires first.
        """
        return {
            "configurable": {
                "request_context": context,
                "emitter": StreamEmitter(_publish, self.agent_config.word_delay_seconds),
            },
            "recursion_limit": 2 * context.recursion_limit + 5,
        }

    @staticmethod
    def outcome_events(final_state: dict[str, Any]) -> list[StreamEvent]:
        """Terminal events for a run that ended without raising."""
        total_steps = final_state.get("step_count", 0)
        summary = events.completion_summary(
            total_steps,
            final_state.get("tool_executions", 0),
            final_state.get("tools_used") or [],
        )

        if final_state.get("status") == LoopStatus.COMPLETED:
            outcome = [events.message_end(complete=True), summary]
            if total_steps > 0:
                outcome.append(events.step_progression(total_steps, total_steps))
            return outcome

        reason = final_state.get("abort_reason") or STEP_LIMIT_REASON
        return [events.message_end(complete=False, reason=reason), summary]
