"""LiteLLM chat client and the adapter the reasoner node calls.

``LlmClient`` is a thin Runnable over ``ChatLiteLLM`` that counts tokens per
agent and model. ``ModelAdapter`` owns one client per model configuration and
translates between canonical messages and LangChain's.
"""

import functools
import logging
from collections.abc import Callable, Sequence
from typing import Any, Protocol, Self

from langchain_core.messages import AIMessage
from langchain_core.runnables import Runnable, RunnableConfig
from langchain_core.tools import BaseTool
from langchain_litellm import ChatLiteLLM

from workspace_assistant.platform.agent.config import LlmConfig
from workspace_assistant.platform.agent.langgraph import LangGraphMessageParser
from workspace_assistant.platform.agent.messages import Message, ModelTurn
from workspace_assistant.platform.agent.metrics import record_agent_tokens

logger = logging.getLogger(__name__)

# Model ids come from requests, so only the most recently used clients are kept
MAX_CACHED_CLIENTS = 32


class LlmClient(Runnable):
    """ChatLiteLLM wrapped as a Runnable that records token usage.

    Args:
        agent_slug: Agent slug used for metric labels
        config: Model, credentials and sampling settings
        llm: Pre-built chat model, e.g. one with tools already bound
    """

    def __init__(self, agent_slug: str, config: LlmConfig, llm=None):
        self.agent_slug = agent_slug
        self.config = config
        self._llm = llm or ChatLiteLLM(
            model=config.model,
            api_key=config.api_key,
            api_base=config.base_url,
            temperature=config.temperature,
        )

    @classmethod
    def from_config(cls, agent_slug: str, config: LlmConfig) -> Self:
        return cls(agent_slug, config)

    @property
    def model_name(self) -> str:
        return self.config.model

    def bind_tools(self, tools: Sequence[BaseTool | dict[str, Any]]) -> Self:
        """Return a client whose model may call ``tools``; this one is unchanged."""
        return type(self)(self.agent_slug, self.config, llm=self._llm.bind_tools(list(tools)))

    @staticmethod
    def extract_tokens(message: AIMessage) -> tuple[int, int]:
        """(input, output) token counts, or zeros when the provider reports none."""
        usage = getattr(message, "usage_metadata", None) or {}
        return usage.get("input_tokens", 0), usage.get("output_tokens", 0)

    def _count(self, response: AIMessage) -> AIMessage:
        record_agent_tokens(self.agent_slug, self.model_name, *self.extract_tokens(response))
        return response

    def invoke(self, input, config: RunnableConfig | None = None, **kwargs):
        return self._count(self._llm.invoke(input, config=config, **kwargs))

    async def ainvoke(self, input, config: RunnableConfig | None = None, **kwargs):
        return self._count(await self._llm.ainvoke(input, config=config, **kwargs))


class BindableTool(Protocol):
    """A tool that can describe itself to a model."""

    name: str

    def as_openai_tool(self) -> dict[str, Any]: ...


class ModelAdapter:
    """Asks the language model for the next turn.

    Converts the canonical history to LangChain messages, offers only the
    tools it is given, and converts the reply into a ModelTurn. Provider
    errors propagate unchanged; retry policy belongs to the provider client.
    """

    def __init__(
        self,
        agent_slug: str,
        parser: LangGraphMessageParser | None = None,
        client_factory: Callable[[str, LlmConfig], LlmClient] | None = None,
        max_clients: int = MAX_CACHED_CLIENTS,
    ):
        """Initialize the adapter.

        Args:
            agent_slug: Agent slug used for token metric labels
            parser: Message converter, defaults to LangGraphMessageParser
            client_factory: Builds an LlmClient for a config. Inject for testing.
            max_clients: How many per-config clients to keep, least recently used first out
        """
        self._agent_slug = agent_slug
        self._parser = parser or LangGraphMessageParser()
        self._client_factory = client_factory or LlmClient.from_config
        self.client_for = functools.lru_cache(maxsize=max_clients)(self._build_client)

    def _build_client(self, config: LlmConfig) -> LlmClient:
        return self._client_factory(self._agent_slug, config)

    async def invoke(
        self,
        history: Sequence[Message],
        enabled_tools: Sequence[BindableTool],
        llm_config: LlmConfig,
    ) -> ModelTurn:
        """Produce the next model turn.

        Args:
            history: Canonical conversation history
            enabled_tools: Tools the model may call for this request
            llm_config: Model selection for this request

        Returns:
            ModelTurn with the reply text and any requested tool calls
        """
        client = self.client_for(llm_config)
        if enabled_tools:
            client = client.bind_tools([tool.as_openai_tool() for tool in enabled_tools])

        messages = self._parser.to_langchain_messages(history)
        logger.debug(
            "Invoking %s with %d messages and %d tools",
            llm_config.model,
            len(messages),
            len(enabled_tools),
        )
        response = await client.ainvoke(messages)
        return self._parser.to_model_turn(response)
