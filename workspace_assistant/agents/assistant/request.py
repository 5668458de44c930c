"""Request payload for the assistant stream endpoint and its request context."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workspace_assistant.agents.assistant.context import DateTimeContext, RequestContext
from workspace_assistant.agents.assistant.preferences import ToolPreferences
from workspace_assistant.agents.assistant.tools.registry import ToolRegistry
from workspace_assistant.platform.agent.config import AgentConfig, LlmConfig
from workspace_assistant.platform.settings import LlmSettings

WEB_SEARCH_OPTION_KEYS = frozenset(
    {
        "searchDepth",
        "maxResults",
        "includeAnswer",
        "includeRawContent",
        "includeImages",
        "includeImageDescriptions",
        "topic",
        "timeRange",
        "includeDomains",
        "excludeDomains",
    }
)


class DateTimePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    current_date: str | None = Field(None, alias="currentDate")
    current_time: str | None = Field(None, alias="currentTime")
    timezone: str | None = None
    iso_string: str | None = Field(None, alias="isoString")
    formatted: str | None = None


class StreamRequestBody(BaseModel):
    """Request payload for the assistant stream.

    Attributes:
        messages: Conversation history in any shape the normalizer accepts
        tool_preferences: Loosely-typed tool flags and model selection
        document_context: Text of the document open in the editor
        date_time_context: The user's current date and time
        recursion_limit: Maximum tool rounds for this request
        web_search_options: Defaults merged into web_search calls
        thread_id: Client conversation id
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[Any] = Field(..., description="Conversation history")
    tool_preferences: dict[str, Any] | None = Field(None, alias="toolPreferences")
    document_context: str | None = Field(None, alias="documentContext")
    date_time_context: DateTimePayload | None = Field(None, alias="dateTimeContext")
    recursion_limit: int | None = Field(None, alias="recursionLimit", ge=1)
    web_search_options: dict[str, Any] | None = Field(None, alias="webSearchOptions")
    thread_id: str | None = Field(None, alias="threadId")


def resolve_llm_config(preferences: ToolPreferences, settings: LlmSettings) -> LlmConfig:
    """Pick the model for a request from its preferences and the service defaults."""
    provider = preferences.model_provider or settings.default_provider
    model_id = preferences.model_id or (
        settings.anthropic_model if provider == "anthropic" else settings.openai_model
    )
    model = model_id if "/" in model_id else f"{provider}/{model_id}"
    return LlmConfig(
        model=model,
        api_key=settings.api_key,
        base_url=settings.api_base,
        temperature=settings.temperature,
    )


def build_request_context(
    body: StreamRequestBody,
    registry: ToolRegistry,
    agent_config: AgentConfig,
    llm_settings: LlmSettings,
    auth_token: str | None = None,
) -> RequestContext:
    """Build the immutable context for one stream request.

    Args:
        body: Validated request payload
        registry: Tool catalog used to resolve enabled tools
        agent_config: Loop limits
        llm_settings: Model defaults
        auth_token: Caller's bearer token, if any

    Returns:
        RequestContext for this request only
    """
    preferences = ToolPreferences.from_raw(body.tool_preferences)
    date_time = None
    if body.date_time_context is not None:
        date_time = DateTimeContext.from_raw(body.date_time_context.model_dump(by_alias=True))

    web_search_defaults = {
        key: value
        for key, value in (body.web_search_options or {}).items()
        if key in WEB_SEARCH_OPTION_KEYS and value is not None
    }
    return RequestContext(
        preferences=preferences,
        llm=resolve_llm_config(preferences, llm_settings),
        enabled_tools=frozenset(spec.name for spec in registry.enabled_for(preferences)),
        recursion_limit=agent_config.resolve_recursion_limit(body.recursion_limit),
        document_context=body.document_context or "",
        date_time=date_time or DateTimeContext.now(),
        web_search_defaults=web_search_defaults,
        auth_token=auth_token,
        thread_id=body.thread_id,
    )
