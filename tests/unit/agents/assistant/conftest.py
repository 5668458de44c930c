"""Shared fixtures for assistant unit tests."""

from collections.abc import Callable

import pytest

from workspace_assistant.agents.assistant.context import DateTimeContext, RequestContext
from workspace_assistant.agents.assistant.preferences import ToolPreferences
from workspace_assistant.platform.agent.config import LlmConfig
from workspace_assistant.platform.settings import ToolSettings


@pytest.fixture
def date_time() -> DateTimeContext:
    return DateTimeContext(
        formatted="Monday, January 6, 2025 at 03:04 PM (UTC)",
        iso_string="2025-01-06T15:04:05.000Z",
    )


@pytest.fixture
def make_context(date_time: DateTimeContext) -> Callable[..., RequestContext]:
    """Factory for RequestContexts with test defaults."""

    def _make(**overrides) -> RequestContext:
        values = {
            "preferences": ToolPreferences(),
            "llm": LlmConfig(model="anthropic/test-model"),
            "enabled_tools": frozenset({"web_search", "create_file", "get_current_datetime"}),
            "recursion_limit": 5,
            "date_time": date_time,
            "auth_token": "user-token",
        }
        values.update(overrides)
        return RequestContext(**values)

    return _make


@pytest.fixture
def tool_settings() -> ToolSettings:
    return ToolSettings(
        tavily_api_key="tvly-test",
        tavily_url="https://search.test/search",
        files_api_url="https://files.test/api",
    )
