"""Built-in tools for the assistant agent."""

import httpx

from workspace_assistant.agents.assistant.tools.clock import create_clock_tool
from workspace_assistant.agents.assistant.tools.create_file import create_create_file_tool
from workspace_assistant.agents.assistant.tools.registry import (
    REQUIRED_TOOL_ARGUMENTS,
    ToolRegistry,
    ToolSpec,
    ensure_tool_arguments,
    get_missing_tool_arguments,
)
from workspace_assistant.agents.assistant.tools.web_search import create_web_search_tool
from workspace_assistant.platform.settings import ToolSettings


def default_registry(http_client: httpx.AsyncClient, settings: ToolSettings) -> ToolRegistry:
    """Registry with every built-in tool."""
    return ToolRegistry.of(
        [
            create_web_search_tool(http_client, settings),
            create_create_file_tool(http_client, settings),
            create_clock_tool(),
        ]
    )


__all__ = [
    "REQUIRED_TOOL_ARGUMENTS",
    "ToolRegistry",
    "ToolSpec",
    "default_registry",
    "ensure_tool_arguments",
    "get_missing_tool_arguments",
]
