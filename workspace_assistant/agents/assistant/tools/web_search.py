"""Web search tool backed by the Tavily search API."""

import logging
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_fixed,
)

from workspace_assistant.agents.assistant.tools.registry import ToolSpec
from workspace_assistant.platform.agent.exceptions import ToolExecutionError
from workspace_assistant.platform.settings import ToolSettings

if TYPE_CHECKING:
    from workspace_assistant.agents.assistant.context import RequestContext

logger = logging.getLogger(__name__)

TOOL_NAME = "web_search"
SNIPPET_LENGTH = 500
DEFAULT_MAX_RESULTS = 5

PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "The search query"},
        "searchDepth": {"type": "string", "enum": ["basic", "advanced"]},
        "maxResults": {"type": "integer", "minimum": 1, "maximum": 10},
        "includeAnswer": {"type": "boolean"},
        "includeRawContent": {"type": "boolean"},
        "includeImages": {"type": "boolean"},
        "includeImageDescriptions": {"type": "boolean"},
        "topic": {"type": "string", "description": "Search topic, e.g. general or news"},
        "timeRange": {"type": "string", "enum": ["day", "week", "month", "year"]},
        "includeDomains": {"type": "array", "items": {"type": "string"}},
        "excludeDomains": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["query"],
}


def clamp_max_results(value: Any) -> int:
    try:
        requested = int(value) if value is not None else DEFAULT_MAX_RESULTS
    except (TypeError, ValueError):
        requested = DEFAULT_MAX_RESULTS
    return max(1, min(requested, 10))


def build_tavily_payload(options: dict[str, Any]) -> dict[str, Any]:
    """Translate merged camelCase options into a Tavily request body."""
    payload: dict[str, Any] = {
        "query": options["query"],
        "search_depth": options.get("searchDepth") or "advanced",
        "include_answer": options.get("includeAnswer", True),
        "include_raw_content": options.get("includeRawContent", True),
        "include_images": options.get("includeImages", False),
        "include_image_descriptions": options.get("includeImageDescriptions", False),
        "topic": options.get("topic") or "general",
        "max_results": clamp_max_results(options.get("maxResults")),
    }
    if options.get("timeRange"):
        payload["time_range"] = options["timeRange"]
    for key, field_name in (
        ("includeDomains", "include_domains"),
        ("excludeDomains", "exclude_domains"),
    ):
        domains = options.get(key)
        if isinstance(domains, list) and domains:
            payload[field_name] = domains
    return payload


def parse_tavily_results(data: dict[str, Any], max_results: int) -> list[dict[str, str]]:
    results = []
    for item in data.get("results") or []:
        url = item.get("url")
        if not url:
            continue
        snippet = str(item.get("content") or item.get("raw_content") or "")
        results.append(
            {
                "title": str(item.get("title") or "Result"),
                "url": url,
                "snippet": snippet[:SNIPPET_LENGTH],
            }
        )
        if len(results) >= max_results:
            break
    return results


@retry(
    wait=wait_fixed(1),
    stop=(stop_after_attempt(3) | stop_after_delay(10)),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def post_search(
    http_client: httpx.AsyncClient, settings: ToolSettings, payload: dict[str, Any]
) -> httpx.Response:
    """POST a search to Tavily, retrying connection and read failures.

    Error statuses are returned as-is for the caller to raise.
    """
    return await http_client.post(
        settings.tavily_url,
        json=payload,
        headers={"Authorization": f"Bearer {settings.tavily_api_key}"},
        timeout=settings.http_timeout_seconds,
    )


def create_web_search_tool(http_client: httpx.AsyncClient, settings: ToolSettings) -> ToolSpec:
    """Create the web_search tool.

    Args:
        http_client: Shared HTTP client
        settings: Tool settings with the Tavily endpoint and key

    Returns:
        ToolSpec gated by the ``web_search`` preference
    """

    async def web_search(args: dict[str, Any], context: "RequestContext") -> dict[str, Any]:
        if not settings.tavily_api_key:
            raise ToolExecutionError(TOOL_NAME, "Web search is not configured")

        options = {**context.web_search_defaults, **args}
        payload = build_tavily_payload(options)
        try:
            response = await post_search(http_client, settings, payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ToolExecutionError(
                TOOL_NAME, e.response.text[:200] or "search request failed", e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ToolExecutionError(TOOL_NAME, str(e) or type(e).__name__) from e

        data = response.json()
        results = parse_tavily_results(data, payload["max_results"])
        logger.info("Web search returned %d results", len(results))

        result: dict[str, Any] = {"query": payload["query"], "results": results}
        if data.get("answer"):
            result["answer"] = data["answer"]
        return result

    return ToolSpec(
        name=TOOL_NAME,
        description=(
            "Search the web for current information. Returns result titles, URLs and "
            "snippets, plus a short answer when available."
        ),
        parameters=PARAMETERS,
        handler=web_search,
        required_args=("query",),
        preference="web_search",
    )
