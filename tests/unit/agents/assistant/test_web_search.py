"""Unit tests for the web_search tool.

The Tavily API is mocked with respx; retry waits are disabled.
"""

import json

import httpx
import pytest
import respx
from tenacity import wait_none

from workspace_assistant.agents.assistant.tools.web_search import (
    build_tavily_payload,
    clamp_max_results,
    create_web_search_tool,
    parse_tavily_results,
    post_search,
)
from workspace_assistant.platform.agent.exceptions import ToolExecutionError
from workspace_assistant.platform.settings import ToolSettings


@pytest.fixture(autouse=True)
def disable_retry_wait():
    original = post_search.retry.wait  # type: ignore[attr-defined]
    post_search.retry.wait = wait_none()  # type: ignore[attr-defined]
    yield
    post_search.retry.wait = original  # type: ignore[attr-defined]


class TestBuildTavilyPayload:
    """Tests for build_tavily_payload."""

    def test_defaults(self):
        assert build_tavily_payload({"query": "python"}) == {
            "query": "python",
            "search_depth": "advanced",
            "include_answer": True,
            "include_raw_content": True,
            "include_images": False,
            "include_image_descriptions": False,
            "topic": "general",
            "max_results": 5,
        }

    def test_optional_filters(self):
        payload = build_tavily_payload(
            {
                "query": "q",
                "searchDepth": "basic",
                "topic": "news",
                "timeRange": "week",
                "includeDomains": ["python.org"],
                "excludeDomains": [],
            }
        )
        assert payload["search_depth"] == "basic"
        assert payload["topic"] == "news"
        assert payload["time_range"] == "week"
        assert payload["include_domains"] == ["python.org"]
        assert "exclude_domains" not in payload

    @pytest.mark.parametrize(("value", "expected"), [(None, 5), (3, 3), (0, 1), (50, 10), ("x", 5)])
    def test_clamp_max_results(self, value, expected):
        assert clamp_max_results(value) == expected


class TestParseTavilyResults:
    """Tests for parse_tavily_results."""

    def test_maps_and_truncates(self):
        data = {
            "results": [
                {"title": "A", "url": "https://a", "content": "x" * 600},
                {"url": "https://b", "raw_content": "raw"},
                {"title": "no url"},
            ]
        }
        results = parse_tavily_results(data, 5)
        assert results[0]["snippet"] == "x" * 500
        assert results[1] == {"title": "Result", "url": "https://b", "snippet": "raw"}
        assert len(results) == 2

    def test_respects_max(self):
        data = {"results": [{"url": f"https://{i}"} for i in range(4)]}
        assert len(parse_tavily_results(data, 2)) == 2


class TestWebSearchHandler:
    """Tests for the web_search handler against a respx-mocked Tavily."""

    URL = "https://search.test/search"

    @pytest.fixture
    def tool(self, tool_settings):
        return create_web_search_tool(httpx.AsyncClient(), tool_settings)

    @respx.mock
    async def test_success(self, tool, make_context):
        route = respx.post(self.URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "answer": "Python 3.13",
                    "results": [{"title": "Py", "url": "https://python.org", "content": "Latest"}],
                },
            )
        )
        context = make_context(web_search_defaults={"maxResults": 2, "topic": "news"})

        result = await tool.handler({"query": "latest python", "topic": "general"}, context)

        assert result == {
            "query": "latest python",
            "results": [{"title": "Py", "url": "https://python.org", "snippet": "Latest"}],
            "answer": "Python 3.13",
        }
        request = route.calls.last.request
        body = json.loads(request.content)
        assert request.headers["Authorization"] == "Bearer tvly-test"
        assert body["max_results"] == 2
        assert body["topic"] == "general"

    @respx.mock
    async def test_http_error_status_is_not_retried(self, tool, make_context):
        route = respx.post(self.URL).mock(return_value=httpx.Response(429, text="rate limited"))

        with pytest.raises(ToolExecutionError) as exc_info:
            await tool.handler({"query": "q"}, make_context())

        assert exc_info.value.status_code == 429
        assert "rate limited" in str(exc_info.value)
        assert route.call_count == 1

    @respx.mock
    async def test_transient_transport_error_is_retried(self, tool, make_context):
        route = respx.post(self.URL).mock(
            side_effect=[
                httpx.ConnectError("connection reset"),
                httpx.Response(200, json={"results": []}),
            ]
        )

        result = await tool.handler({"query": "q"}, make_context())

        assert result == {"query": "q", "results": []}
        assert route.call_count == 2

    @respx.mock
    async def test_transport_error_after_retries(self, tool, make_context):
        route = respx.post(self.URL).mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(ToolExecutionError, match="connection refused"):
            await tool.handler({"query": "q"}, make_context())

        assert route.call_count == 3

    async def test_not_configured(self, make_context):
        tool = create_web_search_tool(httpx.AsyncClient(), ToolSettings())

        with pytest.raises(ToolExecutionError, match="not configured"):
            await tool.handler({"query": "q"}, make_context())

    def test_spec(self, tool):
        assert tool.name == "web_search"
        assert tool.preference == "web_search"
        assert tool.required_args == ("query",)
