"""HTTP client for the assistant stream endpoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from typing import Any

import httpx

from workspace_assistant.client.reducer import AssistantMessageReducer, parse_sse_lines
from workspace_assistant.platform.constants import USER_AGENT

logger = logging.getLogger(__name__)

STREAM_PATH = "/api/assistant/stream"


class AssistantStreamError(Exception):
    """Raised when the stream endpoint rejects a request.

    Attributes:
        status_code: HTTP status returned by the server
        body: Parsed JSON error body, or the raw text when it is not JSON
    """

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        summary = body.get("error") if isinstance(body, dict) else body
        super().__init__(f"Stream request failed (HTTP {status_code}): {summary}")


class AssistantStreamClient:
    """Consumes the assistant's event stream.

    Example:
        async with httpx.AsyncClient(base_url="http://localhost:8000") as http:
            client = AssistantStreamClient(http, token="...")
            message = await client.complete({"messages": [{"role": "user", "content": "Hi"}]})
            print(message.text)
    """

    def __init__(self, http_client: httpx.AsyncClient, token: str | None = None):
        """Initialize the client.

        Args:
            http_client: Client whose base URL points at the service
            token: Bearer token forwarded to workspace tools
        """
        self._http = http_client
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/event-stream", "User-Agent": USER_AGENT}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def stream(self, body: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        """POST a request and yield the server's events as they arrive.

        Raises:
            AssistantStreamError: If the server answers with an error status
        """
        async with self._http.stream(
            "POST", STREAM_PATH, json=body, headers=self._headers()
        ) as response:
            if response.is_error:
                await response.aread()
                try:
                    error_body = response.json()
                except ValueError:
                    error_body = response.text
                raise AssistantStreamError(response.status_code, error_body)

            async for line in response.aiter_lines():
                for event in parse_sse_lines([line]):
                    yield event

    async def complete(self, body: dict[str, Any]) -> AssistantMessageReducer:
        """Run a request to the end and return the folded assistant message."""
        reducer = AssistantMessageReducer()
        async with aclosing(self.stream(body)) as events:
            async for event in events:
                reducer.apply(event)
                if reducer.done:
                    break
        if not reducer.done:
            logger.warning("Stream ended without a done event")
        return reducer
