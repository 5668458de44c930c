"""Request id propagation for logs and responses."""

import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from workspace_assistant.platform.observability.logging import correlation_id_ctx

REQUEST_ID_HEADER = "X-Request-ID"

# Ids from callers are echoed into logs and headers, so only plain tokens are kept
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(header_value: str | None) -> str:
    """Return the caller's request id if it is usable, else a new UUID."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id.

    The id is visible to log records through ``correlation_id_ctx``, to route
    handlers as ``request.state.request_id``, and to the caller in the
    ``X-Request-ID`` response header. Streamed bodies are produced inside the
    same context, so events logged while streaming carry the id too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = correlation_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
