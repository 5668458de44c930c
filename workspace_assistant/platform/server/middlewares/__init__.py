from workspace_assistant.platform.server.middlewares.correlation import (
    REQUEST_ID_HEADER,
    CorrelationIdMiddleware,
    resolve_request_id,
)

__all__ = ["CorrelationIdMiddleware", "REQUEST_ID_HEADER", "resolve_request_id"]
