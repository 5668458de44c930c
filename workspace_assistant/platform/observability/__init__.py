"""Logging, Prometheus metrics and Bugsnag reporting."""

from workspace_assistant.platform.observability.errors import initialize_bugsnag
from workspace_assistant.platform.observability.logging import (
    configure_logging,
    correlation_id_ctx,
    stream_log_context,
)
from workspace_assistant.platform.observability.metrics import (
    active_streams_gauge,
    prometheus_middleware,
)

__all__ = [
    "active_streams_gauge",
    "configure_logging",
    "correlation_id_ctx",
    "initialize_bugsnag",
    "prometheus_middleware",
    "stream_log_context",
]
