"""Prometheus metrics for the HTTP surface.

Request durations are labelled by route template rather than raw path, so
``/api/assistant/stream`` is one series however many threads hit it. Event
streams outlive their handler, so open streams are tracked by a gauge that
the streaming route increments and decrements itself.
"""

from time import monotonic

import prometheus_client
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

UNMATCHED_PATH = "path-not-found"

# Log spaced, 3 per decade, from 200us to 20s
BUCKETS = (
    0.0002,
    0.0005,
    0.001,
    0.002,
    0.005,
    0.01,
    0.02,
    0.05,
    0.1,
    0.2,
    0.5,
    1,
    2,
    5,
    10,
    20,
    float("inf"),
)

http_histogram = prometheus_client.Histogram(
    name="http_request_duration_seconds",
    documentation="Time until response headers are ready (seconds)",
    labelnames=["method", "path", "http_status"],
    registry=prometheus_client.REGISTRY,
    buckets=BUCKETS,
)

active_streams_gauge = prometheus_client.Gauge(
    name="event_streams_in_progress",
    documentation="Server-sent event streams currently open",
    labelnames=["path"],
    registry=prometheus_client.REGISTRY,
)


def status_class(status: int) -> str:
    """Collapse a status code to its class, e.g. 404 -> "4XX"."""
    return f"{status // 100}XX"


def route_template(request: Request) -> str:
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return route.path
    return UNMATCHED_PATH


async def prometheus_middleware(request: Request, call_next) -> Response:
    """Record how long each request takes to produce its response headers.

    For event streams that is the time to the first byte, not the stream's
    lifetime; ``event_streams_in_progress`` covers the latter.
    """
    started = monotonic()
    response = await call_next(request)
    http_histogram.labels(
        request.method,
        route_template(request),
        status_class(response.status_code),
    ).observe(monotonic() - started)
    return response


def metrics() -> tuple[bytes, str]:
    """Render the default registry for the /metrics endpoint."""
    return (
        prometheus_client.generate_latest(prometheus_client.REGISTRY),
        prometheus_client.CONTENT_TYPE_LATEST,
    )
