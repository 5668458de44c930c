"""FastAPI application factory.

The lifespan builds everything requests share: one pooled HTTP client for
the tools, and the compiled assistant agent. Routes look both up on
``app.state`` through the dependencies in ``server.dependencies``.
"""

import asyncio
import logging
import os
import signal
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from workspace_assistant.agents.assistant import AssistantAgentBuilder, assistant_router
from workspace_assistant.platform.constants import USER_AGENT
from workspace_assistant.platform.observability import configure_logging, initialize_bugsnag
from workspace_assistant.platform.observability.metrics import prometheus_middleware
from workspace_assistant.platform.server.health import HealthCheck
from workspace_assistant.platform.server.middlewares import CorrelationIdMiddleware
from workspace_assistant.platform.server.routes import root as root_router
from workspace_assistant.platform.settings import Settings

logger = logging.getLogger(__name__)


def _json_logs(settings: Settings) -> bool:
    if settings.app_http.log_json is not None:
        return settings.app_http.log_json
    return settings.bugsnag.release_stage != "local"


def _tool_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.tools.http_timeout_seconds,
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        headers={"User-Agent": USER_AGENT},
    )


def lifespan_closure(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.app_http.log_level, json_output=_json_logs(settings))
        initialize_bugsnag(settings.bugsnag.api_key, settings.bugsnag.release_stage)

        if settings.bugsnag.release_stage != "local":
            GracefulShutdown(settings.app_http.drain_seconds).install()

        app.state.settings = settings
        app.state.http_client = _tool_http_client(settings)

        builder = AssistantAgentBuilder.default_builder(settings, app.state.http_client)
        app.state.agent_builders = {AssistantAgentBuilder: builder}
        app.state.agents = {AssistantAgentBuilder: builder.build()}
        logger.info("Assistant ready with tools: %s", ", ".join(builder.registry.names()))

        HealthCheck.enable()
        try:
            yield
        finally:
            HealthCheck.disable()
            await app.state.http_client.aclose()

    return lifespan


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are rejected with 400 before any stream opens."""
    logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "detail": jsonable_encoder(exc.errors())},
    )


def create_app(settings: Settings) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings instance

    Returns:
        Application with middleware, exception handlers and all routes
    """
    app = FastAPI(
        title="Workspace Assistant",
        lifespan=lifespan_closure(settings),
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.middleware("http")(prometheus_middleware)
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore
    if settings.opentelemetry.enabled:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=settings.opentelemetry.excluded_urls)

    app.include_router(root_router)
    app.include_router(assistant_router)
    return app


class GracefulShutdown:
    """Drain traffic before exiting on SIGINT or SIGTERM.

    The lifespan's shutdown half only runs once the server has stopped
    accepting connections, which is too late for a load balancer to notice.
    Instead the signal fails ``/health`` first, waits ``drain_seconds`` so
    open event streams can finish, then exits via SIGUSR1.
    """

    def __init__(self, drain_seconds: float):
        self.drain_seconds = drain_seconds
        self._task: asyncio.Task | None = None

    async def drain(self) -> None:
        HealthCheck.disable()
        logger.info("Shutdown requested, draining for %.0fs", self.drain_seconds)
        await asyncio.sleep(self.drain_seconds)
        os.kill(os.getpid(), signal.SIGUSR1)

    def _on_signal(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.drain())

    def install(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self._on_signal)
