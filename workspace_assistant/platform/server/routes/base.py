"""Platform endpoints: readiness, service info and Prometheus exposition."""

import logging

from fastapi import APIRouter, Request, Response

from workspace_assistant.platform.observability.metrics import metrics as render_metrics
from workspace_assistant.platform.server.health import HealthCheck, metadata

logger = logging.getLogger(__name__)

base_router = APIRouter(tags=["base"])


@base_router.get("/health")
async def health():
    """200 while ready, 404 once draining for shutdown."""
    if HealthCheck.status():
        return {"status": "OK"}
    logger.info("health-check: fail, service is draining")
    return Response(status_code=404)


@base_router.get("/info")
async def info(request: Request):
    agents = getattr(request.app.state, "agents", {})
    return metadata.info(agents=sorted(agent.slug for agent in agents.values()))


@base_router.get("/metrics")
async def metrics():
    body, media_type = render_metrics()
    return Response(body, media_type=media_type)
