"""Assistant HTTP endpoints.

This module provides the streaming endpoint: the request is validated and
normalized up front, then the agent's events are sent as server-sent events.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from workspace_assistant.agents.assistant.agent import AssistantAgentBuilder
from workspace_assistant.agents.assistant.context import RequestContext
from workspace_assistant.agents.assistant.normalizer import normalize_messages
from workspace_assistant.agents.assistant.request import StreamRequestBody
from workspace_assistant.platform.agent.exceptions import MessageNormalizationError
from workspace_assistant.platform.agent.messages import Message
from workspace_assistant.platform.agent.protocol import Agent
from workspace_assistant.platform.observability import active_streams_gauge, stream_log_context
from workspace_assistant.platform.server.dependencies.agents import get_agent, get_agent_builder
from workspace_assistant.platform.server.dependencies.settings import (
    get_bearer_token,
    get_settings,
)
from workspace_assistant.platform.settings import Settings

logger = logging.getLogger(__name__)

assistant_router = APIRouter(
    prefix=f"/api/{AssistantAgentBuilder.SLUG}",
    tags=["agents"],
)

STREAM_PATH = f"/api/{AssistantAgentBuilder.SLUG}/stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _event_stream(
    request: Request,
    agent: Agent,
    messages: list[Message],
    context: RequestContext,
) -> AsyncIterator[str]:
    """Frame agent events as SSE, stopping when the client goes away."""
    active_streams_gauge.labels(STREAM_PATH).inc()
    try:
        with stream_log_context(thread_id=context.thread_id, agent=agent.slug):
            async with aclosing(agent.run_stream(messages, context)) as events:
                async for event in events:
                    if await request.is_disconnected():
                        logger.info("Client disconnected, closing stream")
                        break
                    yield event.to_sse()
    finally:
        active_streams_gauge.labels(STREAM_PATH).dec()


@assistant_router.post("/stream", response_model=None)
async def stream_assistant(
    body: StreamRequestBody,
    request: Request,
    agent: Agent = Depends(get_agent(AssistantAgentBuilder)),
    builder: AssistantAgentBuilder = Depends(get_agent_builder(AssistantAgentBuilder)),
    settings: Settings = Depends(get_settings),
    auth_token: str | None = Depends(get_bearer_token),
) -> StreamingResponse | JSONResponse:
    """Stream the assistant's response to a conversation.

    Args:
        body: Conversation history and per-request options
        request: Incoming request, polled for client disconnects
        agent: The assistant agent instance (injected dependency)
        builder: Builder holding the tool catalog and loop limits
        settings: Application settings
        auth_token: Caller's bearer token, forwarded to workspace tools

    Returns:
        Event stream, or a 400 JSON error when the messages cannot be normalized
    """
    try:
        messages = normalize_messages(body.messages)
    except MessageNormalizationError as e:
        logger.warning("Rejected stream request: %s", e)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid messages", "detail": [str(e)]},
        )

    context = builder.build_request_context(body, settings.llm, auth_token=auth_token)
    logger.info(
        "Streaming %d messages for thread %s with tools %s",
        len(messages),
        context.thread_id,
        sorted(context.enabled_tools),
    )
    return StreamingResponse(
        _event_stream(request, agent, messages, context),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
