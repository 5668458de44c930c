"""Validation and execution of model-requested tool calls."""

import asyncio
import logging
from time import monotonic

from workspace_assistant.agents.assistant.context import RequestContext
from workspace_assistant.agents.assistant.tools.registry import (
    ToolRegistry,
    ensure_tool_arguments,
)
from workspace_assistant.platform.agent.exceptions import ToolNotFoundError, describe_error
from workspace_assistant.platform.agent.messages import ToolCallRecord, ToolCallRequest
from workspace_assistant.platform.agent.metrics import ToolMetricsLabels, record_tool_call

logger = logging.getLogger(__name__)


def _log_abandoned_result(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    if (exc := task.exception()) is not None:
        logger.warning("Abandoned tool call failed: %s", exc)


class ToolDispatcher:
    """Runs tool calls against the registry.

    Validation failures propagate and abort the request. Everything that goes
    wrong while a tool runs becomes a failed record the model can read.
    """

    def __init__(self, registry: ToolRegistry, agent_slug: str, timeout_seconds: float):
        """Initialize the dispatcher.

        Args:
            registry: Tool catalog
            agent_slug: Agent slug for metric labels
            timeout_seconds: Wall-clock bound for one tool call
        """
        self.registry = registry
        self.agent_slug = agent_slug
        self.timeout_seconds = timeout_seconds

    def prepare(self, request: ToolCallRequest, context: RequestContext) -> ToolCallRecord:
        """Validate a request and create its record.

        Raises:
            MissingToolArguments: If required arguments are absent or empty
        """
        ensure_tool_arguments(
            request.tool_name,
            request.args,
            document_context=context.document_context,
            required=self.registry.required_args(request.tool_name),
        )
        return ToolCallRecord.from_request(request)

    async def execute(self, record: ToolCallRecord, context: RequestContext) -> ToolCallRecord:
        """Run one validated call to a terminal record.

        On timeout the handler task is cancelled, so a call reported as failed
        has no later side effects. Cancelling the caller (the client went away)
        does not reach the handler: it runs to completion and its result is
        discarded.
        """
        record = record.executing()
        labels = ToolMetricsLabels(self.agent_slug, record.tool_name)
        start_time = monotonic()

        task: asyncio.Task | None = None
        try:
            spec = self.registry.get(record.tool_name)
            task = asyncio.ensure_future(spec.handler(dict(record.args), context))
            async with asyncio.timeout(self.timeout_seconds):
                result = await asyncio.shield(task)
        except asyncio.CancelledError:
            if task is not None and not task.done():
                task.add_done_callback(_log_abandoned_result)
            raise
        except ToolNotFoundError as e:
            logger.warning("Model requested unknown tool %s", record.tool_name)
            record = record.failed(str(e))
        except TimeoutError:
            if task is not None:
                task.cancel()
                task.add_done_callback(_log_abandoned_result)
            logger.warning(
                "Tool %s timed out after %ss", record.tool_name, self.timeout_seconds
            )
            record = record.failed(
                f"Tool {record.tool_name} timed out after {self.timeout_seconds}s"
            )
        except Exception as e:
            logger.exception("Tool %s failed", record.tool_name)
            record = record.failed(describe_error(e))
        else:
            record = record.completed(result)

        duration = monotonic() - start_time
        record_tool_call(labels, duration=duration, error=record.error is not None)
        logger.info(
            "Tool %s finished with status %s in %.2fs",
            record.tool_name,
            record.status.value,
            duration,
        )
        return record
