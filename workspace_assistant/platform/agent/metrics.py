"""Agent-level Prometheus metrics.

Counters and histograms for agent runs, tool calls and token usage, plus
an async context manager that times an agent run and records its outcome.
"""

import asyncio
from time import monotonic
from typing import NamedTuple

import prometheus_client

from workspace_assistant.platform.observability.metrics import BUCKETS


class AgentMetricsLabels(NamedTuple):
    agent: str


class ToolMetricsLabels(NamedTuple):
    agent: str
    tool_name: str


agent_runs_counter = prometheus_client.Counter(
    name="agent_runs_total",
    documentation="Agent runs by outcome",
    labelnames=[*AgentMetricsLabels._fields, "status"],
)
agent_run_histogram = prometheus_client.Histogram(
    name="agent_run_duration_seconds",
    documentation="Agent run duration (seconds)",
    labelnames=AgentMetricsLabels._fields,
    buckets=BUCKETS,
)
tool_calls_counter = prometheus_client.Counter(
    name="agent_tool_calls_total",
    documentation="Tool calls by outcome",
    labelnames=[*ToolMetricsLabels._fields, "status"],
)
tool_call_histogram = prometheus_client.Histogram(
    name="agent_tool_call_duration_seconds",
    documentation="Tool call duration (seconds)",
    labelnames=ToolMetricsLabels._fields,
    buckets=BUCKETS,
)
agent_tokens_counter = prometheus_client.Counter(
    name="agent_llm_tokens_total",
    documentation="LLM tokens consumed by agents",
    labelnames=["agent", "model", "direction"],
)


def _status(error: bool) -> str:
    return "error" if error else "success"


def record_tool_call(labels: ToolMetricsLabels, duration: float, error: bool = False) -> None:
    """Record one finished tool call.

    Args:
        labels: Agent and tool labels
        duration: Wall-clock duration in seconds
        error: Whether the call failed
    """
    tool_calls_counter.labels(*labels, _status(error)).inc()
    tool_call_histogram.labels(*labels).observe(duration)


def record_agent_tokens(agent: str, model: str, input_tokens: int, output_tokens: int) -> None:
    """Record token usage for one model call. Zero counts are skipped."""
    if input_tokens > 0:
        agent_tokens_counter.labels(agent, model, "input").inc(input_tokens)
    if output_tokens > 0:
        agent_tokens_counter.labels(agent, model, "output").inc(output_tokens)


class collect_agent_metrics:  # noqa: N801
    """Time an agent run and count it by outcome.

    Usage:
        async with collect_agent_metrics(AgentMetricsLabels("assistant")):
            ...
    """

    def __init__(self, labels: AgentMetricsLabels):
        self.labels = labels
        self._start = 0.0

    async def __aenter__(self):
        self._start = monotonic()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        agent_run_histogram.labels(*self.labels).observe(monotonic() - self._start)
        if exc_type is not None and issubclass(exc_type, (GeneratorExit, asyncio.CancelledError)):
            status = "cancelled"
        else:
            status = _status(exc_type is not None)
        agent_runs_counter.labels(*self.labels, status).inc()
        return False

