"""Structured logging configuration using structlog.

Modules log through the standard library (``logging.getLogger(__name__)``);
structlog's ProcessorFormatter renders every record. Deployed stages get one
JSON object per line, local development gets colored console output.

Each record carries the request id set by the correlation middleware and any
fields bound for the current event stream (thread id, agent), so all the
lines of one streamed response can be found together.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

from workspace_assistant.platform.constants import SERVICE_NAME

correlation_id_ctx: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Third-party loggers that log every request or token at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "LiteLLM", "openai", "anthropic")


def add_request_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    request_id = correlation_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


@contextmanager
def stream_log_context(**fields: str | None) -> Iterator[None]:
    """Bind fields to every record logged while one event stream runs.

    ``None`` values are skipped.
    """
    bound = {key: value for key, value in fields.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str, json_output: bool = True) -> None:
    """Route stdlib logging through structlog's formatter.

    Args:
        log_level: Root logging level (INFO, DEBUG, etc.)
        json_output: True for JSON lines, False for console output
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_request_id,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                _renderer(json_output),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
