"""
Structured Logging
structlog setup shared by the API, the indexer and the upstream clients.

Every event is a snake_case name plus key/value context, e.g.
``logger.info("index_snapshot_swapped", size=120, dimension=384)``.
The request id bound by the envelope middleware is merged into every
event logged while that request is being served.
"""

import inspect
import logging
import sys
import time
from functools import wraps
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from app.core.config import settings

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "sentence_transformers")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the application name, version and environment."""
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    event_dict["environment"] = settings.environment
    return event_dict


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger

    Args:
        level: Log level name (defaults to settings.log_level)
        json_logs: Render JSON lines instead of colored console output
            (defaults to settings.log_json)
    """
    level_name = level or settings.log_level
    log_level = logging.getLevelName(level_name)
    render_json = settings.log_json if json_logs is None else json_logs

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if render_json:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger

    Usage:
        logger = get_logger(__name__)
        logger.info("index_rebuilt", succeeded=12, failed=0)
    """
    return structlog.get_logger(name)


def measure_latency(operation: str):
    """Log ``operation_latency`` with elapsed milliseconds around a sync or async call."""

    def decorator(func):
        logger = get_logger(func.__module__)

        def _log(start: float) -> None:
            logger.info(
                "operation_latency",
                operation=operation,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _log(start)

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _log(start)

        return sync_wrapper

    return decorator


def log_upstream_call(
    *,
    service: str,
    operation: str,
    model: str | None,
    latency_ms: float,
    status_code: int | None = None,
    tokens: dict | None = None,
    error: str | None = None,
) -> None:
    """One line per HTTP call to an embedding or chat provider."""

    logger = get_logger("upstream")
    log = logger.warning if error else logger.info
    log(
        "upstream_call",
        service=service,
        operation=operation,
        model=model,
        latency_ms=round(latency_ms, 2),
        status_code=status_code,
        tokens=tokens,
        error=error,
    )
