"""Structured logging configuration using structlog."""

import logging
from typing import Any

import structlog
from structlog.types import Processor


def configure_logging(json_logs: bool = True, debug: bool = False) -> None:
    """Configure structlog for applications using the client.

    Args:
        json_logs: If True, output JSON format. If False, use console format.
        debug: If True, let the client's request and URL traces through.
    """
    level = logging.DEBUG if debug else logging.INFO

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request at INFO; leave root handlers to the application
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(
    name: str | None = None, **initial_context: Any
) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Optional logger name.
        **initial_context: Initial context to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
