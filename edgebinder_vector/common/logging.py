"""Structured logging for the binding store.

Store, factory and script modules log through ``structlog`` loggers named
``vector_store.<module>``. The host application decides the output: call
``configure_logging`` (or ``configure_logging_from_settings``) once at
startup to route events through stdlib ``logging`` as JSON lines or as a
console rendering. Without it, structlog's defaults apply.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory, add_logger_name

from .config import AdapterSettings

PERFORMANCE_LOGGER = "vector_store.performance"


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
) -> None:
    """Configure structured logging for the process embedding the store.

    Parameters
    - service_name: Bound as ``service`` on every event
    - log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` (case-insensitive);
      ``DEBUG`` is needed to see query bodies logged by a store in debug mode
    - log_format: ``json`` for aggregation; ``console`` for local runs
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)


def configure_logging_from_settings(settings: AdapterSettings, service_name: str) -> None:
    """Configure logging from ``EDGEBINDER_LOG_LEVEL`` / ``EDGEBINDER_LOG_FORMAT``.

    ``EDGEBINDER_DEBUG`` lowers the level to ``DEBUG`` so the store's query
    body events are emitted.
    """
    log_level = "DEBUG" if settings.debug else settings.log_level
    configure_logging(service_name, log_level, settings.log_format)
    structlog.contextvars.bind_contextvars(collection_name=settings.collection_name)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def log_performance(operation: str, duration_ms: float, **kwargs: Any) -> None:
    """Log the duration of a store operation.

    Parameters
    - operation: Store operation name (e.g. ``execute_query``)
    - duration_ms: Elapsed time in milliseconds
    - kwargs: Additional fields such as collection name or result count
    """
    logger = get_logger(PERFORMANCE_LOGGER)
    logger.info(
        f"Operation {operation} completed",
        operation=operation,
        duration_ms=round(duration_ms, 3),
        **kwargs
    )
