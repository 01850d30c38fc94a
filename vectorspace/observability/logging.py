"""
Structured logging configuration using structlog.

JSON-formatted logs for production and pretty console logs for
development. Every entry carries the service name and the active vector
backend; namespace and document identifiers are passed as bound fields
rather than interpolated into messages.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from vectorspace.config.settings import get_settings

SERVICE_NAME = "vectorspace"

# Library loggers that only add noise at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "asyncpg", "redis", "uvicorn.access")


def service_context_processor(backend: str) -> Processor:
    """
    Build a processor that stamps ``service`` and ``backend`` on each entry.

    Fields already bound by the caller win.
    """

    def add_service_context(
        logger_: Any, method: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("backend", backend)
        return event_dict

    return add_service_context


def setup_logging() -> None:
    """
    Configure structured logging for the application.

    Usage:
        setup_logging()
        logger = structlog.get_logger()
        logger.info("Vectorized document", namespace="ws1", chunks=12)
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        service_context_processor(settings.vector_db),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_production:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Bind context variables (e.g. request_id, namespace) to subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
