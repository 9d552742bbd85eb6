"""
Structured logging built on structlog.

Loggers accept key/value context:

    logger.info("Event tracked", ad_id=ad_id, event_type="CLICK")

and per-request context is bound with log_context().
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure stdlib logging and structlog processors."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    renderer: Any
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """Bind key/value pairs to every log line of the current request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Drop all request-scoped log context."""
    structlog.contextvars.clear_contextvars()
