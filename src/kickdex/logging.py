"""Logging configuration for Kickdex."""

import logging
import sys
from typing import Any

import structlog

from kickdex.config import settings

# Per-frame and per-request chatter from the chat socket and REST client
NOISY_LOGGERS = {
    "asyncio": logging.WARNING,
    "aiohttp.client": logging.WARNING,
    "aiohttp.websocket": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


def setup_logging() -> None:
    """Configure structured logging for the application."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        # JSON for production log shipping
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger tagged with its module as ``component``.

    ``PrintLoggerFactory`` drops the logger name, so it is bound as a field
    to tell connector, delivery and engine lines apart.
    """
    return structlog.get_logger(name, component=name.removeprefix("kickdex."))
