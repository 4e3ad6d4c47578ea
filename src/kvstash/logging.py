"""
kvstash logging - structured logging via structlog.

The library itself only calls :func:`get_logger` and emits events; it never
configures logging on import. Applications embedding the cache call
:func:`configure_logging` once at startup (``kvstash.factory.create_cache``
does so when ``KVSTASH_CONFIGURE_LOGGING`` is enabled).

Architecture:
    ::

        configure_logging(level="INFO", json_format=True)
            ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. add_log_level / add_logger_name
          3. _expand_cache_error   error=CacheError → error.to_dict()
          4. JSONRenderer (or ConsoleRenderer for dev)

        logger = get_logger(__name__)
        logger.warning("cache_serialize_failed", key="index", error=exc)

    Events pass a :class:`~kvstash.errors.CacheError` itself as ``error``;
    the chain renders its category, context (key, hashed key, backend) and
    cause as nested fields.

Examples:
    >>> from kvstash.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("cache_miss", key="index")

Tags:
    logging, structlog, observability, kvstash
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from kvstash.errors import CacheError


def _expand_cache_error(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Render a ``CacheError`` under ``error`` as its structured dict."""
    error = event_dict.get("error")
    if isinstance(error, CacheError):
        event_dict["error"] = error.to_dict()
    return event_dict


def configure_logging(level: str = "INFO", json_format: bool | None = None) -> None:
    """Configure structured logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _expand_cache_error,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    log_level = getattr(logging, level.upper())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


__all__ = [
    "configure_logging",
    "get_logger",
]
