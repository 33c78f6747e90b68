"""
Trellis internal diagnostics - structured logging via structlog.

Manifesto:
    The framework ships its own application-level log pipeline
    (:mod:`trellis.framework.logging`), but that pipeline cannot be used
    to report its *own* problems: a file sink that fails to write must
    not log that failure back into the buffer it is draining.

    This module is the side channel for framework internals - alias
    registration, component construction, swallowed sink failures and
    application lifecycle - rendered by structlog.

    - **Separate channel:** Never feeds the application ``Logger``
    - **Structured:** key/value events, JSON for aggregation
    - **Flexible:** colored console for development

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="trellis")
            ↓
        structlog processor chain:
            1. TimeStamper
            2. merge_contextvars
            3. add_log_level
            4. StackInfoRenderer / set_exc_info
            5. add_service_metadata
            6. JSONRenderer (or ConsoleRenderer)

Examples:
    >>> from trellis.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", service="billing")
    >>> logger = get_logger(__name__)
    >>> logger.debug("alias_registered", alias="app", path="/srv/app")

Tags:
    logging, structlog, diagnostics, trellis-core

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Store service name for metadata
_SERVICE_NAME = "trellis"


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "trellis",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for framework diagnostics.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


__all__ = [
    "configure_logging",
    "get_logger",
]
