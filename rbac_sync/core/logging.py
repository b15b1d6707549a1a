"""
Centralized logging configuration using structlog.

This module configures structured logging for the sync engine and the
command surface. Sync context (collection, phase) is bound through
contextvars and merged into every event.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from rbac_sync.core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog for the application.

    Sets up processors including:
    - TimeStamper with ISO format
    - Log level addition
    - Exception formatting
    - Context variables bound with bind_sync_context (collection, phase)
    - JSON or Console rendering based on settings

    Uses LOG_LEVEL and LOG_FORMAT from environment variables via settings.
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Configured structlog BoundLogger instance
    """
    return structlog.get_logger(name)


def bind_sync_context(**kwargs: Any) -> None:
    """
    Bind sync context variables for the current task.

    Example:
        bind_sync_context(phase="import")

    Args:
        **kwargs: Key-value pairs to bind to logging context
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_sync_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
