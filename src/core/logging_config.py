"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Modules log snake_case event names with keyword context fields.
"""

from __future__ import annotations

import logging
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog processors and the minimum log level.

    Args:
        level: Level name such as ``"INFO"`` or ``"DEBUG"``.
    """
    global _CONFIGURED_LEVEL
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
    _CONFIGURED_LEVEL = level.upper()


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger with structured output.
    """
    if _CONFIGURED_LEVEL is None:
        configure_logging()
    return structlog.get_logger(name)
