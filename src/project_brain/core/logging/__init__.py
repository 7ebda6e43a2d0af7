"""Structured logging module.

structlog loggers with a logfire processor and request-scoped context helpers.
"""

from .context import (
    bind_request_context,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from .setup import configure_observability, get_logger, setup_logging

__all__ = [
    "bind_request_context",
    "clear_log_context",
    "configure_observability",
    "get_log_context",
    "get_logger",
    "set_log_context",
    "setup_logging",
]
