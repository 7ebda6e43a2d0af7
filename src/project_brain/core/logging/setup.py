"""Centralized logging setup with Logfire integration.

Logfire is configured via environment variables (LOGFIRE_TOKEN,
LOGFIRE_ENVIRONMENT); without a token nothing leaves the process.
"""

import logging
import os
import sys

import logfire
import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder
from structlog.types import EventDict, Processor, WrappedLogger
from structlog.typing import FilteringBoundLogger

from .context import get_log_context


def add_logfire_context(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add Logfire-specific context to log events.

    Merges the request-scoped context and tags errors with their type so
    they can be filtered as attributes in Logfire.
    """
    for key, value in get_log_context().items():
        event_dict.setdefault(key, value)

    if "error" in event_dict:
        event_dict["error_type"] = type(event_dict["error"]).__name__

    return event_dict


def setup_logging(level: int = logging.INFO, colors: bool = True) -> None:
    """Set up application-wide logging with Logfire and structlog integration."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        CallsiteParameterAdder(
            parameters=[
                CallsiteParameter.FILENAME,
                CallsiteParameter.LINENO,
                CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_logfire_context,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        # Logfire processor MUST come before the final renderer
        logfire.StructlogProcessor(),
        structlog.dev.ConsoleRenderer(colors=colors),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # PrintLogger avoids double logging with the standard library
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logs (neo4j, httpx, uvicorn) through the same processors
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=colors),
        foreign_pre_chain=processors[:-2],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def configure_observability(service_name: str = "project-brain") -> None:
    """Configure Logfire for the running process.

    Only sends data when LOGFIRE_TOKEN is present, so local runs and tests
    stay offline.
    """
    logfire.configure(
        service_name=service_name,
        token=os.getenv("LOGFIRE_TOKEN"),
        send_to_logfire="if-token-present",
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger instance that's properly configured with Logfire.

    Args:
        name: The name of the logger (usually __name__)

    Returns:
        A configured structlog logger instance
    """
    return structlog.get_logger(name)
