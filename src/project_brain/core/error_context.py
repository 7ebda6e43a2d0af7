"""Error context management"""

import logging
from collections import OrderedDict
from datetime import UTC, datetime
from types import TracebackType
from typing import Any
from uuid import uuid4

from .base import ApplicationError
from .logging import get_log_context

logger = logging.getLogger(__name__)


class ErrorContext:
    """Captures and stores context around an error"""

    def __init__(self, error: Exception, trace_id: str | None = None, **context: Any):
        self.error = error
        self.trace_id = trace_id or str(uuid4())
        self.timestamp = datetime.now(UTC)
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary format with structured details from ApplicationError"""
        result = {
            "error_type": self.error.__class__.__name__,
            "error_message": str(self.error),
            "trace_id": self.trace_id,
            "timestamp": self.timestamp.isoformat(),
        }

        if isinstance(self.error, ApplicationError):
            result["error_code"] = self.error.code.value
            result["error_level"] = self.error.level.value

            # Prefix the details fields to avoid collisions
            for key, value in self.error.details.model_dump().items():
                result[f"details.{key}"] = value

        # Request-scoped fields (project, request_id) travel with the error
        for key, value in get_log_context().items():
            result[f"request.{key}"] = value

        for key, value in self.context.items():
            result[f"context.{key}"] = value

        return result


class ErrorContextManager:
    """Manages error contexts across the application"""

    # Oldest contexts are dropped past this many
    max_contexts = 256

    def __init__(self, error: Exception | None = None, **context: Any) -> None:
        self._contexts: OrderedDict[str, ErrorContext] = OrderedDict()
        self._error = error
        self._context = context
        self._current_context: ErrorContext | None = None

    def _enter(self) -> ErrorContext:
        if self._error is None:
            raise ValueError("No error provided for context")
        self._current_context = ErrorContext(self._error, **self._context)
        self._remember(self._current_context)
        return self._current_context

    def _remember(self, error_context: ErrorContext) -> None:
        self._contexts[error_context.trace_id] = error_context
        while len(self._contexts) > self.max_contexts:
            self._contexts.popitem(last=False)

    @staticmethod
    def _exit(
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        # A new exception raised while handling the original one
        if exc_type is not None and exc_val is not None:
            logger.error(
                f"Exception during error context handling: {exc_type.__name__}: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )

    async def __aenter__(self) -> ErrorContext:
        """Enter async context, capturing error context"""
        return self._enter()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context"""
        self._exit(exc_type, exc_val, exc_tb)

    def __enter__(self) -> ErrorContext:
        """Enter sync context, capturing error context"""
        return self._enter()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit sync context"""
        self._exit(exc_type, exc_val, exc_tb)

    async def capture_context(self, error: Exception, **context: Any) -> ErrorContext:
        """Capture error context with additional data"""
        error_context = ErrorContext(error, **context)
        self._remember(error_context)
        return error_context

    def get_context(self, trace_id: str) -> ErrorContext | None:
        """Retrieve error context by trace ID"""
        return self._contexts.get(trace_id)
