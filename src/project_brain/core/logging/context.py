"""Logging context utilities for structured logging.

Request-scoped fields (project, request id, operation) live in a context
variable so every log line emitted while serving one question or one ingest
run carries them without threading them through call signatures.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

# None as default to avoid a shared mutable dict across contexts
_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    context: dict[str, Any] | None = _log_context.get()
    if context is None:
        context = {}
        _log_context.set(context)
    return context.copy()


def set_log_context(context: dict[str, Any]) -> None:
    """Replace the logging context.

    Args:
        context: Dictionary with logging context data
    """
    _log_context.set(dict(context))


def clear_log_context() -> None:
    """Clear the current logging context."""
    _log_context.set({})


@contextmanager
def bind_request_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Temporarily extend the logging context for the duration of a block.

    The previous context is restored on exit, also when the block raises.
    """
    previous = get_log_context()
    merged = {**previous, **{k: v for k, v in fields.items() if v is not None}}
    token = _log_context.set(merged)
    try:
        yield merged.copy()
    finally:
        _log_context.reset(token)
