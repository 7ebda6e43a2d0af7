"""Error handling decorators"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from .base import ApplicationError, ErrorLevel
from .error_context import ErrorContext, ErrorContextManager
from .logging import get_logger

logger = get_logger(__name__)
P = ParamSpec("P")
T = TypeVar("T")


def _log_failure(func_name: str, error: Exception, level: ErrorLevel, ctx: ErrorContext, reraise: bool) -> None:
    # A re-raised error is reported once, by whichever caller finally handles it
    if reraise:
        logger.debug(
            f"Error in {func_name}, re-raising: {error!s}",
            function=func_name,
            error_context=ctx.to_dict(),
        )
        return
    # ApplicationErrors carry their own severity
    if isinstance(error, ApplicationError):
        level = error.level
    logger.log(
        level.to_logging_level(),
        f"Error in {func_name}: {error!s}",
        function=func_name,
        error_context=ctx.to_dict(),
        exc_info=level.to_logging_level() >= ErrorLevel.ERROR.to_logging_level(),
    )


def with_error_handling(
    error_level: ErrorLevel = ErrorLevel.ERROR,
    reraise: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for handling errors in functions.

    Failures are logged with a captured ErrorContext. With ``reraise=False``
    the wrapped call returns ``None`` instead of raising, which callers use to
    tolerate a single failed item inside a larger batch. Errors that are
    re-raised are only logged at debug level, leaving the report to the
    caller that finally handles them.

    Args:
        error_level: Severity level for non-application errors
        reraise: Whether to re-raise the error after handling

    Returns:
        Decorated function with error handling
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        original_signature = inspect.signature(func)

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                try:
                    return await cast("Callable[P, Awaitable[T]]", func)(*args, **kwargs)
                except Exception as e:
                    async with ErrorContextManager(e) as ctx:
                        _log_failure(func.__name__, e, error_level, ctx, reraise)
                    if reraise:
                        raise
                    return cast("T", None)

            async_wrapper.__signature__ = original_signature  # type: ignore[attr-defined]
            return cast("Callable[P, T]", async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                with ErrorContextManager(e) as ctx:
                    _log_failure(func.__name__, e, error_level, ctx, reraise)
                if reraise:
                    raise
                return cast("T", None)

        sync_wrapper.__signature__ = original_signature  # type: ignore[attr-defined]
        return sync_wrapper

    return decorator


def error_context(
    error_level: ErrorLevel = ErrorLevel.ERROR,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator for adding error context to an async call that always re-raises."""

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        original_signature = inspect.signature(func)

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await cast("Callable[P, Awaitable[T]]", func)(*args, **kwargs)
            except Exception as e:
                async with ErrorContextManager(e) as ctx:
                    logger.log(
                        error_level.to_logging_level(),
                        f"Error context for {func.__name__}: {e!s}",
                        error_context=ctx.to_dict(),
                    )
                raise

        async_wrapper.__signature__ = original_signature  # type: ignore[attr-defined]
        return cast("Callable[P, T]", async_wrapper)

    return decorator


def with_session(driver_attr: str = "driver") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to automatically manage Neo4j session lifecycle.

    Opens one session per call and injects it as the first parameter after
    ``self``. Sessions are never shared between concurrent tasks.

    Usage:
        @with_session()
        async def get_chunk_by_uri(self, session, uri):
            result = await session.run(query, uri=uri)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not args:
                raise ValueError(f"{func.__name__} requires at least 'self' argument")

            self_obj = args[0]
            driver = getattr(self_obj, driver_attr, None)

            if driver is None:
                raise AttributeError(
                    f"Object {self_obj.__class__.__name__} has no attribute '{driver_attr}'. "
                    f"Either provide the correct driver_attr or ensure the object has a driver."
                )

            async with driver.session() as session:
                new_args = (args[0], session) + args[1:]
                return await func(*new_args, **kwargs)

        return wrapper

    return decorator
