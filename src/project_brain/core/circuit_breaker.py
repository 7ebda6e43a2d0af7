"""Circuit breaker for calls to external model providers."""

import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

from .base import ErrorCode, ServiceErrorDetails
from .errors import ServiceError
from .logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, rejecting calls
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker(Generic[T]):
    """
    Circuit breaker for handling provider failures gracefully.

    The circuit breaker has three states:
    - CLOSED: Normal operation, calls go through
    - OPEN: Provider is failing, calls are rejected immediately
    - HALF_OPEN: Testing if the provider has recovered

    Calls are never retried here. A failing call raises its own error and
    counts towards the threshold; once open, calls fail fast with a
    ServiceError until the recovery timeout has passed.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        expected_exception_types: tuple[type[Exception], ...] = (Exception,),
        success_threshold: int = 2,
        clock: Callable[[], float] = time.monotonic,
        failure_predicate: Callable[[Exception], bool] | None = None,
    ):
        """
        Initialize circuit breaker.

        Args:
            name: Name of the circuit (for logging)
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before trying half-open
            expected_exception_types: Exceptions that trigger the breaker
            success_threshold: Successes needed in half-open to close circuit
            clock: Time source, replaceable in tests
            failure_predicate: Narrows which expected exceptions count as failures;
                the others propagate without touching the circuit
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception_types = expected_exception_types
        self.success_threshold = success_threshold
        self._clock = clock
        self.failure_predicate = failure_predicate

        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: float | None = None
        self.last_exception: Exception | None = None

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to attempt reset."""
        if self.last_failure_time is None:
            return False
        return self._clock() - self.last_failure_time >= self.recovery_timeout

    def _record_success(self) -> None:
        """Record a successful call."""
        if self.state == CircuitState.HALF_OPEN:
            self.success_count += 1
            if self.success_count >= self.success_threshold:
                logger.info(f"Circuit breaker '{self.name}' closing after recovery")
                self.state = CircuitState.CLOSED
                self.failure_count = 0
                self.success_count = 0
                self.last_exception = None
        elif self.state == CircuitState.CLOSED:
            self.failure_count = 0

    def _record_failure(self, exception: Exception) -> None:
        """Record a failed call."""
        self.last_failure_time = self._clock()
        self.last_exception = exception

        if self.state == CircuitState.HALF_OPEN:
            logger.warning(f"Circuit breaker '{self.name}' reopening after half-open failure")
            self.state = CircuitState.OPEN
            self.failure_count = 1
            self.success_count = 0
        elif self.state == CircuitState.CLOSED:
            self.failure_count += 1
            if self.failure_count >= self.failure_threshold:
                logger.error(
                    f"Circuit breaker '{self.name}' opening after {self.failure_count} failures",
                    last_exception=str(exception),
                )
                self.state = CircuitState.OPEN

    def _check_state(self) -> None:
        """Check and potentially update circuit state."""
        if self.state == CircuitState.OPEN and self._should_attempt_reset():
            logger.info(f"Circuit breaker '{self.name}' attempting reset (half-open)")
            self.state = CircuitState.HALF_OPEN
            self.success_count = 0

    def _open_error(self, operation: str) -> ServiceError:
        error_msg = f"Circuit breaker '{self.name}' is open"
        if self.last_exception:
            error_msg += f" (last error: {self.last_exception})"
        return ServiceError(
            message=error_msg,
            details=ServiceErrorDetails(
                source="circuit_breaker",
                operation=operation,
                service_name=self.name,
                status_code=503,
            ),
            code=ErrorCode.CIRCUIT_OPEN,
        )

    async def call_async(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """
        Call an async function through the circuit breaker.

        Raises:
            ServiceError: If circuit is open
            Original exception: If the function fails
        """
        self._check_state()

        if self.state == CircuitState.OPEN:
            raise self._open_error("call_async")

        try:
            result = await func(*args, **kwargs)
        except self.expected_exception_types as e:
            if self.failure_predicate is None or self.failure_predicate(e):
                self._record_failure(e)
            raise
        self._record_success()
        return result

    def get_state(self) -> dict[str, Any]:
        """Get current circuit breaker state for monitoring."""
        return {
            "name": self.name,
            "state": self.state.value,
            "failure_count": self.failure_count,
            "success_count": self.success_count,
            "last_failure_time": self.last_failure_time,
            "last_exception": str(self.last_exception) if self.last_exception else None,
        }
