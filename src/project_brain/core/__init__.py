from .base import ApplicationError, ErrorCode, ErrorLevel, ServiceErrorDetails
from .circuit_breaker import CircuitBreaker, CircuitState
from .errors import NotFoundError, ProviderError, ServiceError, ValidationError

__all__ = [
    "ApplicationError",
    "CircuitBreaker",
    "CircuitState",
    "ErrorCode",
    "ErrorLevel",
    "NotFoundError",
    "ProviderError",
    "ServiceError",
    "ServiceErrorDetails",
    "ValidationError",
]
