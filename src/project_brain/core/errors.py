"""Specific error types for the Project Brain application."""

from .base import (
    AIServiceErrorDetails,
    ApplicationError,
    ErrorCode,
    ErrorLevel,
    ResourceErrorDetails,
    ServiceErrorDetails,
    ValidationErrorDetails,
)


class ValidationError(ApplicationError):
    """A required field is missing or malformed. Never retried."""

    def __init__(self, message: str, details: ValidationErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            level=ErrorLevel.WARNING,
            details=details,
        )


class ProviderError(ApplicationError):
    """An embedding or language-model call failed.

    ``transient`` marks failures that say something about the provider's
    health (timeouts, rate limits, 5xx, lost connections) rather than about
    the input that was sent. Only transient failures trip circuit breakers.
    """

    def __init__(
        self,
        message: str,
        details: AIServiceErrorDetails | dict | None = None,
        code: ErrorCode = ErrorCode.EMBEDDING_FAILED,
        transient: bool = False,
    ):
        self.transient = transient
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details,
        )


class NotFoundError(ApplicationError):
    """A referenced record does not exist."""

    def __init__(self, message: str, details: ResourceErrorDetails | dict | None = None):
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            level=ErrorLevel.INFO,
            details=details,
        )


class ServiceError(ApplicationError):
    """Error from external service calls."""

    def __init__(
        self,
        message: str,
        details: ServiceErrorDetails | None = None,
        code: ErrorCode = ErrorCode.SERVICE_UNAVAILABLE,
    ):
        super().__init__(
            message=message,
            code=code,
            level=ErrorLevel.ERROR,
            details=details or ServiceErrorDetails(
                source="service",
                operation="external_call",
                service_name="unknown"
            )
        )


def is_transient(error: Exception) -> bool:
    """Whether ``error`` reflects provider health rather than a bad input."""
    return isinstance(error, ProviderError) and error.transient
