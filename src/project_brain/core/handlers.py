"""Error handlers for different types of errors"""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .base import ApplicationError, ErrorCode, ErrorLevel, ValidationErrorDetails
from .error_context import ErrorContext, ErrorContextManager
from .errors import NotFoundError, ProviderError, ValidationError
from .logging import get_logger

logger = get_logger(__name__)


def status_for(error: Exception) -> int:
    """Map an application error onto the HTTP status the API answers with."""
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ProviderError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(error, HTTPException):
        return error.status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorHandler:
    """Base class for error handlers"""

    def __init__(self, context_manager: ErrorContextManager | None = None):
        self.context_manager = context_manager or ErrorContextManager()

    def _format_response(
        self,
        error_context: ErrorContext,
        level: ErrorLevel,
        additional_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Format error response"""
        response = {
            "error": str(error_context.error),
            "error_code": (additional_context or {}).get("error_code", ErrorCode.PROCESSING_FAILED.value),
            "level": level.value,
            "trace_id": error_context.trace_id,
            "timestamp": error_context.timestamp.isoformat(),
        }

        if isinstance(error_context.error, ApplicationError):
            response["error_code"] = error_context.error.code.value
            response["details"] = error_context.error.details.model_dump(mode="json")

        return response


class GlobalErrorHandler(ErrorHandler):
    """Global error handler for FastAPI application"""

    async def handle_application_error(self, error: ApplicationError) -> dict[str, Any]:
        """Handle errors raised by the services"""
        error_context = await self.context_manager.capture_context(error)
        logger.log(
            error.level.to_logging_level(),
            f"Request failed: {error.message}",
            error_context=error_context.to_dict(),
        )
        return self._format_response(error_context=error_context, level=error.level)

    async def handle_http_exception(self, error: HTTPException) -> dict[str, Any]:
        """Handle HTTP exceptions"""
        level = (
            ErrorLevel.ERROR
            if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else ErrorLevel.WARNING
        )
        error_context = await self.context_manager.capture_context(
            error, status_code=error.status_code
        )
        return self._format_response(error_context=error_context, level=level)

    async def handle_unexpected(self, error: Exception) -> dict[str, Any]:
        """Handle anything that escaped the services untyped"""
        error_context = await self.context_manager.capture_context(error)
        logger.error(
            f"Unhandled error: {error!s}",
            error_context=error_context.to_dict(),
            exc_info=error,
        )
        return self._format_response(
            error_context=error_context,
            level=ErrorLevel.ERROR,
            additional_context={"error_code": ErrorCode.UNKNOWN.value},
        )


def install_error_handlers(app: Any, handler: GlobalErrorHandler | None = None) -> None:
    """Register JSON error responses on a FastAPI app."""
    handler = handler or GlobalErrorHandler()

    async def on_application_error(_request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, ApplicationError)
        body = await handler.handle_application_error(exc)
        return JSONResponse(status_code=status_for(exc), content=body)

    async def on_request_validation(_request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, RequestValidationError)
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
        error = ValidationError(
            f"Invalid request: {field or 'body'} {str(first.get('msg', 'is invalid')).lower()}",
            details=ValidationErrorDetails(
                source="api",
                operation="request_validation",
                field=field,
                constraint=first.get("type"),
            ),
        )
        body = await handler.handle_application_error(error)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)

    async def on_http_exception(_request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, HTTPException)
        body = await handler.handle_http_exception(exc)
        return JSONResponse(status_code=exc.status_code, content=body)

    async def on_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        body = await handler.handle_unexpected(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)

    app.add_exception_handler(ApplicationError, on_application_error)
    app.add_exception_handler(RequestValidationError, on_request_validation)
    app.add_exception_handler(HTTPException, on_http_exception)
    app.add_exception_handler(Exception, on_unexpected)
