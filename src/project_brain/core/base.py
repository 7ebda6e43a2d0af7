"""Base error classes and enums"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any

from logfire.integrations.pydantic import PluginSettings
from pydantic import BaseModel, Field, field_serializer


class ErrorLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_logging_level(self) -> int:
        """Convert ErrorLevel to logging level"""
        return {
            ErrorLevel.DEBUG: logging.DEBUG,
            ErrorLevel.INFO: logging.INFO,
            ErrorLevel.WARNING: logging.WARNING,
            ErrorLevel.ERROR: logging.ERROR,
            ErrorLevel.CRITICAL: logging.CRITICAL,
        }[self]


class ErrorCode(str, Enum):
    """Error codes for the application."""

    # General Errors (1xxx)
    UNKNOWN = "1000"
    INVALID_INPUT = "1002"
    NOT_FOUND = "1003"
    PROCESSING_FAILED = "1004"
    CONFIG_INVALID = "1005"
    CONFIG_MISSING = "1006"
    TIMEOUT = "1007"

    # API Errors (2xxx)
    RATE_LIMITED = "2003"
    CIRCUIT_OPEN = "2005"

    # Database Errors (3xxx)
    DB_CONNECTION = "3001"
    DB_QUERY = "3002"

    # AI/ML Errors (4xxx)
    MODEL_ERROR = "4001"
    EMBEDDING_FAILED = "4003"

    # Infrastructure Errors (5xxx)
    SERVICE_UNAVAILABLE = "5002"


class ErrorDetails(BaseModel, plugin_settings=PluginSettings(logfire={"record": "all"})):
    """Base model for structured error details"""

    source: str = Field(description="Component or module where the error occurred")
    operation: str = Field(description="Operation being performed when the error occurred")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(), description="When the error occurred")

    # Ensure timestamp is serialized consistently
    @field_serializer("timestamp")
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class ValidationErrorDetails(ErrorDetails):
    """Details for validation-related errors"""

    field: str | None = Field(None, description="Field that failed validation")
    actual_value: Any = Field(None, description="Value that failed validation")
    expected_type: str | None = Field(None, description="Expected type or format")
    constraint: str | None = Field(None, description="Constraint that was violated")


class ResourceErrorDetails(ErrorDetails):
    """Details for resource-related errors"""

    resource_id: str | None = Field(None, description="ID of the resource")
    resource_type: str = Field(description="Type of resource (chunk, fact, journal)")
    action: str = Field(description="Action attempted (read, write, delete, etc.)")


class ServiceErrorDetails(ErrorDetails):
    """Details for service-related errors"""

    service_name: str = Field(description="Name of the service that failed")
    endpoint: str | None = Field(None, description="Service endpoint that was called")
    status_code: int | None = Field(None, description="HTTP or service status code")
    request_id: str | None = Field(None, description="Request ID for tracing")
    latency_ms: float | None = Field(None, description="Response time in milliseconds")


class DatabaseErrorDetails(ServiceErrorDetails):
    """Details for database-related errors"""

    query_type: str | None = Field(None, description="Type of query (lookup, upsert, search, etc.)")
    label: str | None = Field(None, description="Node label the query targeted")


class AIServiceErrorDetails(ServiceErrorDetails):
    """Details for AI service-related errors"""

    provider_model: str | None = Field(None, description="AI model name")
    input_count: int | None = Field(None, description="Number of inputs sent in the call")
    max_tokens: int | None = Field(None, description="Maximum tokens allowed")


class ApplicationError(Exception):
    """Base class for all application errors"""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: ErrorDetails | dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.level = level

        # Convert dict to ErrorDetails if needed
        if details is None:
            self.details = ErrorDetails(source="unknown", operation="unknown")
        elif isinstance(details, dict):
            details = dict(details)
            source = details.pop("source", "unknown")
            operation = details.pop("operation", "unknown")
            self.details = ErrorDetails(source=source, operation=operation, **details)
        else:
            self.details = details

        super().__init__(message)
