"""
Centralized error handling and classification for folioadmin.

Every failure surfaced to an API caller or to the admin panel is one of
the classes below. Each error logs itself when constructed and knows the
HTTP status it maps to.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .logging_config import get_logger, log_error, log_security_event

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    STORAGE = "storage"
    IMAGE_PROCESSING = "image_processing"
    CONTENT_INDEX = "content_index"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


HTTP_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.AUTHENTICATION: 401,
    ErrorCategory.AUTHORIZATION: 403,
    ErrorCategory.STORAGE: 500,
    ErrorCategory.IMAGE_PROCESSING: 500,
    ErrorCategory.CONTENT_INDEX: 500,
    ErrorCategory.UNKNOWN: 500,
}


@dataclass
class ErrorInfo:
    """Structured error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    details: dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert error info to dictionary."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class FolioError(Exception):
    """Base exception class for folioadmin."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.code = code or f"{category.value}_error"
        self.user_message = user_message or self._generate_user_message()
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CATEGORY.get(self.category, 500)

    def _generate_user_message(self) -> str:
        """Generate user-facing error message."""
        user_messages = {
            ErrorCategory.AUTHENTICATION: "Unauthorized",
            ErrorCategory.AUTHORIZATION: "Forbidden",
            ErrorCategory.VALIDATION: "Invalid request",
            ErrorCategory.STORAGE: "Storage operation failed",
            ErrorCategory.IMAGE_PROCESSING: "Failed to process image",
            ErrorCategory.CONTENT_INDEX: "Failed to access content index",
        }
        return user_messages.get(self.category, "Unexpected error")

    def _log_error(self) -> None:
        """Log the error with appropriate level."""
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            **self.details,
        }

        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        if self.category is ErrorCategory.VALIDATION:
            # Client mistakes are not server errors
            logger.info("validation_failed", message=str(self), **error_context)
            return

        log_error(self, error_context)

        if self.category in [ErrorCategory.AUTHENTICATION, ErrorCategory.AUTHORIZATION]:
            log_security_event(self.category.value, context=error_context)

    def get_error_info(self) -> ErrorInfo:
        """Get structured error information."""
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            details=self.details,
            timestamp=self.timestamp,
        )


class AuthenticationError(FolioError):
    """Caller has no valid admin session."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.HIGH,
            code=code or "auth_failed",
            user_message=user_message or "Unauthorized",
            details=details,
            original_exception=original_exception,
        )


class AuthorizationError(FolioError):
    """Caller is authenticated but not allowed to perform the action."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHORIZATION,
            severity=ErrorSeverity.HIGH,
            code=code or "access_denied",
            user_message=user_message or "Forbidden",
            details=details,
            original_exception=original_exception,
        )


class ValidationError(FolioError):
    """Missing or invalid request fields."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            code=code or "validation_failed",
            user_message=user_message or message,
            details=details,
            original_exception=original_exception,
        )


class StorageError(FolioError):
    """Object store failures: missing objects, I/O errors, signing errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.STORAGE,
            severity=ErrorSeverity.HIGH,
            code=code or "storage_error",
            user_message=user_message,
            details=details,
            original_exception=original_exception,
        )


class ImageProcessingError(FolioError):
    """Image decoding or encoding failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.IMAGE_PROCESSING,
            severity=ErrorSeverity.MEDIUM,
            code=code or "image_processing_failed",
            user_message=user_message,
            details=details,
            original_exception=original_exception,
        )


class ContentIndexError(FolioError):
    """Content index document missing, malformed or unwritable."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.CONTENT_INDEX,
            severity=ErrorSeverity.HIGH,
            code=code or "content_index_error",
            user_message=user_message,
            details=details,
            original_exception=original_exception,
        )


def http_status_for(error: Exception) -> int:
    """Map an exception to the HTTP status returned to API callers."""
    if isinstance(error, FolioError):
        return error.http_status
    return 500


def error_payload(error: Exception) -> dict[str, Any]:
    """Build the JSON error body for an exception."""
    if isinstance(error, FolioError):
        return {"error": error.user_message, "code": error.code}
    return {"error": "Internal server error", "code": "internal_error"}
