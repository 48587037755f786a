"""Exception classes for retro-http"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Closed set of classified error kinds surfaced to callers"""
    TIMEOUT = "TIMEOUT_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    SERVER_ERROR = "SERVER_ERROR"
    CANCELLED = "CANCELLED_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"
    MAPPING_ERROR = "MAPPING_ERROR"
    AUTHORIZATION = "AUTHORIZATION_ERROR"


class FailureCategory(str, Enum):
    """Failure categories reported by a transport"""
    CANCEL = "CANCEL"
    BAD_RESPONSE = "BAD_RESPONSE"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    SEND_TIMEOUT = "SEND_TIMEOUT"
    RECEIVE_TIMEOUT = "RECEIVE_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    BAD_CERTIFICATE = "BAD_CERTIFICATE"
    UNKNOWN = "UNKNOWN"


class RetroHttpError(Exception):
    """
    Base exception for retro-http errors

    All errors in the package extend from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [self.message]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        return " ".join(parts)


class ClassifiedError(RetroHttpError):
    """
    Normalized failure of a call

    Raised in place of raw transport exceptions. Callers match on ``kind``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, code=kind.value, status_code=status_code, cause=cause)
        self.kind = kind

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        return data

    def __repr__(self) -> str:
        return (
            f"ClassifiedError(kind={self.kind.value}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class ConfigError(RetroHttpError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ValidationError(ConfigError):
    """Configuration validation error"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class TransportFailure(RetroHttpError):
    """
    Failure raised by an HttpTransport

    Carries the failure category and, for bad responses, the status code
    and decoded body. Converted to a ClassifiedError before reaching callers.
    """

    def __init__(
        self,
        category: FailureCategory,
        message: str = "",
        status_code: Optional[int] = None,
        response_body: Optional[Any] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message or category.value,
            code=category.value,
            status_code=status_code,
            cause=cause,
        )
        self.category = category
        self.response_body = response_body

    @property
    def has_body(self) -> bool:
        """Whether the server sent a non-empty body"""
        return self.response_body is not None

    @classmethod
    def cancelled(cls, cause: Optional[BaseException] = None) -> "TransportFailure":
        """Create a cancellation failure"""
        return cls(FailureCategory.CANCEL, "Request cancelled", cause=cause)

    @classmethod
    def bad_response(
        cls, status_code: int, response_body: Optional[Any] = None
    ) -> "TransportFailure":
        """Create a failure for a non-2xx response"""
        return cls(
            FailureCategory.BAD_RESPONSE,
            f"Server responded with status {status_code}",
            status_code=status_code,
            response_body=response_body,
        )
