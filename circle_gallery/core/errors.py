"""Typed failure hierarchy for gallery operations.

Every failure carries an `ErrorKind` tag so callers can tell retryable
transport problems apart from server rejections and local validation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    SERVER = "server"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class GalleryError(Exception):
    """Base exception for all gallery failures.

    Attributes:
        message: Human-readable error message.
        kind: Coarse failure category.
        code: Machine-readable error code.
        status_code: HTTP status reported by the server, when there was one.
        details: Additional error details.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: str = "GALLERY_ERROR",
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSPORT

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a plain dictionary for logging or display."""
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        if self.details:
            result["details"] = self.details
        return result


class TransportError(GalleryError):
    """The request could not complete (connection, timeout, protocol)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, operation: str | None = None) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)


class ServerError(GalleryError):
    """The server answered with a failure envelope or an error status."""

    kind = ErrorKind.SERVER

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        operation: str | None = None,
        code: str = "SERVER_ERROR",
    ) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, code=code, status_code=status_code, details=details)


class PayloadError(ServerError):
    """A response body could not be mapped onto an entity."""

    def __init__(self, entity: str, reason: str) -> None:
        super().__init__(message=f"Malformed {entity} payload: {reason}", code="PAYLOAD_ERROR")


class ValidationError(GalleryError):
    """Input rejected locally before any request was made."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message=message, code="VALIDATION_ERROR", details=details)


def error_kind_of(ex: BaseException) -> ErrorKind:
    """Return the kind tag for any exception, `UNKNOWN` for foreign ones."""
    if isinstance(ex, GalleryError):
        return ex.kind
    return ErrorKind.UNKNOWN
