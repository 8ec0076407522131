"""Closed error taxonomy shared by every layer of the service.

Every failure the service can report, whatever its origin, ends up as exactly
one ``ErrorKind``. Handlers and adapters raise ``ServiceError`` to carry a kind
up to the API boundary, where it is encoded into the response envelope.

Key components:
- **ErrorKind enum**: The wire-level error tags (serialized by variant name)
- **Severity enum**: Classification used by structured diagnostics
- **ServiceError**: Typed rejection carrying one ErrorKind
- **BodyDecodeError**: Rejection raised when a request body cannot be decoded
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Every error kind a client can observe in an ``Err`` envelope.

    Values equal member names so the wire tag is stable and readable.
    """

    # Transport layer
    NOT_FOUND = "NotFound"
    """No route matched the request path."""

    DECODE_ERROR = "DecodeError"
    """The request body did not decode into the handler's input type."""

    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    """The route exists but does not accept this HTTP method."""

    # Identity layer
    API_KEY_UNAUTHORIZED = "ApiKeyUnauthorized"
    API_KEY_NONEXISTENT = "ApiKeyNonexistent"
    AUTH_INTERNAL_SERVER_ERROR = "AuthInternalServerError"
    AUTH_BAD_REQUEST = "AuthBadRequest"
    AUTH_OTHER = "AuthOther"

    # Persistence layer and catch-all
    INTERNAL_SERVER_ERROR = "InternalServerError"
    UNKNOWN = "Unknown"


class Severity(Enum):
    """Severity levels for structured diagnostics.

    These map onto log levels when a diagnostic is emitted.
    """

    LOW = "LOW"
    """Expected conditions, useful only when debugging."""

    MEDIUM = "MEDIUM"
    """Degraded behavior that does not need immediate attention."""

    HIGH = "HIGH"
    """Unexpected failures that need operator visibility."""

    CRITICAL = "CRITICAL"
    """Failures that may take the service down."""


class ServiceError(Exception):
    """Exception carrying a single ErrorKind to the API boundary.

    Handlers raise this (or let it propagate from the auth and persistence
    adapters). The dispatch adapter and the fault normalizer both turn it
    into an ``Err`` envelope.

    Args:
        kind: The error kind reported to the client
        message: Optional human-readable description, never sent to clients
        status_code: HTTP status used when the error is encoded (defaults to 400)
        context: Additional context information for diagnostics
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        status_code: int = 400,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.message = message or kind.value
        self.status_code = status_code
        self.context = context or {}
        self.cause = cause

        super().__init__(self.message)
        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __repr__(self) -> str:
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{self.__class__.__name__}(kind={self.kind.value}, "
            f"message='{self.message}', status_code={self.status_code}{context_str})"
        )


class BodyDecodeError(ServiceError):
    """Raised when a request body does not match the handler's input type.

    Args:
        message: Description of the decode failure
        cause: The original validation or parse exception
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(ErrorKind.DECODE_ERROR, message, cause=cause)
