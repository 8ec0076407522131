"""Translation of identity service failures into the local error taxonomy."""

from exams_service.core.exceptions import ErrorKind, ServiceError, Severity
from exams_service.core.logging import log_event
from exams_service.infrastructure.auth.client import (
    AuthError,
    AuthErrorKind,
    AuthService,
    User,
)

# The two API key tags are crossed. Deployed clients rely on this mapping and
# tests/unit/infrastructure/auth/test_adapter.py pins it.
_CLIENT_FAULTS: dict[AuthErrorKind, ErrorKind] = {
    AuthErrorKind.API_KEY_NONEXISTENT: ErrorKind.API_KEY_UNAUTHORIZED,
    AuthErrorKind.API_KEY_UNAUTHORIZED: ErrorKind.API_KEY_NONEXISTENT,
}

_SERVICE_FAULTS: dict[AuthErrorKind, ErrorKind] = {
    AuthErrorKind.INTERNAL_SERVER_ERROR: ErrorKind.AUTH_INTERNAL_SERVER_ERROR,
    AuthErrorKind.METHOD_NOT_ALLOWED: ErrorKind.AUTH_BAD_REQUEST,
    AuthErrorKind.BAD_REQUEST: ErrorKind.AUTH_BAD_REQUEST,
}


def report_auth_error(error: AuthError) -> ServiceError:
    """Map an identity service failure to a local ServiceError.

    Rejected keys are client faults and pass through silently. Everything
    else is a fault on our side or theirs and is logged before returning.

    Args:
        error: The failure raised by the identity service client.

    Returns:
        ServiceError: The error to raise to the API boundary.
    """
    if kind := _CLIENT_FAULTS.get(error.kind):
        return ServiceError(kind, cause=error)

    kind = _SERVICE_FAULTS.get(error.kind, ErrorKind.AUTH_OTHER)
    log_event(
        kind.value,
        source=f"auth service: {error.kind.value}",
        severity=Severity.HIGH,
        detail=error.detail,
    )
    return ServiceError(kind, cause=error)


async def get_user_if_api_key_valid(auth_service: AuthService, api_key: str) -> User:
    """Validate an API key against the identity service.

    Raises:
        ServiceError: With the translated kind when validation fails.
    """
    try:
        return await auth_service.get_user_by_api_key_if_valid(api_key)
    except AuthError as e:
        raise report_auth_error(e) from e
