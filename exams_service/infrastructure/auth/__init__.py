"""Identity service integration."""

from exams_service.infrastructure.auth.adapter import (
    get_user_if_api_key_valid,
    report_auth_error,
)
from exams_service.infrastructure.auth.client import (
    AuthError,
    AuthErrorKind,
    AuthService,
    User,
)

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthService",
    "User",
    "get_user_if_api_key_valid",
    "report_auth_error",
]
