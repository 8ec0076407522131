"""Redaction of sensitive values before they reach diagnostics.

Request payloads carry API keys, so any payload or exception detail that is
logged while normalizing a fault passes through here first. Only logged
copies are redacted; the original data is never modified.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from re import Pattern
from typing import Any, Final

SanitizableValue = (
    str | int | float | bool | None | dict[str, Any] | list[Any] | tuple[Any, ...]
)

REDACTED: Final[str] = "[REDACTED]"

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|auth|authorization|"
    r"credential|private[_-]?key|access[_-]?key|session|connection[_-]?string)",
    re.IGNORECASE,
)

# Maximum depth for nested structure sanitization
MAX_DEPTH: Final[int] = 10


def is_sensitive_field(field_name: str, extra_fields: Iterable[str] = ()) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.
        extra_fields: Additional configured field names (case-insensitive).

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True

    field_lower = field_name.lower()
    return any(field.lower() in field_lower for field in extra_fields)


def sanitize_value(
    value: SanitizableValue,
    field_name: str = "",
    depth: int = 0,
    extra_fields: Iterable[str] = (),
) -> SanitizableValue:
    """Sanitize a value if it appears to be sensitive, recursing into containers.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.
        extra_fields: Additional configured sensitive field names.

    Returns:
        SanitizableValue: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED

    if field_name and is_sensitive_field(field_name, extra_fields):
        return REDACTED

    if isinstance(value, dict):
        return {
            k: sanitize_value(v, k, depth + 1, extra_fields) for k, v in value.items()
        }

    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1, extra_fields) for item in value]

    if isinstance(value, tuple):
        return tuple(
            sanitize_value(item, "", depth + 1, extra_fields) for item in value
        )

    return value


def sanitize_dict(
    data: dict[str, Any], extra_fields: Iterable[str] = ()
) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive fields redacted."""
    return {
        key: sanitize_value(value, key, extra_fields=extra_fields)
        for key, value in data.items()
    }


def sanitize_error_context(
    error: Exception,
    context: dict[str, Any] | None = None,
    extra_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional context to include (will be sanitized).
        extra_fields: Additional configured sensitive field names.

    Returns:
        dict[str, Any]: Sanitized error context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        error_context.update(sanitize_dict(context, extra_fields))

    if hasattr(error, "__dict__"):
        error_attrs = {k: v for k, v in error.__dict__.items() if not k.startswith("_")}
        if error_attrs:
            error_context["error_attributes"] = sanitize_dict(
                error_attrs, extra_fields
            )

    return error_context
