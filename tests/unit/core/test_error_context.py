"""Unit tests for redaction of sensitive values."""

from typing import Any

import pytest

from exams_service.core.error_context import (
    MAX_DEPTH,
    REDACTED,
    is_sensitive_field,
    sanitize_dict,
    sanitize_error_context,
    sanitize_value,
)


@pytest.mark.unit
class TestIsSensitiveField:
    """Test sensitive field detection."""

    @pytest.mark.parametrize(
        "name", ["api_key", "apiKey", "password", "Authorization", "session_id"]
    )
    def test_default_pattern(self, name: str) -> None:
        """Common credential names are detected case-insensitively."""
        assert is_sensitive_field(name)

    @pytest.mark.parametrize("name", ["subscription_kind", "user_id", "email"])
    def test_ordinary_fields(self, name: str) -> None:
        """Ordinary payload fields are left alone."""
        assert not is_sensitive_field(name)

    def test_configured_fields(self) -> None:
        """Extra configured names are matched as substrings."""
        assert is_sensitive_field("exam_answer_key", ["ANSWER"])


@pytest.mark.unit
class TestSanitize:
    """Test recursive sanitization."""

    def test_nested_structures(self) -> None:
        """Sensitive values are redacted at any depth without mutating input."""
        data: dict[str, Any] = {
            "props": {"api_key": "k-123", "subscription_kind": 2},
            "attempts": [{"token": "t"}, "plain"],
            "pair": ("a", {"secret": "s"}),
        }

        result = sanitize_dict(data)

        assert result == {
            "props": {"api_key": REDACTED, "subscription_kind": 2},
            "attempts": [{"token": REDACTED}, "plain"],
            "pair": ("a", {"secret": REDACTED}),
        }
        assert data["props"]["api_key"] == "k-123"

    def test_depth_limit(self) -> None:
        """Structures nested deeper than the limit are redacted wholesale."""
        assert sanitize_value({"a": 1}, depth=MAX_DEPTH + 1) == REDACTED

    def test_error_context(self) -> None:
        """Exception attributes and extra context are both sanitized."""
        error = RuntimeError("auth failed")
        error.api_key = "k-123"  # type: ignore[attr-defined]
        error.attempt = 2  # type: ignore[attr-defined]

        context = sanitize_error_context(error, {"request_path": "/x"})

        assert context["error_type"] == "RuntimeError"
        assert context["error_message"] == "auth failed"
        assert context["request_path"] == "/x"
        assert context["error_attributes"] == {"api_key": REDACTED, "attempt": 2}
