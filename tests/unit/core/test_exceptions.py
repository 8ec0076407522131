"""Unit tests for the error taxonomy."""

import pytest

from exams_service.core.exceptions import (
    BodyDecodeError,
    ErrorKind,
    ServiceError,
    Severity,
)


@pytest.mark.unit
class TestErrorKind:
    """Test the wire tags of ErrorKind."""

    @pytest.mark.parametrize(
        ("kind", "tag"),
        [
            (ErrorKind.NOT_FOUND, "NotFound"),
            (ErrorKind.DECODE_ERROR, "DecodeError"),
            (ErrorKind.METHOD_NOT_ALLOWED, "MethodNotAllowed"),
            (ErrorKind.API_KEY_UNAUTHORIZED, "ApiKeyUnauthorized"),
            (ErrorKind.API_KEY_NONEXISTENT, "ApiKeyNonexistent"),
            (ErrorKind.AUTH_INTERNAL_SERVER_ERROR, "AuthInternalServerError"),
            (ErrorKind.AUTH_BAD_REQUEST, "AuthBadRequest"),
            (ErrorKind.AUTH_OTHER, "AuthOther"),
            (ErrorKind.INTERNAL_SERVER_ERROR, "InternalServerError"),
            (ErrorKind.UNKNOWN, "Unknown"),
        ],
    )
    def test_tag_matches_variant_name(self, kind: ErrorKind, tag: str) -> None:
        """Each kind serializes to its CamelCase variant name."""
        assert kind.value == tag
        assert ErrorKind(tag) is kind

    def test_taxonomy_is_closed(self) -> None:
        """No kinds beyond the documented ten exist."""
        assert len(ErrorKind) == 10


@pytest.mark.unit
class TestServiceError:
    """Test ServiceError construction and representation."""

    def test_defaults(self) -> None:
        """Message falls back to the tag and status defaults to 400."""
        error = ServiceError(ErrorKind.AUTH_OTHER)

        assert error.kind is ErrorKind.AUTH_OTHER
        assert error.message == "AuthOther"
        assert error.status_code == 400
        assert error.context == {}
        assert error.cause is None
        assert str(error) == "[AuthOther] AuthOther"

    def test_cause_is_chained(self) -> None:
        """The cause is kept and linked as __cause__."""
        cause = ValueError("boom")
        error = ServiceError(
            ErrorKind.UNKNOWN,
            "wrapped",
            status_code=500,
            context={"step": "decode"},
            cause=cause,
        )

        assert error.cause is cause
        assert error.__cause__ is cause
        assert repr(error) == (
            "ServiceError(kind=Unknown, message='wrapped', status_code=500, "
            "context={'step': 'decode'})"
        )

    def test_body_decode_error_kind(self) -> None:
        """BodyDecodeError always carries DecodeError."""
        error = BodyDecodeError("bad body")

        assert isinstance(error, ServiceError)
        assert error.kind is ErrorKind.DECODE_ERROR
        assert error.status_code == 400
        assert error.message == "bad body"


@pytest.mark.unit
def test_severity_values() -> None:
    """Severity values are their own names."""
    assert [s.value for s in Severity] == ["LOW", "MEDIUM", "HIGH", "CRITICAL"]
