"""Async HTTP client for the identity service.

The identity service answers every call with its own envelope,
``{"Ok": value}`` or ``{"Err": "<tag>"}``. This client unwraps it, returning
the value or raising ``AuthError`` with the remote tag. Failures that never
produce an envelope (network errors, unreadable replies) are raised with
local tags so callers only ever see ``AuthError``.
"""

from enum import Enum
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from exams_service.core.config import AuthServiceConfig
from exams_service.core.observability import trace_operation


class AuthErrorKind(Enum):
    """Error tags the identity service can report, plus local transport tags."""

    NOT_FOUND = "NotFound"
    DECODE_ERROR = "DecodeError"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    BAD_REQUEST = "BadRequest"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    API_KEY_NONEXISTENT = "ApiKeyNonexistent"
    API_KEY_UNAUTHORIZED = "ApiKeyUnauthorized"
    NETWORK = "Network"
    UNKNOWN = "Unknown"

    @classmethod
    def from_tag(cls, tag: object) -> "AuthErrorKind":
        """Parse a remote tag, folding anything unrecognized into UNKNOWN."""
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


class AuthError(Exception):
    """Raised when the identity service rejects or fails a call.

    Args:
        kind: The (remote or local) error tag
        detail: Free-form detail for diagnostics, never shown to clients
    """

    def __init__(self, kind: AuthErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class User(BaseModel):
    """Identity returned for a valid API key."""

    model_config = ConfigDict(extra="allow", frozen=True)

    user_id: int
    creation_time: int
    name: str
    email: str


class AuthService:
    """Client for the identity service.

    One instance is created at startup and shared by every request; the
    underlying ``httpx.AsyncClient`` pools connections.

    Args:
        base_url: Base URL of the identity service.
        timeout_seconds: Transport timeout for each call.
        transport: Optional httpx transport (used to substitute the network).
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: AuthServiceConfig) -> "AuthService":
        """Build a client from configuration."""
        return cls(config.url, config.timeout_seconds)

    async def get_user_by_api_key_if_valid(self, api_key: str) -> User:
        """Resolve an API key to its user.

        Args:
            api_key: The caller's API key.

        Returns:
            User: The user owning the key.

        Raises:
            AuthError: If the key is rejected or the call fails.
        """
        value = await self._query(
            "public/get_user_by_api_key_if_valid", {"api_key": api_key}
        )
        try:
            return User.model_validate(value)
        except ValidationError as e:
            raise AuthError(AuthErrorKind.DECODE_ERROR, str(e)) from e

    async def _query(self, endpoint: str, props: dict[str, Any]) -> object:
        with trace_operation("auth_service.query", endpoint=endpoint):
            try:
                response = await self._client.post(f"/{endpoint}", json=props)
            except httpx.HTTPError as e:
                raise AuthError(AuthErrorKind.NETWORK, repr(e)) from e

        try:
            envelope = response.json()
        except ValueError as e:
            raise AuthError(
                AuthErrorKind.DECODE_ERROR,
                f"status {response.status_code}: undecodable body",
            ) from e

        if isinstance(envelope, dict) and len(envelope) == 1:
            if "Ok" in envelope:
                return envelope["Ok"]
            if "Err" in envelope:
                raise AuthError(AuthErrorKind.from_tag(envelope["Err"]))

        raise AuthError(
            AuthErrorKind.DECODE_ERROR,
            f"status {response.status_code}: not an envelope",
        )

    async def aclose(self) -> None:
        """Close pooled connections."""
        await self._client.aclose()
        logger.info("Identity service client closed")
