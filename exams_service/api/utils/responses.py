"""JSON responses rendered with orjson, and envelope response builders."""

from collections.abc import Mapping
from typing import Any

import orjson
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from exams_service.api.schemas.envelope import ErrEnvelope
from exams_service.core.exceptions import ErrorKind


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for JSON serialization."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json")

        return orjson.dumps(content, option=orjson.OPT_SORT_KEYS)


def ok_response(payload: object) -> ORJSONResponse:
    """Wrap an already-encoded handler payload in an ``Ok`` envelope (HTTP 200)."""
    return ORJSONResponse(status_code=status.HTTP_200_OK, content={"Ok": payload})


def err_response(
    kind: ErrorKind,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    headers: Mapping[str, str] | None = None,
) -> ORJSONResponse:
    """Wrap an error kind in an ``Err`` envelope.

    Args:
        kind: The error kind to report.
        status_code: HTTP status of the response.
        headers: Extra response headers (e.g. ``Allow`` on 405).

    Returns:
        ORJSONResponse: The envelope response.
    """
    return ORJSONResponse(
        status_code=status_code,
        content=ErrEnvelope(Err=kind),
        headers=dict(headers) if headers else None,
    )
