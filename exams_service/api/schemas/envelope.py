"""The response envelope shared by every endpoint.

Every handler response body is exactly one of:

- ``{"Ok": <value>}`` with HTTP 200
- ``{"Err": "<ErrorKind>"}`` with HTTP 400, 404, 405 or 500

Clients never see any other body shape, whatever the failure origin.
"""

from pydantic import BaseModel, ConfigDict, Field

from exams_service.core.exceptions import ErrorKind


class OkEnvelope[T](BaseModel):
    """Successful result of a handler."""

    model_config = ConfigDict(frozen=True)

    Ok: T = Field(..., description="The handler's response payload")  # noqa: N815


class ErrEnvelope(BaseModel):
    """Failed result, from a handler or from the fault normalizer."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"examples": [{"Err": "ApiKeyUnauthorized"}]},
    )

    Err: ErrorKind = Field(..., description="The error kind")  # noqa: N815
