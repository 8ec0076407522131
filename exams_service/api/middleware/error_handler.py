"""Fault normalizer: global exception handlers for the application.

Handlers bound through the dispatch layer encode their own outcomes. Every
other failure reaches one of the handlers below and is turned into the same
``{"Err": kind}`` envelope:

| Failure                              | ErrorKind          | Status |
|--------------------------------------|--------------------|--------|
| no route matched                     | NotFound           | 404    |
| body failed to decode                | DecodeError        | 400    |
| method not allowed on matched route  | MethodNotAllowed   | 405    |
| ServiceError raised as a rejection   | its kind           | 400    |
| anything else                        | Unknown            | 500    |

Only the last row is unexpected; it is logged with the (sanitized) raw fault
detail and recorded on the current trace span.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from exams_service.api.utils.responses import err_response
from exams_service.core.context import RequestContext
from exams_service.core.error_context import sanitize_error_context
from exams_service.core.exceptions import ErrorKind, ServiceError, Severity
from exams_service.core.logging import log_event
from exams_service.core.observability import record_fault

HTTP_STATUS_KINDS: dict[int, ErrorKind] = {
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_400_BAD_REQUEST: ErrorKind.DECODE_ERROR,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorKind.METHOD_NOT_ALLOWED,
}


def _sensitive_fields(request: Request) -> list[str]:
    settings = getattr(request.app.state, "settings", None)
    return settings.log_config.sensitive_fields if settings else []


def report_unknown_fault(
    request: Request, exc: Exception, context: dict[str, Any] | None = None
) -> Response:
    """Log an unexpected fault and answer ``Unknown`` with HTTP 500.

    Args:
        request: The request being handled.
        exc: The fault.
        context: Extra detail to log alongside the fault.

    Returns:
        Response: ``{"Err": "Unknown"}`` with status 500.
    """
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": str(request.url.path),
            **(context or {}),
        },
        _sensitive_fields(request),
    )
    log_event(
        "intercepted unknown error kind",
        source=repr(exc),
        severity=Severity.HIGH,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )
    record_fault(exc)
    return err_response(ErrorKind.UNKNOWN, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def service_error_handler(request: Request, exc: Exception) -> Response:
    """Handle a ServiceError that escaped a route as a typed rejection.

    Raises:
        TypeError: If exc is not a ServiceError instance
    """
    if not isinstance(exc, ServiceError):
        raise TypeError(f"Expected ServiceError, got {type(exc).__name__}")

    logger.debug(
        "Rejected request with {}",
        exc.kind.value,
        method=request.method,
        path=str(request.url.path),
    )
    return err_response(exc.kind, exc.status_code)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI body validation failures as ``DecodeError``.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    logger.debug(
        "Request body failed to decode",
        path=str(request.url.path),
        error_count=len(exc.errors()),
    )
    return err_response(ErrorKind.DECODE_ERROR, status.HTTP_400_BAD_REQUEST)


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTP exceptions raised by routing.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    kind = HTTP_STATUS_KINDS.get(exc.status_code)
    if kind is None:
        return report_unknown_fault(
            request, exc, {"status": exc.status_code, "detail": exc.detail}
        )

    return err_response(kind, exc.status_code, exc.headers)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle any exception no other handler claimed."""
    return report_unknown_fault(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the fault normalizer on the application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
