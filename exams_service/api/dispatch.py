"""Binding of typed handlers to HTTP routes.

A handler is any async callable of the shape::

    async def handler(settings, database, auth_service, props: Props) -> Response

where ``Props`` and ``Response`` are pydantic-compatible types. Failures are
raised as ``ServiceError``. ``HandlerBinding`` pairs a handler with its route
and payload types, and ``adapter`` turns a binding into a FastAPI endpoint
that decodes the body, injects the shared dependencies, invokes the handler
and encodes the outcome into the response envelope.

Bindings are registered in order; the first route that matches wins.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, get_type_hints

from fastapi import FastAPI, Request, status
from fastapi.responses import Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from exams_service.api.schemas.envelope import ErrEnvelope, OkEnvelope
from exams_service.api.utils.responses import err_response, ok_response
from exams_service.core.config import Settings
from exams_service.core.exceptions import BodyDecodeError, ServiceError
from exams_service.core.observability import trace_operation
from exams_service.infrastructure.auth.client import AuthService
from exams_service.infrastructure.database.guard import DatabaseGuard


@dataclass(frozen=True)
class ServiceDependencies:
    """Shared handles injected into every handler invocation.

    Created once at startup. Handlers receive the same instances on every
    request; nothing here is rebuilt per request.
    """

    settings: Settings
    database: DatabaseGuard
    auth_service: AuthService


class Handler[PropsT, ResponseT](Protocol):
    """A typed, fallible, asynchronous business operation."""

    __name__: str

    def __call__(
        self,
        settings: Settings,
        database: DatabaseGuard,
        auth_service: AuthService,
        props: PropsT,
    ) -> Awaitable[ResponseT]: ...


@dataclass(frozen=True)
class HandlerBinding[PropsT, ResponseT]:
    """A route pattern bound to a handler and its payload types.

    Use ``HandlerBinding.bind`` to read the payload types off the handler's
    annotations.
    """

    path: str
    handler: Handler[PropsT, ResponseT]
    props_type: type[PropsT]
    response_type: type[ResponseT]
    props_adapter: TypeAdapter[PropsT] = field(init=False, repr=False, compare=False)
    response_adapter: TypeAdapter[ResponseT] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "props_adapter", TypeAdapter(self.props_type))
        object.__setattr__(self, "response_adapter", TypeAdapter(self.response_type))

    @classmethod
    def bind(
        cls, path: str, handler: Handler[PropsT, ResponseT]
    ) -> "HandlerBinding[PropsT, ResponseT]":
        """Bind ``handler`` to ``path``, taking types from its annotations.

        The payload type is the annotation of the handler's ``props``
        parameter and the response type is its return annotation.

        Raises:
            TypeError: If either annotation is missing.
        """
        hints = get_type_hints(handler)
        if "props" not in hints or "return" not in hints:
            msg = f"Handler {handler.__name__} must annotate 'props' and its return"
            raise TypeError(msg)
        return cls(path, handler, hints["props"], hints["return"])

    @property
    def name(self) -> str:
        return self.handler.__name__


def decode_props[PropsT](binding: HandlerBinding[PropsT, Any], body: bytes) -> PropsT:
    """Decode a raw JSON body into the binding's payload type.

    Raises:
        BodyDecodeError: If the body is not JSON or does not match the type.
    """
    try:
        return binding.props_adapter.validate_json(body)
    except PydanticValidationError as e:
        msg = f"Request body does not match {binding.props_type.__name__}"
        raise BodyDecodeError(msg, cause=e) from e


def adapter(
    binding: HandlerBinding[Any, Any],
) -> Callable[[Request], Awaitable[Response]]:
    """Turn a handler binding into a FastAPI endpoint.

    The endpoint:
    1. decodes the body into the handler's input type
       (failure propagates as ``BodyDecodeError``, reported as ``DecodeError``),
    2. takes the shared dependencies from ``app.state.dependencies``,
    3. invokes the handler inside a trace span,
    4. answers ``{"Ok": value}`` (200) or ``{"Err": kind}`` (400).

    Args:
        binding: The handler binding to adapt.

    Returns:
        Callable[[Request], Awaitable[Response]]: The endpoint.
    """

    async def endpoint(request: Request) -> Response:
        props = decode_props(binding, await request.body())
        dependencies: ServiceDependencies = request.app.state.dependencies

        try:
            with trace_operation(f"handler.{binding.name}", route=binding.path):
                value = await binding.handler(
                    dependencies.settings,
                    dependencies.database,
                    dependencies.auth_service,
                    props,
                )
        except ServiceError as e:
            return err_response(e.kind, status.HTTP_400_BAD_REQUEST)

        return ok_response(binding.response_adapter.dump_python(value, mode="json"))

    endpoint.__name__ = binding.name
    return endpoint


def register_handlers(app: FastAPI, bindings: Sequence[HandlerBinding[Any, Any]]) -> None:
    """Register each binding as a POST route, in order.

    Args:
        app: The FastAPI application.
        bindings: The route table.
    """
    for binding in bindings:
        app.add_api_route(
            binding.path,
            adapter(binding),
            methods=["POST"],
            name=binding.name,
            openapi_extra={
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": binding.props_adapter.json_schema()
                        }
                    },
                }
            },
            responses={
                status.HTTP_200_OK: {"model": OkEnvelope[binding.response_type]},
                status.HTTP_400_BAD_REQUEST: {"model": ErrEnvelope},
            },
        )
