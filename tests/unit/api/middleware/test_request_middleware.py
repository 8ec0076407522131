"""Unit tests for the correlation ID and request logging middleware."""

import asyncio
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from exams_service.api.middleware.request_context import (
    CORRELATION_ID_HEADER,
    RequestContextMiddleware,
)
from exams_service.api.middleware.request_logging import RequestLoggingMiddleware
from exams_service.core.config import LogConfig
from exams_service.core.context import RequestContext


def build_app(log_config: LogConfig | None = None) -> FastAPI:
    app = FastAPI()

    @app.get("/echo")
    async def echo() -> dict[str, str | None]:
        return {"correlation_id": RequestContext.get_correlation_id()}

    @app.get("/info")
    async def info() -> dict[str, str]:
        return {}

    @app.get("/slow")
    async def slow() -> dict[str, str]:
        await asyncio.sleep(0.01)
        return {}

    app.add_middleware(RequestLoggingMiddleware, log_config=log_config or LogConfig())
    app.add_middleware(RequestContextMiddleware)
    return app


@pytest.mark.unit
class TestRequestContextMiddleware:
    """Test correlation ID propagation."""

    @pytest.mark.timeout(5)
    async def test_generates_id(self) -> None:
        async with AsyncClient(
            transport=ASGITransport(app=build_app()), base_url="http://test"
        ) as client:
            response = await client.get("/echo")

        correlation_id = response.headers[CORRELATION_ID_HEADER]
        assert correlation_id
        assert response.json() == {"correlation_id": correlation_id}

    @pytest.mark.timeout(5)
    async def test_keeps_caller_id(self) -> None:
        async with AsyncClient(
            transport=ASGITransport(app=build_app()), base_url="http://test"
        ) as client:
            response = await client.get(
                "/echo", headers={CORRELATION_ID_HEADER: "caller-1"}
            )

        assert response.headers[CORRELATION_ID_HEADER] == "caller-1"
        assert response.json() == {"correlation_id": "caller-1"}


@pytest.mark.unit
class TestRequestLoggingMiddleware:
    """Test request logging."""

    @pytest.mark.timeout(5)
    async def test_logs_method_and_path(self, log_records: list[dict[str, Any]]) -> None:
        async with AsyncClient(
            transport=ASGITransport(app=build_app()), base_url="http://test"
        ) as client:
            await client.get("/echo", headers={CORRELATION_ID_HEADER: "caller-2"})

        messages = [r["message"] for r in log_records]
        assert "GET /echo" in messages
        completed = next(r for r in log_records if r["message"] == "Request completed")
        assert completed["extra"]["status_code"] == 200
        assert completed["extra"]["correlation_id"] == "caller-2"

    @pytest.mark.timeout(5)
    async def test_excluded_paths(self, log_records: list[dict[str, Any]]) -> None:
        async with AsyncClient(
            transport=ASGITransport(app=build_app()), base_url="http://test"
        ) as client:
            await client.get("/info")

        assert not [r for r in log_records if r["message"] == "GET /info"]

    @pytest.mark.timeout(5)
    async def test_slow_requests_warn(self, log_records: list[dict[str, Any]]) -> None:
        app = build_app(LogConfig(slow_request_threshold_ms=1))

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            await client.get("/slow")

        assert [r for r in log_records if r["message"] == "Slow request detected"]
