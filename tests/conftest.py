"""Root conftest.py for the exams service test suite.

Project-wide fixtures: deterministic settings, a log capture sink, an
in-memory database behind a ``DatabaseGuard`` and a fake identity service.
"""

import json
from collections.abc import AsyncGenerator, Generator
from typing import Any

import httpx
import pytest
from loguru import logger

from exams_service.core.config import (
    AuthServiceConfig,
    DatabaseConfig,
    LogConfig,
    ObservabilityConfig,
    Settings,
    get_settings,
)
from exams_service.core.context import RequestContext
from exams_service.core.logging import _state
from exams_service.infrastructure.auth import AuthService
from exams_service.infrastructure.database import DatabaseGuard, open_database

AUTH_BASE_URL = "http://auth.test"

VALID_API_KEY = "valid-key"

TEST_USER: dict[str, Any] = {
    "user_id": 7,
    "creation_time": 1_600_000_000_000,
    "name": "Ada Lovelace",
    "email": "ada@example.com",
}

# api_key -> remote error tag returned by the fake identity service
REJECTED_API_KEYS: dict[str, str] = {
    "bad": "ApiKeyNonexistent",
    "expired": "ApiKeyUnauthorized",
    "broken": "InternalServerError",
}


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


def identity_service(request: httpx.Request) -> httpx.Response:
    """Answer identity service calls the way the real service does."""
    if request.url.path != "/public/get_user_by_api_key_if_valid":
        return httpx.Response(404, json={"Err": "NotFound"})

    api_key = json.loads(request.content)["api_key"]
    if api_key == VALID_API_KEY:
        return httpx.Response(200, json={"Ok": TEST_USER})
    return httpx.Response(
        400, json={"Err": REJECTED_API_KEYS.get(api_key, "ApiKeyNonexistent")}
    )


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None]:
    """Keep application factories from reconfiguring Loguru during tests."""
    previous = _state.configured
    _state.configured = True
    yield
    _state.configured = previous


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear RequestContext before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache so environment changes do not leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture Loguru records emitted during the test.

    Yields:
        list[dict[str, Any]]: The captured records, in emission order.
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(
        lambda message: records.append(message.record), level="DEBUG"
    )
    yield records
    logger.remove(handler_id)


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an in-process service with tracing disabled.

    Returns:
        Settings: Immutable settings pointing at in-memory resources.
    """
    return Settings(
        environment="development",
        log_config=LogConfig(log_formatter_type="console"),
        observability_config=ObservabilityConfig(
            enable_tracing=False, exporter_type="none"
        ),
        database_config=DatabaseConfig(
            database_url="sqlite+aiosqlite:///:memory:",
            connect_retry_seconds=0.01,
            create_schema=True,
        ),
        auth_service_config=AuthServiceConfig(url=AUTH_BASE_URL),
    )


@pytest.fixture
async def database(test_settings: Settings) -> AsyncGenerator[DatabaseGuard]:
    """Provide a guard over a fresh in-memory database with the schema created.

    Yields:
        DatabaseGuard: The guard, closed after the test.
    """
    engine, guard = await open_database(test_settings.database_config)
    yield guard
    await guard.close()
    await engine.dispose()


@pytest.fixture
async def auth_service() -> AsyncGenerator[AuthService]:
    """Provide an identity service client backed by ``identity_service``.

    Yields:
        AuthService: The client, closed after the test.
    """
    service = AuthService(AUTH_BASE_URL, transport=httpx.MockTransport(identity_service))
    yield service
    await service.aclose()
