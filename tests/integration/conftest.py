"""Shared fixtures for integration tests."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from exams_service.api.dispatch import ServiceDependencies
from exams_service.api.main import create_app
from exams_service.core.config import Settings
from exams_service.infrastructure.auth import AuthService
from exams_service.infrastructure.database import DatabaseGuard


@pytest.fixture
def app(
    test_settings: Settings, database: DatabaseGuard, auth_service: AuthService
) -> FastAPI:
    """An application wired to the in-memory database and fake identity service.

    The ASGI transport does not run the lifespan, so the shared dependencies
    are installed directly.
    """
    application = create_app(test_settings)
    application.state.dependencies = ServiceDependencies(
        settings=test_settings, database=database, auth_service=auth_service
    )
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client for ``app``; unexpected faults come back as responses."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
