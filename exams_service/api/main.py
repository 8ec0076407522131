"""FastAPI application factory and lifecycle.

Startup connects to the database (retrying until it is reachable), opens the
identity service client, and publishes both through
``app.state.dependencies`` for the dispatch layer. Shutdown releases them in
reverse order.

Middleware are executed in reverse order of registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from exams_service.api.dispatch import ServiceDependencies, register_handlers
from exams_service.api.middleware.error_handler import register_exception_handlers
from exams_service.api.middleware.request_context import RequestContextMiddleware
from exams_service.api.middleware.request_logging import RequestLoggingMiddleware
from exams_service.api.routes import ROUTES
from exams_service.api.utils.responses import ORJSONResponse
from exams_service.core.config import Settings, get_settings
from exams_service.core.logging import setup_logging
from exams_service.core.observability import (
    instrument_app,
    instrument_engine,
    setup_tracing,
)
from exams_service.infrastructure.auth import AuthService
from exams_service.infrastructure.database import open_database


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Open the shared database connection and identity client.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    settings: Settings = app_instance.state.settings

    engine, database = await open_database(settings.database_config)
    instrument_engine(engine, settings)
    auth_service = AuthService.from_config(settings.auth_service_config)

    app_instance.state.dependencies = ServiceDependencies(
        settings=settings, database=database, auth_service=auth_service
    )

    logger.info(
        "Application startup complete - {} v{}",
        settings.service_name,
        settings.service_version,
    )

    yield

    logger.info("Application shutdown initiated")
    await auth_service.aclose()
    await database.close()
    await engine.dispose()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        debug=settings.debug,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings

    register_exception_handlers(application)

    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        trust_proxy_headers=settings.environment == "production",
    )
    application.add_middleware(RequestContextMiddleware)

    @application.get("/info")
    async def info() -> dict[str, str]:
        """Report the service name and version."""
        return {"version": settings.service_version, "name": settings.service_name}

    register_handlers(application, ROUTES)

    instrument_app(application, settings)

    return application


app = create_app()
