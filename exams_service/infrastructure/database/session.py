"""Async database engine creation and connection bootstrap.

The service holds a single connection for its whole lifetime. At startup it
keeps retrying until the database accepts that connection, logging each
failure, then wraps it in a ``DatabaseGuard``.
"""

import asyncio
from typing import Any

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from exams_service.core.config import DatabaseConfig
from exams_service.core.exceptions import Severity
from exams_service.core.logging import log_event
from exams_service.infrastructure.database.base import Base
from exams_service.infrastructure.database.guard import DatabaseGuard


def create_database_engine(db_config: DatabaseConfig) -> AsyncEngine:
    """Create an async engine sized for one long-lived connection.

    Args:
        db_config: Database configuration.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    engine_options: dict[str, Any] = {"echo": db_config.echo}

    if db_config.database_url.startswith("sqlite"):
        # In-memory databases only exist on the connection that created them
        engine_options["poolclass"] = StaticPool
        engine_options["connect_args"] = {"check_same_thread": False}
    else:
        engine_options.update(
            pool_size=1,
            max_overflow=0,
            pool_pre_ping=True,
            connect_args={
                "server_settings": {"jit": "off"},
                "command_timeout": db_config.command_timeout_seconds,
            },
        )

    engine = create_async_engine(db_config.database_url, **engine_options)
    logger.info("Created database engine for {}", engine.url.render_as_string())
    return engine


async def connect_with_retry(
    engine: AsyncEngine, retry_seconds: float
) -> AsyncConnection:
    """Open a connection, retrying until the database accepts it.

    Args:
        engine: The engine to connect with.
        retry_seconds: Delay between attempts.

    Returns:
        AsyncConnection: An open connection.
    """
    while True:
        try:
            connection = await engine.connect()
            await connection.execute(text("SELECT 1"))
            # End the probe's implicit transaction so the session owns the next one
            await connection.rollback()
        except (SQLAlchemyError, OSError) as e:
            log_event(
                str(e),
                source=str(e.__cause__) if e.__cause__ else None,
                severity=Severity.HIGH,
            )
        else:
            logger.info("Database connection successful")
            return connection

        await asyncio.sleep(retry_seconds)


async def create_schema(connection: AsyncConnection) -> None:
    """Create any missing tables on ``connection``."""
    await connection.run_sync(Base.metadata.create_all)
    await connection.commit()
    logger.info("Database schema ensured")


async def open_database(db_config: DatabaseConfig) -> tuple[AsyncEngine, DatabaseGuard]:
    """Connect to the database and wrap the connection in a guard.

    Args:
        db_config: Database configuration.

    Returns:
        tuple[AsyncEngine, DatabaseGuard]: The engine (to dispose at shutdown)
            and the guard every request shares.
    """
    engine = create_database_engine(db_config)
    connection = await connect_with_retry(engine, db_config.connect_retry_seconds)

    if db_config.create_schema:
        await create_schema(connection)

    return engine, DatabaseGuard.for_connection(connection)
