"""Mutual exclusion around the single shared database session.

The service talks to the database over exactly one connection. Every request
that needs it goes through ``DatabaseGuard``: at most one request holds the
session at a time and the others suspend on an ``asyncio.Lock`` until it is
released. Statements from different requests therefore never interleave on
the connection.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession


class DatabaseGuard:
    """Owns the shared session and serializes access to it.

    Use ``session()`` in handlers. ``acquire()`` and ``release()`` are the
    explicit halves of the same operation and must always be paired.

    Args:
        connection: The single connection the session is bound to.
        session: The session every request shares.
    """

    def __init__(self, connection: AsyncConnection, session: AsyncSession) -> None:
        self._connection = connection
        self._session = session
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def for_connection(cls, connection: AsyncConnection) -> "DatabaseGuard":
        """Build a guard with a fresh session bound to ``connection``."""
        return cls(connection, AsyncSession(bind=connection, expire_on_commit=False))

    @property
    def locked(self) -> bool:
        """Whether a request currently holds the session."""
        return self._lock.locked()

    async def acquire(self) -> AsyncSession:
        """Wait until the session is free and take it.

        Raises:
            RuntimeError: If the guard has been closed.
        """
        await self._lock.acquire()
        if self._closed:
            self._lock.release()
            raise RuntimeError("Database guard is closed")
        return self._session

    def release(self) -> None:
        """Hand the session back so the next waiting request can take it."""
        self._lock.release()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """Hold the session for the duration of the block.

        The work done in the block is committed when it exits normally and
        rolled back when it raises. The session is released on every path.

        Yields:
            AsyncGenerator[AsyncSession]: The shared session.
        """
        session = await self.acquire()
        try:
            yield session
            await session.commit()
        except BaseException:
            await session.rollback()
            raise
        finally:
            self.release()

    async def close(self) -> None:
        """Close the session and its connection once no request holds them."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            await self._session.close()
            await self._connection.close()
            logger.info("Database connection closed")
