"""
infrastructure.persistence.connection - Async SQLite connection manager.

Wraps aiosqlite with a context manager: one connection per operation,
commit on success, rollback on error. Driver errors leave this module as
domain exceptions: a database that cannot be opened raises
StoreUnavailableError, any other failed statement raises RepositoryError.
Also serves as the store's liveness check for the demo-data fallback.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import aiosqlite

from domain.exceptions import RepositoryError, StoreUnavailableError

logger = logging.getLogger(__name__)


class AsyncSQLiteConnection:
    """Async SQLite connection provider with auto-commit/rollback."""

    def __init__(self, db_path: str):
        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield an async SQLite connection with FK support.

        Commits on success, rolls back on exception.

        Raises:
            StoreUnavailableError: if the database cannot be opened.
            RepositoryError: if a statement fails once connected.
        """
        try:
            conn = await aiosqlite.connect(self._db_path)
        except aiosqlite.Error as exc:
            logger.warning("Cannot open database %s: %s", self._db_path, exc)
            raise StoreUnavailableError("The database is unavailable.") from exc

        try:
            await conn.execute("PRAGMA foreign_keys = ON")
            conn.row_factory = aiosqlite.Row
            yield conn
            await conn.commit()
        except Exception as exc:
            await conn.rollback()
            logger.exception("Database operation failed, transaction rolled back.")
            if isinstance(exc, (aiosqlite.Error, OverflowError)):
                raise RepositoryError(f"Database operation failed: {exc}") from exc
            raise
        finally:
            await conn.close()

    async def ping(self) -> bool:
        """Return True when the database file can be opened and queried."""
        try:
            async with aiosqlite.connect(self._db_path) as conn:
                await conn.execute("SELECT 1")
            return True
        except Exception as exc:
            logger.warning("Database ping failed for %s: %s", self._db_path, exc)
            return False
