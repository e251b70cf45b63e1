"""Database engine and sessions for CourseHub.

``Database`` owns one async engine and its session factory. Sessions never
commit on their own: services commit through their repositories, so a
session closed without a commit discards its writes.

The application uses a single lazily built instance (``get_database``);
tests and the CLI can build their own against any SQLAlchemy async URL.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coursehub.config import settings
from coursehub.persistence.tables import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str, pool_size: int, max_overflow: int) -> dict[str, Any]:
    # SQLite drivers use their own pool classes, which reject sizing options
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": 1800,
    }


class Database:
    """Async engine plus session factory for one database URL."""

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 20):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url, **_engine_options(url, pool_size, max_overflow)
        )
        self.sessions = async_sessionmaker(self.engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session; uncommitted work is rolled back on close."""
        async with self.sessions() as session:
            yield session

    async def create_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Run ``SELECT 1`` on a plain connection. Never raises."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed: %s", e)
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


_database: Database | None = None


def get_database() -> Database:
    """Return the application database, building it from settings on first use."""
    global _database
    if _database is None:
        _database = Database(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return _database


async def close_database() -> None:
    """Dispose the application database, if it was ever built."""
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a request-scoped session."""
    async with get_database().session() as session:
        yield session
