"""
VidShare Database Layer - async SQLAlchemy engine and session management.

The ``Database`` handle is created once per process (see ``main.lifespan``)
and stored on ``app.state``; nothing in this module keeps a global engine.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """
    Async connection manager.

    Usage:
        database = Database(settings.database_url)
        await database.connect()

        async with database.session() as session:
            await session.execute(...)

        await database.dispose()
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url, echo=echo, pool_pre_ping=True,
        )
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, autoflush=False,
        )

    async def connect(self, create_tables: bool = False) -> None:
        """Open the pool and optionally create every mapped table."""
        # Import for side effects: registers all mapped classes on Base.metadata
        from vidshare.models import models  # noqa: F401

        if create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables ensured")

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that is rolled back if the caller raises."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


# ── FastAPI dependencies ─────────────────────────────────────────────────

def get_database(request: Request) -> Database:
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialised; is the lifespan running?")
    return database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Handlers commit explicitly after mutations."""
    async with get_database(request).session() as session:
        yield session
