"""Async engine and session wiring.

Nothing is created at import time: callers build an engine from
``DatabaseSettings`` and hand sessions to repositories explicitly.

Example:
    engine = create_engine()
    await create_tables(engine)
    factory = create_session_factory(engine)

    async with session_scope(factory) as session:
        root = await repo.insert(session, name="root")
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from happy_tree.core.database.base import Base

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

    from happy_tree.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def create_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create an async engine from database settings.

    In-memory SQLite shares one connection so that every session sees the
    same database.
    """
    if settings is None:
        from happy_tree.core.settings import get_db_settings

        settings = get_db_settings()

    kwargs: dict[str, Any] = {"echo": settings.echo, "pool_pre_ping": settings.pool_pre_ping}
    if settings.is_sqlite and ":memory:" in settings.url:
        kwargs["poolclass"] = StaticPool

    engine = create_async_engine(settings.url, **kwargs)
    logger.info(
        "Database engine created",
        extra={"dialect": engine.dialect.name, "echo": settings.echo},
    )
    return engine


def create_session_factory(
    engine: AsyncEngine,
    settings: DatabaseSettings | None = None,
) -> async_sessionmaker[AsyncSession]:
    if settings is None:
        from happy_tree.core.settings import get_db_settings

        settings = get_db_settings()

    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=settings.expire_on_commit,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session that commits on success and rolls back on error.

    Yields:
        Database session, closed on exit.
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.warning("Rolling back session after error", exc_info=True)
            await session.rollback()
            raise


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table registered on ``Base.metadata`` (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created", extra={"tables": sorted(Base.metadata.tables)})


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose of the engine's connection pool."""
    logger.info("Closing database connection")
    await engine.dispose()


__all__ = [
    "close_engine",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "session_scope",
]
