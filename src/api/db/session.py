"""Engine and session wiring for the ladder database.

PostgreSQL (asyncpg) is the deployed backend. SQLite (aiosqlite) URLs are
accepted for local runs and tests; they get no pool tuning and no asyncpg
server settings.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from api.config.settings import Settings, get_settings


def engine_options(settings: Settings) -> dict[str, object]:
    options: dict[str, object] = {"echo": settings.db_echo}
    if settings.sqlalchemy_database_url.startswith("sqlite"):
        return options
    options.update(
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_s,
        pool_recycle=settings.db_pool_recycle_s,
        connect_args={"server_settings": {"timezone": settings.db_timezone}},
    )
    return options


@lru_cache(maxsize=1)
def get_engine() -> AsyncEngine:
    settings = get_settings()
    return create_async_engine(settings.sqlalchemy_database_url, **engine_options(settings))


@lru_cache(maxsize=1)
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def dispose_engine() -> None:
    """Close pooled connections if an engine was ever created."""
    if get_engine.cache_info().currsize == 0:
        return
    await get_engine().dispose()
    get_sessionmaker.cache_clear()
    get_engine.cache_clear()


async def init_db() -> None:
    """Create player, match and ranking tables when ``db_auto_create`` is set."""
    from api.db import models as _models

    del _models
    engine = get_engine()
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for scripts running outside a request."""
    async with get_sessionmaker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; repositories commit their own writes."""
    async with session_scope() as session:
        yield session
