"""
Database engine and session management.

Provides the async SQLAlchemy engine, the session factory shared by the
API and the background jobs, and table creation helpers.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pokedeck.config import settings
from pokedeck.models.db import Base


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """
    Build an async engine for a database URL.

    SQLite (used for local runs and tests) does not support connection
    pre-ping, so it is only enabled for server databases.
    """
    options: dict[str, Any] = {"echo": echo}
    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory that keeps loaded attributes readable after commit."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = create_engine_for(settings.database_url, echo=settings.debug)

async_session_factory = create_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/decks/{user_id}")
        async def list_decks(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """
    Unit of work for jobs running outside a request.

    Commits when the block exits cleanly, rolls back otherwise.
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind: AsyncEngine | None = None) -> None:
    """
    Drop all database tables.

    WARNING: Destroys all data. Use only for testing.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
