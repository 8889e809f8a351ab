"""
Database engine and session management.

The API takes one session per request through ``get_session``; the catalog
sync takes one per record through ``session_scope``. SQLite engines are
built with serialized writers so that concurrent batch upserts queue on
the write lock instead of failing with "database is locked".
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from duelvault.config import settings
from duelvault.models.db import Base


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, _connection_record):
        # pysqlite's own BEGIN handling would defer the lock
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    SQLite transactions start with BEGIN IMMEDIATE, taking the write lock
    up front. Other backends keep their default isolation.
    """
    engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        _serialize_sqlite_writers(engine)
    return engine


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """
    A session that commits when the block exits and rolls back on any error.

    Args:
        factory: Session factory to use; defaults to the application's
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one transactional session per request.

    Usage:
        @router.get("/items")
        async def get_items(session: SessionDep):
            ...
    """
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Create all tables. Called at application and sync-job startup."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
