"""
Database configuration module with async SQLAlchemy engine and session management.

This module provides the database connection, session factory, and utility
functions for database initialization and shutdown.
"""
from functools import lru_cache
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rbac_sync.core.config import Settings, get_settings
from rbac_sync.core.logging import get_logger
from rbac_sync.models import Base

logger = get_logger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build an async engine for the configured database.

    Pool sizing only applies to server databases; SQLite picks its own pool
    and gets foreign keys switched on for every connection, so deleting a
    role cascades to its permissions.
    """
    options = {"echo": settings.database_echo}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before using them
        )
    engine = create_async_engine(settings.database_url, **options)

    if settings.is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
            finally:
                cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Better async performance
        autoflush=False,
    )


@lru_cache
def get_engine() -> AsyncEngine:
    """Return the process-wide engine built from settings."""
    return create_engine(get_settings())


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory."""
    return create_session_factory(get_engine())


def reset_database_state() -> None:
    """Forget the cached engine and session factory."""
    get_session_factory.cache_clear()
    get_engine.cache_clear()


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """
    Initialize the database by creating all tables.

    NOTE: Schema migration is not handled here; this only creates missing
    tables for development and tests.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_created")


async def dispose_engine() -> None:
    """
    Dispose of the database engine and close all connections.

    Call this during application shutdown.
    """
    await get_engine().dispose()
    reset_database_state()
