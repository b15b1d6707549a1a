"""Shared pytest fixtures for sync tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from rbac_sync.core.config import Settings
from rbac_sync.database import create_engine, create_session_factory, init_db
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.models import Permission, Role


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a file-backed SQLite database and a temp config dir."""

    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'rbac.sqlite3'}",
        rbac_config_path=tmp_path / "config",
        rbac_sync_mode=None,
        import_concurrency=1,
    )


@pytest_asyncio.fixture()
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture()
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def documents(settings: Settings) -> DocumentStore:
    return DocumentStore.from_settings(settings)


@pytest.fixture()
def add_role(session: AsyncSession) -> Callable[..., Awaitable[Role]]:
    """Insert a role directly, bypassing repositories and events."""

    async def _add(role_id: str, name: Optional[str] = None, **values: Any) -> Role:
        role = Role(id=role_id, name=name or role_id.title(), **values)
        session.add(role)
        await session.flush()
        return role

    return _add


@pytest.fixture()
def add_permission(session: AsyncSession) -> Callable[..., Awaitable[Permission]]:
    """
    Insert a permission row directly, bypassing repositories and events.

    A missing role is inserted first so the foreign key holds.
    """

    async def _add(
        role: Optional[str],
        action: str,
        collection: str = "articles",
        **values: Any,
    ) -> Permission:
        if role is not None and await session.get(Role, role) is None:
            session.add(Role(id=role, name=role.title()))
            await session.flush()
        permission = Permission(role=role, action=action, collection=collection, **values)
        session.add(permission)
        await session.flush()
        return permission

    return _add
