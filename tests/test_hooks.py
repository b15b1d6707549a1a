"""Tests for exporting documents when the store is mutated."""

from __future__ import annotations

import pytest

from rbac_sync.events import EventDispatcher, EventName
from rbac_sync.repositories import PermissionRepository, RoleRepository
from rbac_sync.services.change_tracker import PendingDeletions
from rbac_sync.services.hooks import ExportHooks


@pytest.fixture()
def hooks(documents) -> ExportHooks:
    return ExportHooks(documents)


@pytest.fixture()
def dispatcher(hooks: ExportHooks) -> EventDispatcher:
    dispatcher = EventDispatcher()
    hooks.register(dispatcher)
    return dispatcher


@pytest.mark.asyncio
async def test_permission_mutations_rewrite_the_collection_document(
    session, documents, dispatcher, hooks, add_role
) -> None:
    await add_role("editor")
    repo = PermissionRepository(session, dispatcher)

    permission = await repo.create(role="editor", collection="articles", action="read")
    assert await documents.read_permissions("articles") == (
        "- action: read\n  roles:\n  - editor\n"
    )

    await repo.update(permission.id, fields=["title"])
    assert "fields: title\n" in await documents.read_permissions("articles")

    await repo.delete(permission.id)
    assert not await documents.permissions_exists("articles")
    assert len(hooks.pending) == 0


@pytest.mark.asyncio
async def test_deleting_one_collection_leaves_other_documents(
    session, documents, dispatcher, add_role
) -> None:
    await add_role("editor")
    repo = PermissionRepository(session, dispatcher)
    articles = await repo.create(role="editor", collection="articles", action="read")
    await repo.create(role="editor", collection="pages", action="read")

    await repo.delete(articles.id)

    assert await documents.list_collections() == ["pages"]


@pytest.mark.asyncio
async def test_role_mutations_rewrite_the_roles_document(session, documents, dispatcher) -> None:
    repo = RoleRepository(session, dispatcher)

    await repo.create(id="editor", name="Editor")
    assert "- id: editor\n" in await documents.read_roles()

    await repo.update("editor", name="Chief editor")
    assert "  name: Chief editor\n" in await documents.read_roles()

    await repo.delete("editor")
    assert await documents.read_roles() is None


@pytest.mark.asyncio
async def test_writes_without_events_do_not_export(session, documents, dispatcher) -> None:
    await RoleRepository(session, dispatcher).upsert_many(
        [{"id": "editor", "name": "Editor"}], emit_events=False
    )
    await PermissionRepository(session, dispatcher).create(
        emit_events=False, role="editor", collection="articles", action="read"
    )

    assert await documents.read_roles() is None
    assert await documents.list_collections() == []


@pytest.mark.asyncio
async def test_untracked_delete_is_ignored(session, documents, hooks, add_role) -> None:
    await add_role("editor")
    dispatcher = EventDispatcher()
    dispatcher.subscribe(EventName.PERMISSION_DELETED, hooks.on_permissions_deleted)
    repo = PermissionRepository(session, dispatcher)
    permission = await repo.create(role="editor", collection="articles", action="read")

    await repo.delete(permission.id)

    assert await documents.list_collections() == []


def test_register_subscribes_every_event(hooks: ExportHooks) -> None:
    dispatcher = EventDispatcher()

    hooks.register(dispatcher)

    assert all(len(dispatcher.handlers(name)) == 1 for name in EventName)


def test_pending_deletions_consume_once() -> None:
    pending = PendingDeletions()
    pending.capture(1, "articles")
    pending.capture(2, "articles")
    pending.capture(3, "pages")

    assert pending.consume([1, 2, 99]) == {"articles"}
    assert 1 not in pending
    assert 3 in pending
    assert pending.consume([1]) == set()
    assert len(pending) == 1
