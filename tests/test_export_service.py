"""Tests for exporting store state into documents."""

from __future__ import annotations

import pytest

from rbac_sync.core.exceptions import DocumentWriteError
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.models import ExportResult
from rbac_sync.repositories import PermissionRepository, RoleRepository
from rbac_sync.services.export_service import ExportService

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def exporter(session, documents: DocumentStore) -> ExportService:
    return ExportService(PermissionRepository(session), RoleRepository(session), documents)


async def test_export_groups_roles_sharing_a_rule(exporter, documents, add_permission) -> None:
    await add_permission("A", "read", fields=["b", "a"])
    await add_permission("B", "read", fields=["a", "b"])
    await add_permission("C", "read", fields=["c"])
    await add_permission("A", "read", collection="pages")

    result = await exporter.export_permissions("articles")

    assert result is ExportResult.WRITTEN
    assert await documents.read_permissions("articles") == (
        "- action: read\n"
        "  fields:\n"
        "  - a\n"
        "  - b\n"
        "  roles:\n"
        "  - A\n"
        "  - B\n"
        "\n"
        "- action: read\n"
        "  fields: c\n"
        "  roles:\n"
        "  - C\n"
    )


async def test_export_writes_public_role_as_null(exporter, documents, add_permission) -> None:
    await add_permission(None, "read", permissions={"status": {"_eq": "published"}})

    await exporter.export_permissions("articles")

    assert "  - null\n" in await documents.read_permissions("articles")


async def test_export_without_records_removes_document(exporter, documents) -> None:
    await documents.write_permissions("articles", "- action: read\n  roles: [editor]\n")

    assert await exporter.export_permissions("articles") is ExportResult.REMOVED
    assert not await documents.permissions_exists("articles")


async def test_export_without_records_or_document_creates_nothing(exporter, documents) -> None:
    assert await exporter.export_permissions("articles") is ExportResult.UNCHANGED
    assert await documents.list_collections() == []


async def test_export_write_failure_is_reported_not_raised(
    exporter, documents, add_permission, monkeypatch
) -> None:
    await add_permission("editor", "read")

    async def failing_write(collection: str, text: str) -> None:
        raise DocumentWriteError(documents.permissions_file(collection), OSError("disk full"))

    monkeypatch.setattr(documents, "write_permissions", failing_write)

    assert await exporter.export_permissions("articles") is ExportResult.FAILED


async def test_export_roles_omits_default_attributes(exporter, documents, add_role) -> None:
    await add_role("editor", "Editor", description="Edits articles")
    await add_role("admin", "Administrator", icon="verified", admin_access=True, app_access=True)

    assert await exporter.export_roles() is ExportResult.WRITTEN
    assert await documents.read_roles() == (
        "- id: admin\n"
        "  name: Administrator\n"
        "  icon: verified\n"
        "  app_access: true\n"
        "  admin_access: true\n"
        "\n"
        "- id: editor\n"
        "  name: Editor\n"
        "  icon: supervised_user_circle\n"
        "  description: Edits articles\n"
    )


async def test_export_roles_without_roles_removes_document(exporter, documents) -> None:
    await documents.write_roles("- id: ghost\n  name: Ghost\n  icon: x\n")

    assert await exporter.export_roles() is ExportResult.REMOVED
    assert await documents.read_roles() is None
