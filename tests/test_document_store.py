"""Tests for the filesystem layout of the documents."""

from __future__ import annotations

from pathlib import Path

import pytest

from rbac_sync.core.config import Settings
from rbac_sync.core.exceptions import DocumentWriteError
from rbac_sync.integrations.document_store import DocumentStore


@pytest.mark.asyncio
async def test_missing_documents_read_as_none(tmp_path: Path) -> None:
    store = DocumentStore(tmp_path / "config")

    assert await store.read_permissions("articles") is None
    assert await store.read_roles() is None
    assert await store.list_collections() == []


@pytest.mark.asyncio
async def test_write_creates_directories(tmp_path: Path) -> None:
    store = DocumentStore(tmp_path / "config")

    await store.write_permissions("articles", "- action: read\n")
    await store.write_roles("- id: admin\n")

    assert (tmp_path / "config" / "permissions" / "articles.yaml").read_text() == "- action: read\n"
    assert (tmp_path / "config" / "roles.yaml").read_text() == "- id: admin\n"
    assert await store.permissions_exists("articles")


@pytest.mark.asyncio
async def test_remove_reports_whether_a_document_existed(tmp_path: Path) -> None:
    store = DocumentStore(tmp_path)
    await store.write_permissions("articles", "[]\n")

    assert await store.remove_permissions("articles") is True
    assert await store.remove_permissions("articles") is False
    assert await store.remove_roles() is False


@pytest.mark.asyncio
async def test_list_collections_only_lists_yaml_documents(tmp_path: Path) -> None:
    store = DocumentStore(tmp_path)
    await store.write_permissions("pages", "")
    await store.write_permissions("articles", "")
    (store.permissions_path / "notes.txt").write_text("ignored")

    assert await store.list_collections() == ["articles", "pages"]


@pytest.mark.asyncio
async def test_write_failure_raises_document_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "config"
    blocker.write_text("not a directory")
    store = DocumentStore(blocker)

    with pytest.raises(DocumentWriteError):
        await store.write_permissions("articles", "- action: read\n")


@pytest.mark.parametrize("name", ["", "..", "a/b", "a\\b"])
def test_rejects_collection_names_outside_the_directory(tmp_path: Path, name: str) -> None:
    with pytest.raises(ValueError):
        DocumentStore(tmp_path).permissions_file(name)


def test_from_settings_places_documents_under_the_config_path(tmp_path: Path) -> None:
    store = DocumentStore.from_settings(Settings(_env_file=None, rbac_config_path=tmp_path / "rbac"))

    assert store.permissions_path == tmp_path / "rbac" / "permissions"
    assert store.roles_file == tmp_path / "rbac" / "roles.yaml"
