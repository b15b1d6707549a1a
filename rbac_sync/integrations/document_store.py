"""
Document Store

Filesystem layout for the declarative RBAC documents:

    <base>/roles.yaml
    <base>/permissions/<collection>.yaml

Blocking file I/O runs in a worker thread so callers on the event loop
are never stalled by disk access.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import structlog

from rbac_sync.core.config import Settings
from rbac_sync.core.exceptions import DocumentReadError, DocumentWriteError

logger = structlog.get_logger(__name__)

DOCUMENT_SUFFIX = ".yaml"


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        raise DocumentReadError(path, e) from e


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise DocumentWriteError(path, e) from e


def _remove(path: Path) -> bool:
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise DocumentWriteError(path, e) from e


def _list_stems(directory: Path) -> List[str]:
    if not directory.is_dir():
        return []
    return sorted(
        entry.stem
        for entry in directory.iterdir()
        if entry.is_file() and entry.suffix == DOCUMENT_SUFFIX
    )


class DocumentStore:
    """Reads, writes and removes the roles and permission documents."""

    def __init__(self, base_path: Path):
        """
        Initialize the store.

        Args:
            base_path: Directory holding roles.yaml and permissions/
        """
        self.base_path = Path(base_path)
        self.permissions_path = self.base_path / "permissions"
        self.roles_file = self.base_path / f"roles{DOCUMENT_SUFFIX}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        return cls(settings.rbac_config_path)

    def permissions_file(self, collection: str) -> Path:
        """Path of the document for ``collection``."""
        if not collection or "/" in collection or "\\" in collection or collection in (".", ".."):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.permissions_path / f"{collection}{DOCUMENT_SUFFIX}"

    async def read_permissions(self, collection: str) -> Optional[str]:
        """Return the document text, or None when the collection has no document."""
        return await asyncio.to_thread(_read_text, self.permissions_file(collection))

    async def write_permissions(self, collection: str, text: str) -> None:
        path = self.permissions_file(collection)
        await asyncio.to_thread(_write_text, path, text)
        logger.debug("document_written", path=str(path))

    async def remove_permissions(self, collection: str) -> bool:
        """Remove the document; returns False when there was none."""
        path = self.permissions_file(collection)
        removed = await asyncio.to_thread(_remove, path)
        if removed:
            logger.debug("document_removed", path=str(path))
        return removed

    async def permissions_exists(self, collection: str) -> bool:
        return await asyncio.to_thread(self.permissions_file(collection).is_file)

    async def list_collections(self) -> List[str]:
        """Collections that currently have a document, sorted by name."""
        return await asyncio.to_thread(_list_stems, self.permissions_path)

    async def read_roles(self) -> Optional[str]:
        return await asyncio.to_thread(_read_text, self.roles_file)

    async def write_roles(self, text: str) -> None:
        await asyncio.to_thread(_write_text, self.roles_file, text)
        logger.debug("document_written", path=str(self.roles_file))

    async def remove_roles(self) -> bool:
        removed = await asyncio.to_thread(_remove, self.roles_file)
        if removed:
            logger.debug("document_removed", path=str(self.roles_file))
        return removed
