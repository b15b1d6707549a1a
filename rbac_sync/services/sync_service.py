"""
Sync service: full import and full export across every collection.

Each collection is reconciled in its own session and transaction, so a
failing collection is rolled back on its own while the others commit.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rbac_sync.core.config import Settings
from rbac_sync.core.exceptions import ImportFailedError
from rbac_sync.core.logging import bind_sync_context, clear_sync_context
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.models.enums import ExportResult
from rbac_sync.repositories.permission_repository import PermissionRepository
from rbac_sync.repositories.role_repository import RoleRepository
from rbac_sync.services.export_service import ExportService
from rbac_sync.services.import_service import (
    ImportService,
    PermissionImportResult,
    RoleImportResult,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class ImportReport:
    """Outcome of a full import."""
    roles: RoleImportResult
    permissions: Dict[str, PermissionImportResult] = field(default_factory=dict)


@dataclass
class ExportReport:
    """Outcome of a full export."""
    roles: ExportResult
    permissions: Dict[str, ExportResult] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        """Names of the documents that could not be written."""
        failed = [name for name, result in self.permissions.items() if result == ExportResult.FAILED]
        if self.roles == ExportResult.FAILED:
            failed.append("roles")
        return failed


class SyncService:
    """Runs imports and exports over every collection."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        documents: DocumentStore,
        settings: Settings,
    ):
        """
        Initialize sync service.

        Args:
            session_factory: Factory for one session per unit of work
            documents: Filesystem layout of the documents
            settings: Concurrency and system collection settings
        """
        self.session_factory = session_factory
        self.documents = documents
        self.settings = settings

    def _importer(self, session: AsyncSession) -> ImportService:
        return ImportService(PermissionRepository(session), RoleRepository(session), self.documents)

    def _exporter(self, session: AsyncSession) -> ExportService:
        return ExportService(PermissionRepository(session), RoleRepository(session), self.documents)

    async def _in_transaction(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with self.session_factory() as session:
            async with session.begin():
                return await work(session)

    async def import_roles(self) -> RoleImportResult:
        return await self._in_transaction(lambda session: self._importer(session).import_roles())

    async def import_collection(self, collection: str) -> PermissionImportResult:
        """Reconcile one collection in its own transaction."""
        return await self._in_transaction(
            lambda session: self._importer(session).import_permissions(collection)
        )

    async def import_collections(self) -> Dict[str, PermissionImportResult]:
        """
        Import every collection that has a document.

        Collections run concurrently, bounded by ``import_concurrency``.

        Raises:
            ImportFailedError: If any collection failed; the rest are applied
        """
        collections = await self.documents.list_collections()
        limiter = asyncio.Semaphore(self.settings.import_concurrency)

        async def run(collection: str) -> PermissionImportResult:
            async with limiter:
                return await self.import_collection(collection)

        outcomes = await asyncio.gather(
            *(run(collection) for collection in collections),
            return_exceptions=True,
        )

        results: Dict[str, PermissionImportResult] = {}
        failures: Dict[str, BaseException] = {}
        for collection, outcome in zip(collections, outcomes):
            # CancelledError is a BaseException, not an Exception
            if isinstance(outcome, BaseException):
                logger.error(
                    "permission_import_failed",
                    collection=collection,
                    error=str(outcome) or type(outcome).__name__,
                )
                failures[collection] = outcome
            else:
                results[collection] = outcome

        if failures:
            raise ImportFailedError(failures)
        return results

    async def import_all(self) -> ImportReport:
        """
        Import roles, then every collection that has a document.

        Roles are committed first so permission rows can reference them.

        Raises:
            ImportFailedError: If any collection failed; the rest are applied
            DocumentParseError: If the roles document is malformed
        """
        bind_sync_context(phase="import")
        try:
            logger.info("importing_roles")
            roles = await self.import_roles()

            logger.info("importing_permissions")
            report = ImportReport(roles=roles, permissions=await self.import_collections())

            logger.info("rbac_imported", collections=len(report.permissions))
            return report
        finally:
            clear_sync_context()

    async def export_collection(self, collection: str) -> ExportResult:
        async with self.session_factory() as session:
            return await self._exporter(session).export_permissions(collection)

    async def export_roles(self) -> ExportResult:
        async with self.session_factory() as session:
            return await self._exporter(session).export_roles()

    async def exportable_collections(self, include_system: bool = False) -> List[str]:
        """
        Collections with records or with a document.

        Including documented collections lets an export remove documents
        whose records are all gone.
        """
        async with self.session_factory() as session:
            stored = await PermissionRepository(session).list_collections()
        documented = await self.documents.list_collections()

        prefix = self.settings.system_collection_prefix
        return sorted(
            collection
            for collection in set(stored) | set(documented)
            if include_system or not (prefix and collection.startswith(prefix))
        )

    async def export_collections(self, include_system: bool = False) -> Dict[str, ExportResult]:
        """Export the permissions of every exportable collection."""
        collections = await self.exportable_collections(include_system)
        limiter = asyncio.Semaphore(self.settings.import_concurrency)

        async def run(collection: str) -> ExportResult:
            async with limiter:
                return await self.export_collection(collection)

        results = await asyncio.gather(*(run(collection) for collection in collections))
        return dict(zip(collections, results))

    async def export_all(self, include_system: bool = False) -> ExportReport:
        """
        Export every collection's permissions, then the roles.

        Args:
            include_system: Also export collections in the system namespace
        """
        bind_sync_context(phase="export")
        try:
            logger.info("exporting_permissions")
            permissions = await self.export_collections(include_system)

            logger.info("exporting_roles")
            report = ExportReport(roles=await self.export_roles(), permissions=permissions)
            logger.info("rbac_exported", collections=len(permissions), failed=report.failed)
            return report
        finally:
            clear_sync_context()
