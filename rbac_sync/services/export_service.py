"""
Export service: projects live store state into the YAML documents.

Exports are best-effort. A document that cannot be written is logged and
reported as ``ExportResult.FAILED``; store errors still propagate.
"""
from typing import List

import structlog

from rbac_sync.core.exceptions import DocumentWriteError
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.models.enums import ExportResult
from rbac_sync.repositories.permission_repository import PermissionRepository
from rbac_sync.repositories.role_repository import RoleRepository
from rbac_sync.schemas.documents import RoleBlock
from rbac_sync.services.codec import dump_permissions, dump_roles
from rbac_sync.services.grouping import group_permissions

logger = structlog.get_logger(__name__)


class ExportService:
    """Service writing roles and permission documents from the store."""

    def __init__(
        self,
        permission_repository: PermissionRepository,
        role_repository: RoleRepository,
        documents: DocumentStore,
    ):
        """
        Initialize export service.

        Args:
            permission_repository: Repository for permission reads
            role_repository: Repository for role reads
            documents: Filesystem layout of the documents
        """
        self.permission_repo = permission_repository
        self.role_repo = role_repository
        self.documents = documents

    async def export_permissions(self, collection: str) -> ExportResult:
        """
        Write the document of ``collection`` from its current records.

        A collection without records has its document removed; when there
        is no document either, nothing happens.

        Returns:
            What happened to the document
        """
        log = logger.bind(collection=collection)

        records = await self.permission_repo.read_by_collection(collection)
        blocks = group_permissions(records)

        try:
            if blocks:
                await self.documents.write_permissions(collection, dump_permissions(blocks))
                log.info("permissions_exported", blocks=len(blocks), records=len(records))
                return ExportResult.WRITTEN

            if await self.documents.remove_permissions(collection):
                log.info("permissions_document_removed")
                return ExportResult.REMOVED
        except DocumentWriteError as e:
            log.error("permissions_export_failed", error=str(e))
            return ExportResult.FAILED

        return ExportResult.UNCHANGED

    async def export_roles(self) -> ExportResult:
        """
        Write the roles document from every stored role.

        Optional attributes are only written when set; an empty role table
        removes the document.
        """
        roles = await self.role_repo.get_all()
        blocks: List[RoleBlock] = [RoleBlock.model_validate(role) for role in roles]

        try:
            if blocks:
                await self.documents.write_roles(dump_roles(blocks))
                logger.info("roles_exported", roles=len(blocks))
                return ExportResult.WRITTEN

            if await self.documents.remove_roles():
                logger.info("roles_document_removed")
                return ExportResult.REMOVED
        except DocumentWriteError as e:
            logger.error("roles_export_failed", error=str(e))
            return ExportResult.FAILED

        return ExportResult.UNCHANGED
