"""
Import service: reconciles the YAML documents into the store.

For a permission document the service:
- validates every block before touching the store
- deletes records of the managed roles whose action is no longer declared
- updates or creates one record per declared (role, action)

Records of roles the document does not mention are left alone. Roles are
only ever upserted; removing a role from the document does not delete it.
"""
from dataclasses import dataclass
from typing import List, Set

import structlog

from rbac_sync.core.exceptions import MissingRolesError
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.repositories.permission_repository import PermissionRepository
from rbac_sync.repositories.role_repository import RoleRepository
from rbac_sync.schemas.documents import PermissionBlock
from rbac_sync.schemas.role_ref import RoleRef
from rbac_sync.services.codec import load_permissions, load_roles

logger = structlog.get_logger(__name__)


@dataclass
class PermissionImportResult:
    """Store mutations made while importing one collection."""
    collection: str
    created: int = 0
    updated: int = 0
    deleted: int = 0
    skipped: bool = False  # No document for the collection


@dataclass
class RoleImportResult:
    """Roles upserted from the roles document."""
    upserted: int = 0
    skipped: bool = False  # No roles document


class ImportService:
    """Service applying the declared documents to the store."""

    def __init__(
        self,
        permission_repository: PermissionRepository,
        role_repository: RoleRepository,
        documents: DocumentStore,
    ):
        """
        Initialize import service.

        Args:
            permission_repository: Repository for permission writes
            role_repository: Repository for role writes
            documents: Filesystem layout of the documents
        """
        self.permission_repo = permission_repository
        self.role_repo = role_repository
        self.documents = documents

    @staticmethod
    def validate_blocks(collection: str, blocks: List[PermissionBlock]) -> None:
        """
        Raise MissingRolesError for the first block without roles.

        Raises:
            MissingRolesError: If a block has no roles
        """
        for block in blocks:
            if not block.roles:
                raise MissingRolesError(collection, block.action.value)

    async def import_permissions(self, collection: str) -> PermissionImportResult:
        """
        Reconcile the document of ``collection`` into the store.

        The caller owns the transaction: a failure part way through must be
        rolled back by the caller so the collection is never half applied.

        Returns:
            Counts of created, updated and deleted records

        Raises:
            DocumentParseError: If the document is malformed
            MissingRolesError: If a block declares no roles
        """
        log = logger.bind(collection=collection)
        result = PermissionImportResult(collection=collection)

        text = await self.documents.read_permissions(collection)
        if text is None:
            log.debug("permissions_document_missing")
            result.skipped = True
            return result

        blocks = load_permissions(text, self.documents.permissions_file(collection))
        self.validate_blocks(collection, blocks)

        records = [record for block in blocks for record in block.expand(collection)]
        updating_actions: Set[str] = {block.action.value for block in blocks}
        updating_roles: Set[RoleRef] = {role for block in blocks for role in block.role_refs}

        result.deleted = await self.permission_repo.delete_outside_actions(
            collection,
            roles=updating_roles,
            keep_actions=updating_actions,
            emit_events=False,
        )

        # One AsyncSession cannot run statements concurrently, so the
        # upserts of a collection are issued one after another.
        for record in records:
            role = RoleRef.from_value(record["role"])
            existing = await self.permission_repo.find_one(collection, record["action"], role)
            if existing is not None:
                await self.permission_repo.update(existing.id, emit_events=False, **record)
                result.updated += 1
            else:
                await self.permission_repo.create(emit_events=False, **record)
                result.created += 1

        log.info(
            "permissions_imported",
            created=result.created,
            updated=result.updated,
            deleted=result.deleted,
        )
        return result

    async def import_roles(self) -> RoleImportResult:
        """
        Upsert every role of the roles document.

        Absent optional attributes take their defaults.

        Raises:
            DocumentParseError: If the document is malformed
        """
        text = await self.documents.read_roles()
        if text is None:
            logger.debug("roles_document_missing")
            return RoleImportResult(skipped=True)

        blocks = load_roles(text, self.documents.roles_file)
        ids = await self.role_repo.upsert_many(
            [block.to_record() for block in blocks],
            emit_events=False,
        )
        logger.info("roles_imported", roles=len(ids))
        return RoleImportResult(upserted=len(ids))
