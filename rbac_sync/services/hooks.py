"""
Export hooks subscribed to role and permission events.

Every mutation made outside the reconciler re-exports the affected
documents, so the files track live edits.
"""
from typing import Iterable, List, Optional

import structlog

from rbac_sync.events import DomainEvent, EventDispatcher, EventName
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.models.enums import ExportResult
from rbac_sync.repositories.permission_repository import PermissionRepository
from rbac_sync.repositories.role_repository import RoleRepository
from rbac_sync.services.change_tracker import PendingDeletions
from rbac_sync.services.export_service import ExportService

logger = structlog.get_logger(__name__)


class ExportHooks:
    """
    Event handlers that keep the documents in step with the store.

    Exports run on the session that emitted the event so they see the
    change before it is committed.
    """

    def __init__(self, documents: DocumentStore, pending: Optional[PendingDeletions] = None):
        self.documents = documents
        self.pending = pending if pending is not None else PendingDeletions()

    def _exporter(self, event: DomainEvent) -> ExportService:
        # Read-only repositories: exporting must not emit further events
        return ExportService(
            PermissionRepository(event.session),
            RoleRepository(event.session),
            self.documents,
        )

    async def _export_collections(
        self, event: DomainEvent, collections: Iterable[str]
    ) -> List[ExportResult]:
        exporter = self._exporter(event)
        # Sequential: the exports share the event's session
        results = []
        for collection in sorted(set(collections)):
            results.append(await exporter.export_permissions(collection))
        return results

    async def on_permissions_changed(self, event: DomainEvent) -> None:
        """Export the collections of created or updated permissions."""
        collections = await PermissionRepository(event.session).collections_for(event.keys)
        await self._export_collections(event, collections.values())

    async def before_permissions_delete(self, event: DomainEvent) -> None:
        """Remember the collection of each permission about to be deleted."""
        collections = await PermissionRepository(event.session).collections_for(event.keys)
        for key, collection in collections.items():
            self.pending.capture(key, collection)

    async def on_permissions_deleted(self, event: DomainEvent) -> None:
        """Export the collections captured before the delete."""
        collections = self.pending.consume(event.keys)
        if not collections:
            logger.warning("deleted_permissions_not_tracked", keys=event.keys)
            return
        await self._export_collections(event, collections)

    async def on_roles_changed(self, event: DomainEvent) -> None:
        await self._exporter(event).export_roles()

    def register(self, dispatcher: EventDispatcher) -> None:
        """Subscribe every handler to its event."""
        dispatcher.subscribe(EventName.ROLE_CREATED, self.on_roles_changed)
        dispatcher.subscribe(EventName.ROLE_UPDATED, self.on_roles_changed)
        dispatcher.subscribe(EventName.ROLE_DELETED, self.on_roles_changed)

        dispatcher.subscribe(EventName.PERMISSION_CREATED, self.on_permissions_changed)
        dispatcher.subscribe(EventName.PERMISSION_UPDATED, self.on_permissions_changed)
        dispatcher.subscribe(EventName.PERMISSION_DELETING, self.before_permissions_delete)
        dispatcher.subscribe(EventName.PERMISSION_DELETED, self.on_permissions_deleted)
