"""
Startup wiring for automatic sync.

With RBAC_SYNC_MODE set to EXPORT or FULL, role and permission mutations
are exported to documents; with IMPORT or FULL, the documents are imported
into the store once at startup.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rbac_sync.core.config import Settings, get_settings
from rbac_sync.core.logging import get_logger
from rbac_sync.database import get_session_factory
from rbac_sync.events import EventDispatcher
from rbac_sync.integrations.document_store import DocumentStore
from rbac_sync.services.hooks import ExportHooks
from rbac_sync.services.sync_service import SyncService

logger = get_logger(__name__)


async def bootstrap(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    dispatcher: Optional[EventDispatcher] = None,
) -> EventDispatcher:
    """
    Register export hooks and run the startup import as configured.

    Returns:
        The dispatcher repositories should emit their events to
    """
    settings = settings or get_settings()
    session_factory = session_factory or get_session_factory()
    dispatcher = dispatcher or EventDispatcher()
    documents = DocumentStore.from_settings(settings)

    if settings.exports_enabled:
        ExportHooks(documents).register(dispatcher)
        logger.info("export_hooks_registered", mode=settings.rbac_sync_mode.value)

    if settings.imports_on_start:
        await SyncService(session_factory, documents, settings).import_all()

    return dispatcher
