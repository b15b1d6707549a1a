"""
Services package for the sync engine.

This package contains the grouping engine, the YAML codec and the
services that import documents into the store and export it back.
"""

from rbac_sync.services.export_service import ExportService
from rbac_sync.services.hooks import ExportHooks
from rbac_sync.services.import_service import ImportService
from rbac_sync.services.sync_service import SyncService

__all__ = [
    "ExportHooks",
    "ExportService",
    "ImportService",
    "SyncService",
]
