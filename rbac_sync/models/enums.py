"""
Enum definitions for database models and sync configuration.

This module defines Python enums for closed value sets to ensure
type safety and consistency across the application.
"""
from enum import Enum


class PermissionAction(str, Enum):
    """Action values for Permission entity."""
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    SHARE = "share"


class SyncMode(str, Enum):
    """Automatic sync modes selected through RBAC_SYNC_MODE."""
    EXPORT = "EXPORT"  # Write documents on every mutation
    IMPORT = "IMPORT"  # Reconcile documents into the store on start
    FULL = "FULL"


class ExportResult(str, Enum):
    """Outcome of exporting one document."""
    WRITTEN = "WRITTEN"
    REMOVED = "REMOVED"
    UNCHANGED = "UNCHANGED"  # Nothing to write and no document to remove
    FAILED = "FAILED"
