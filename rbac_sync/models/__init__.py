"""
Models package for database entities.

This module exports all SQLAlchemy models and enums for easy importing
throughout the application.
"""
from rbac_sync.models.base import Base
from rbac_sync.models.enums import ExportResult, PermissionAction, SyncMode
from rbac_sync.models.role import DEFAULT_ROLE_ICON, Role
from rbac_sync.models.permission import Permission

__all__ = [
    # Base classes
    "Base",

    # Enums
    "ExportResult",
    "PermissionAction",
    "SyncMode",

    # Models
    "DEFAULT_ROLE_ICON",
    "Role",
    "Permission",
]
