"""
Repositories package for data access layer.

This module exports all repository classes for easy importing
throughout the application.
"""
from rbac_sync.repositories.base import BaseRepository
from rbac_sync.repositories.role_repository import RoleRepository
from rbac_sync.repositories.permission_repository import PermissionRepository

__all__ = [
    "BaseRepository",
    "RoleRepository",
    "PermissionRepository",
]
