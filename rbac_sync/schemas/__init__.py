# Schemas package

# Document schemas
from rbac_sync.schemas.documents import PermissionBlock, RoleBlock

# Role references
from rbac_sync.schemas.role_ref import PUBLIC, RoleRef

__all__ = [
    # Documents
    "PermissionBlock",
    "RoleBlock",
    # Roles
    "PUBLIC",
    "RoleRef",
]
