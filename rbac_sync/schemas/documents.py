"""
Pydantic schemas for the roles document and the permission documents.

These describe one list entry of each document. Parsing is lenient about
absent optional keys and strict about types; anything else is reported
as a malformed document by the codec.
"""
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rbac_sync.models.enums import PermissionAction
from rbac_sync.models.role import DEFAULT_ROLE_ICON
from rbac_sync.schemas.role_ref import RoleRef


# Optional role keys in the order they are written after id, name and icon
OPTIONAL_ROLE_KEYS = (
    "description",
    "enforce_two_factor",
    "external_id",
    "ip_allowlist",
    "app_access",
    "admin_access",
)

ROLE_DEFAULTS: Dict[str, Any] = {
    "icon": DEFAULT_ROLE_ICON,
    "description": "",
    "enforce_two_factor": False,
    "external_id": None,
    "ip_allowlist": [],
    "app_access": False,
    "admin_access": False,
}


class RoleBlock(BaseModel):
    """One entry of the roles document."""

    id: str = Field(..., description="Author-assigned role identifier")
    name: str = Field(..., description="Display name")
    icon: str = Field(default=DEFAULT_ROLE_ICON)
    description: str = Field(default="")
    enforce_two_factor: bool = Field(default=False)
    external_id: Optional[str] = Field(default=None)
    ip_allowlist: List[str] = Field(default_factory=list)
    app_access: bool = Field(default=False)
    admin_access: bool = Field(default=False)

    model_config = ConfigDict(
        extra="ignore",
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "editor",
                "name": "Editor",
                "icon": "edit",
                "app_access": True,
            }
        }
    )

    @field_validator("id", "name", "external_id", mode="before")
    @classmethod
    def coerce_scalar_to_str(cls, v: Any) -> Any:
        """YAML reads bare numbers as ints; identifiers are always strings."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator(
        "icon",
        "description",
        "enforce_two_factor",
        "ip_allowlist",
        "app_access",
        "admin_access",
        mode="before",
    )
    @classmethod
    def null_means_default(cls, v: Any, info) -> Any:
        """An explicit null is treated like an absent key."""
        if v is None:
            default = ROLE_DEFAULTS[info.field_name]
            return list(default) if isinstance(default, list) else default
        return v

    def to_document(self) -> Dict[str, Any]:
        """
        Text form of the role.

        ``id``, ``name`` and ``icon`` are always written; the remaining
        attributes only when truthy.
        """
        document: Dict[str, Any] = {"id": self.id, "name": self.name, "icon": self.icon}
        for key in OPTIONAL_ROLE_KEYS:
            value = getattr(self, key)
            if value:
                document[key] = list(value) if isinstance(value, list) else value
        return document

    def to_record(self) -> Dict[str, Any]:
        """Store form of the role with every attribute populated."""
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "enforce_two_factor": self.enforce_two_factor,
            "external_id": self.external_id,
            "ip_allowlist": list(self.ip_allowlist),
            "app_access": self.app_access,
            "admin_access": self.admin_access,
        }


class PermissionBlock(BaseModel):
    """
    One entry of a permission document.

    ``roles`` lists every role sharing the rule; ``None`` in that list is
    the public role. ``fields`` may be a bare string when a single field is
    allowed.
    """

    action: PermissionAction
    permissions: Optional[Dict[str, Any]] = None
    validation: Optional[Dict[str, Any]] = None
    presets: Optional[Dict[str, Any]] = None
    fields: Optional[Union[str, List[str]]] = None
    roles: Optional[List[Optional[str]]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("roles", mode="before")
    @classmethod
    def coerce_role_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [
                str(item) if isinstance(item, (int, float)) and not isinstance(item, bool) else item
                for item in v
            ]
        return v

    @property
    def role_refs(self) -> List[RoleRef]:
        return [RoleRef.from_value(role) for role in self.roles or []]

    @property
    def field_list(self) -> Optional[List[str]]:
        """Fields in store form; the bare-string shorthand becomes a list."""
        if isinstance(self.fields, str):
            return [self.fields]
        return self.fields

    def expand(self, collection: str) -> Iterator[Dict[str, Any]]:
        """Yield one flat store record per role of this block."""
        for role in self.role_refs:
            yield {
                "role": role.to_value(),
                "collection": collection,
                "action": self.action.value,
                "permissions": self.permissions,
                "validation": self.validation,
                "presets": self.presets,
                "fields": self.field_list,
            }

    def to_document(self) -> Dict[str, Any]:
        """Text form: ``action`` and ``roles`` always, the rest when non-empty."""
        document: Dict[str, Any] = {"action": self.action.value}
        for key in ("permissions", "validation", "presets", "fields"):
            value = getattr(self, key)
            if value:
                document[key] = value
        document["roles"] = list(self.roles or [])
        return document
