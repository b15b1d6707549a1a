"""
Permission model: one access rule per role, collection and action.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rbac_sync.models.base import Base
from rbac_sync.models.enums import PermissionAction


class Permission(Base):
    """
    Permission model.

    A NULL role is the public role: the rule applies to unauthenticated
    access. Filter payloads are stored as opaque JSON. Actions are limited
    to PermissionAction and the column carries a CHECK constraint.
    """
    __tablename__ = "permissions"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Rule identity
    role: Mapped[Optional[str]] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=True
    )
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[PermissionAction] = mapped_column(
        Enum(
            PermissionAction,
            native_enum=False,
            length=10,
            values_callable=lambda actions: [action.value for action in actions],
            validate_strings=True,
            create_constraint=True,
            name="permission_action",
        ),
        nullable=False
    )

    # Rule payload
    permissions: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON(none_as_null=True), nullable=True)
    validation: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON(none_as_null=True), nullable=True)
    presets: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON(none_as_null=True), nullable=True)
    fields: Mapped[Optional[List[str]]] = mapped_column(JSON(none_as_null=True), nullable=True)

    # Constraints and indexes
    __table_args__ = (
        UniqueConstraint("role", "collection", "action", name="uq_permission_role_collection_action"),
        Index("ix_permissions_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, role={self.role}, collection={self.collection}, action={self.action})>"
