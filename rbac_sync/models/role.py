"""
Role model for role-based access control (RBAC).
"""
from typing import List, Optional

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rbac_sync.models.base import Base


DEFAULT_ROLE_ICON = "supervised_user_circle"


class Role(Base):
    """
    Role model for RBAC.

    The primary key is assigned by the author of the roles document, never
    generated by the database, so the same role keeps its identity across
    environments.
    """
    __tablename__ = "roles"

    # Primary key
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Role fields
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(64), nullable=False, default=DEFAULT_ROLE_ICON)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    enforce_two_factor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    external_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_allowlist: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    app_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"
