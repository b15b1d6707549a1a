"""
PermissionRepository for Permission-specific database operations.

Every query that filters on ``role`` goes through ``role_condition`` or
``roles_condition`` so the public role is matched with ``IS NULL`` and
never with an equality or ``IN`` comparison.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import ColumnElement, delete, false, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_sync.events import EventDispatcher, EventName, PrimaryKey
from rbac_sync.models import Permission, PermissionAction
from rbac_sync.repositories.base import BaseRepository
from rbac_sync.schemas.role_ref import RoleRef, split_roles


def role_condition(role: RoleRef) -> ColumnElement[bool]:
    """WHERE clause matching exactly one role."""
    if role.is_public:
        return Permission.role.is_(None)
    return Permission.role == role.id


def roles_condition(roles: Iterable[RoleRef]) -> ColumnElement[bool]:
    """WHERE clause matching any of ``roles``."""
    named, include_public = split_roles(roles)
    clauses = []
    if named:
        clauses.append(Permission.role.in_(named))
    if include_public:
        clauses.append(Permission.role.is_(None))
    if not clauses:
        return false()
    return or_(*clauses)


class PermissionRepository(BaseRepository[Permission]):
    """Repository for Permission model with collection-scoped queries."""

    created_event = EventName.PERMISSION_CREATED
    updated_event = EventName.PERMISSION_UPDATED
    deleting_event = EventName.PERMISSION_DELETING
    deleted_event = EventName.PERMISSION_DELETED

    def __init__(self, session: AsyncSession, events: Optional[EventDispatcher] = None):
        super().__init__(session, Permission, events)

    @staticmethod
    def _check_action(values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Normalize ``action`` to its stored value.

        Raises:
            ValueError: If the action is not a PermissionAction
        """
        if "action" in values:
            values["action"] = PermissionAction(values["action"]).value
        return values

    async def create(self, emit_events: bool = True, **kwargs: Any) -> Permission:
        return await super().create(emit_events=emit_events, **self._check_action(kwargs))

    async def update(
        self, id: PrimaryKey, emit_events: bool = True, **kwargs: Any
    ) -> Optional[Permission]:
        return await super().update(id, emit_events=emit_events, **self._check_action(kwargs))

    async def read_by_collection(self, collection: str) -> List[Permission]:
        """All permission records of ``collection``."""
        result = await self.session.execute(
            select(Permission)
            .where(Permission.collection == collection)
            .order_by(Permission.action, Permission.id)
        )
        return list(result.scalars().all())

    async def find_one(
        self, collection: str, action: str, role: RoleRef
    ) -> Optional[Permission]:
        """Find the record for one (collection, action, role)."""
        result = await self.session.execute(
            select(Permission)
            .where(
                Permission.collection == collection,
                Permission.action == action,
                role_condition(role),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def collections_for(self, ids: Sequence[PrimaryKey]) -> Dict[PrimaryKey, str]:
        """Map permission ids to their collection; unknown ids are left out."""
        if not ids:
            return {}
        result = await self.session.execute(
            select(Permission.id, Permission.collection).where(Permission.id.in_(list(ids)))
        )
        return {row.id: row.collection for row in result}

    async def list_collections(self) -> List[str]:
        """Distinct collections that have at least one permission record."""
        result = await self.session.execute(
            select(Permission.collection).distinct().order_by(Permission.collection)
        )
        return list(result.scalars().all())

    async def delete_outside_actions(
        self,
        collection: str,
        roles: Iterable[RoleRef],
        keep_actions: Iterable[str],
        emit_events: bool = True,
    ) -> int:
        """
        Delete records of ``roles`` in ``collection`` whose action is not kept.

        Records of roles outside ``roles`` are never touched.

        Returns:
            Number of deleted records
        """
        roles = list(roles)
        if not roles:
            return 0

        conditions = [Permission.collection == collection, roles_condition(roles)]
        keep_actions = sorted(set(keep_actions))
        if keep_actions:
            conditions.append(Permission.action.not_in(keep_actions))

        if emit_events and self.events is not None:
            # Resolve keys first so subscribers see the rows being removed
            result = await self.session.execute(select(Permission.id).where(*conditions))
            return await self.delete_by_ids(list(result.scalars().all()), emit_events=True)

        result = await self.session.execute(
            delete(Permission)
            .where(*conditions)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount
