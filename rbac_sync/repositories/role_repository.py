"""
RoleRepository for Role-specific database operations.
"""
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_sync.events import EventDispatcher, EventName, PrimaryKey
from rbac_sync.models import Role
from rbac_sync.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Repository for Role model with role-specific queries."""

    created_event = EventName.ROLE_CREATED
    updated_event = EventName.ROLE_UPDATED
    deleted_event = EventName.ROLE_DELETED

    def __init__(self, session: AsyncSession, events: Optional[EventDispatcher] = None):
        super().__init__(session, Role, events)

    async def upsert_many(
        self, payloads: Sequence[Dict[str, Any]], emit_events: bool = True
    ) -> List[PrimaryKey]:
        """
        Create or update roles keyed by ``id`` in one batch.

        Existing roles are loaded with a single query; every payload then
        either updates the loaded instance or adds a new one, and the batch
        is flushed once.

        Returns:
            Role ids in payload order
        """
        if not payloads:
            return []

        ids = [payload["id"] for payload in payloads]
        result = await self.session.execute(select(Role).where(Role.id.in_(ids)))
        existing = {role.id: role for role in result.scalars().all()}

        created: List[PrimaryKey] = []
        updated: List[PrimaryKey] = []
        for payload in payloads:
            role = existing.get(payload["id"])
            if role is None:
                role = Role(**payload)
                self.session.add(role)
                existing[role.id] = role
                created.append(role.id)
            else:
                for key, value in payload.items():
                    setattr(role, key, value)
                updated.append(role.id)

        await self.session.flush()
        await self._emit(self.created_event, created, emit_events)
        await self._emit(self.updated_event, updated, emit_events)
        return ids
