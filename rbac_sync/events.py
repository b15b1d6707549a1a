"""
Domain events emitted by the repositories.

Mutating repository calls announce what happened to subscribers; export
hooks subscribe here. Reconciliation writes pass ``emit_events=False`` so
an import never triggers an export of its own writes.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_sync.core.logging import get_logger

logger = get_logger(__name__)

PrimaryKey = Union[str, int]


class EventName(str, Enum):
    """Closed set of events."""
    ROLE_CREATED = "roles.create"
    ROLE_UPDATED = "roles.update"
    ROLE_DELETED = "roles.delete"
    PERMISSION_CREATED = "permissions.create"
    PERMISSION_UPDATED = "permissions.update"
    PERMISSION_DELETING = "permissions.deleting"  # Keys are still resolvable
    PERMISSION_DELETED = "permissions.delete"


@dataclass
class DomainEvent:
    """An event with the affected keys and the session that made the change."""
    name: EventName
    keys: List[PrimaryKey]
    session: AsyncSession = field(repr=False)


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventDispatcher:
    """Dispatches domain events to subscribed async handlers."""

    def __init__(self):
        self._handlers: Dict[EventName, List[EventHandler]] = {}

    def subscribe(self, name: EventName, handler: EventHandler) -> None:
        self._handlers.setdefault(name, []).append(handler)

    def handlers(self, name: EventName) -> List[EventHandler]:
        return list(self._handlers.get(name, []))

    async def emit(
        self,
        name: EventName,
        keys: Sequence[PrimaryKey],
        session: AsyncSession,
    ) -> None:
        """
        Await every handler of ``name`` in subscription order.

        A handler error propagates to the caller.
        """
        handlers = self._handlers.get(name)
        if not handlers or not keys:
            return

        event = DomainEvent(name=name, keys=list(keys), session=session)
        logger.debug("event_dispatched", event=name.value, keys=event.keys)
        for handler in handlers:
            await handler(event)
