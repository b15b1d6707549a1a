"""
Base repository providing common CRUD operations.

This module defines the BaseRepository class that provides standard
database operations and event emission for all repository implementations.
"""
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_sync.events import EventDispatcher, EventName, PrimaryKey
from rbac_sync.models.base import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.

    Subclass this to create model-specific repositories with additional
    queries. Subclasses name the events they emit; mutations pass
    ``emit_events=False`` to keep subscribers from hearing about them.
    """

    created_event: Optional[EventName] = None
    updated_event: Optional[EventName] = None
    deleting_event: Optional[EventName] = None
    deleted_event: Optional[EventName] = None

    def __init__(
        self,
        session: AsyncSession,
        model: Type[ModelType],
        events: Optional[EventDispatcher] = None,
    ):
        """
        Initialize repository with database session and model class.

        Args:
            session: SQLAlchemy async session
            model: SQLAlchemy model class
            events: Dispatcher notified about mutations (optional)
        """
        self.session = session
        self.model = model
        self.events = events

    async def _emit(
        self,
        name: Optional[EventName],
        keys: Sequence[PrimaryKey],
        emit_events: bool,
    ) -> None:
        if emit_events and name is not None and self.events is not None:
            await self.events.emit(name, keys, self.session)

    async def get_by_id(self, id: PrimaryKey) -> Optional[ModelType]:
        """
        Retrieve single record by primary key.

        Args:
            id: Primary key

        Returns:
            Model instance or None if not found
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_all(self) -> List[ModelType]:
        """Retrieve every record, unpaginated."""
        result = await self.session.execute(
            select(self.model).order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def create(self, emit_events: bool = True, **kwargs: Any) -> ModelType:
        """
        Create new record from keyword arguments.

        Args:
            emit_events: Notify subscribers about the new record
            **kwargs: Field values as keyword arguments

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        await self._emit(self.created_event, [instance.id], emit_events)
        return instance

    async def update(
        self, id: PrimaryKey, emit_events: bool = True, **kwargs: Any
    ) -> Optional[ModelType]:
        """
        Update existing record.

        Args:
            id: Primary key
            emit_events: Notify subscribers about the change
            **kwargs: Field values to update

        Returns:
            Updated model instance or None if not found
        """
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        if result.rowcount == 0:
            return None
        await self._emit(self.updated_event, [id], emit_events)
        return await self.get_by_id(id)

    async def delete_by_ids(
        self, ids: Sequence[PrimaryKey], emit_events: bool = True
    ) -> int:
        """
        Delete records by primary key.

        Subscribers of the "deleting" event run before the rows go away,
        subscribers of the "deleted" event after.

        Returns:
            Number of deleted records
        """
        ids = list(ids)
        if not ids:
            return 0
        await self._emit(self.deleting_event, ids, emit_events)
        result = await self.session.execute(
            delete(self.model)
            .where(self.model.id.in_(ids))
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        await self._emit(self.deleted_event, ids, emit_events)
        return result.rowcount

    async def delete(self, id: PrimaryKey, emit_events: bool = True) -> bool:
        """
        Delete record by ID.

        Returns:
            True if deleted, False if not found
        """
        return await self.delete_by_ids([id], emit_events=emit_events) > 0
