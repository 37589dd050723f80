"""
Shared repository behaviour for the local store.

A repository wraps one async SQLModel session owned by the caller. Every
write commits before returning, so the store can notify live queries as soon
as a repository call completes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlmodel import SQLModel, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(ABC, Generic[EntityType]):
    """Row access for one table: writes, lookup by id, counting and ordered listing."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model

    @abstractmethod
    def ordering(self) -> Any:
        """Column expression that defines the table's display order."""

    async def _save(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def create(self, entity: EntityType) -> EntityType:
        """Insert ``entity`` and return it with its generated id."""
        return await self._save(entity)

    async def upsert(self, entity: EntityType) -> EntityType:
        """Insert ``entity``, replacing any stored row with the same id.

        An entity without an id is a plain insert.

        Returns:
            The persisted row (a different instance from ``entity``)
        """
        stored = await self.session.merge(entity)
        await self.session.commit()
        await self.session.refresh(stored)
        return stored

    async def get_by_id(self, entity_id: int) -> Optional[EntityType]:
        return await self.session.get(self.model, entity_id)

    async def delete(self, entity_id: int) -> bool:
        """Delete the row with ``entity_id``.

        Returns:
            False when there was no such row
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.commit()
        return True

    async def count(self) -> int:
        result = await self.session.exec(select(func.count()).select_from(self.model))
        return int(result.one())

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """Rows in display order.

        Args:
            limit: Maximum number of rows
            offset: Number of leading rows to skip
            filters: Field equality filters; ``None`` values are ignored

        Raises:
            ValueError: A filter names a field the entity does not have
        """
        stmt = select(self.model).order_by(self.ordering())
        for field_name, value in (filters or {}).items():
            if value is None:
                continue
            if field_name not in self.model.model_fields:
                raise ValueError(f"{self.model.__name__} has no field {field_name!r}")
            stmt = stmt.where(getattr(self.model, field_name) == value)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)

        result = await self.session.exec(stmt)
        return list(result.all())
