"""
Topic repository.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from sqlmodel import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.topics import Topic
from .base import AsyncBaseRepository


class TopicRepository(AsyncBaseRepository[Topic]):
    """Repository for conversation topic data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Topic)

    def ordering(self) -> Any:
        return Topic.id.asc()  # type: ignore

    async def random(self, category: Optional[str] = None) -> Optional[Topic]:
        """Pick one topic uniformly at random.

        Args:
            category: Restrict the pick to this category when given

        Returns:
            A topic, or None when no topic matches
        """
        stmt = select(Topic)
        if category is not None:
            stmt = stmt.where(Topic.category == category)
        stmt = stmt.order_by(func.random()).limit(1)

        result = await self.session.exec(stmt)
        return result.first()

    async def bulk_create(self, topics: Iterable[Topic]) -> int:
        """Insert topics in a single transaction, replacing rows with clashing ids."""
        count = 0
        for topic in topics:
            await self.session.merge(topic)
            count += 1
        await self.session.commit()
        return count
