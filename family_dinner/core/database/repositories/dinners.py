"""
Dinner repository.

Dinners are listed newest first: the highest identifier is the most recently
scheduled dinner.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.dinners import Dinner
from .base import AsyncBaseRepository


class DinnerRepository(AsyncBaseRepository[Dinner]):
    """Repository for dinner data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Dinner)

    def ordering(self) -> Any:
        return Dinner.id.desc()  # type: ignore

    async def latest(self) -> Optional[Dinner]:
        """Most recently scheduled dinner, if any."""
        rows = await self.list(limit=1)
        return rows[0] if rows else None
