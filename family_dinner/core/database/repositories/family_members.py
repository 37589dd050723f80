"""
Family member repository.

Members are listed in insertion order, which for an autoincrement key is
ascending identifier order.
"""

from __future__ import annotations

from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.family_members import FamilyMember
from .base import AsyncBaseRepository


class FamilyMemberRepository(AsyncBaseRepository[FamilyMember]):
    """Repository for family member data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FamilyMember)

    def ordering(self) -> Any:
        return FamilyMember.id.asc()  # type: ignore

    async def set_online_status(self, member_id: int, status: bool) -> bool:
        """Set the online flag of a member.

        Args:
            member_id: Member identifier
            status: New online status

        Returns:
            True if a row was updated, False if the member does not exist
        """
        member = await self.get_by_id(member_id)
        if member is None:
            return False
        member.is_online = status
        await self._save(member)
        return True
