"""
Family member entity model.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from ..base import Base


class FamilyMember(Base, table=True):
    """Family member with a toggleable online status.

    Table: family_members
    """

    __tablename__ = "family_members"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(description="Member name")
    role: str = Field(description="Role in the family, e.g. Dad or Child")
    is_online: bool = Field(
        default=False,
        description="Whether the member is currently online",
        sa_column_kwargs={"name": "isOnline"},
    )

    def __repr__(self) -> str:
        return f"FamilyMember(id={self.id}, name={self.name}, online={self.is_online})"
