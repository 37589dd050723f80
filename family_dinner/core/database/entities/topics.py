"""
Conversation topic entity model.

Topics are written once by the seed population and only read afterwards.
``last_used`` keeps its default; nothing updates it.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger
from sqlmodel import Field

from ..base import Base


class Topic(Base, table=True):
    """Conversation starter prompt.

    Table: topics
    """

    __tablename__ = "topics"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    text: str = Field(description="Prompt text")
    category: str = Field(description="Prompt category, e.g. Gratitude")
    last_used: int = Field(
        default=0,
        sa_type=BigInteger,
        description="Epoch milliseconds of last use",
        sa_column_kwargs={"name": "lastUsed"},
    )

    def __repr__(self) -> str:
        return f"Topic(id={self.id}, category={self.category})"
