"""
Dinner entity model.

Attendees are stored as the display string built from the selected member
names at scheduling time. The value is a snapshot: renaming or deleting a
family member later does not touch existing dinners.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from ..base import Base


class Dinner(Base, table=True):
    """Scheduled family dinner.

    Table: dinners
    """

    __tablename__ = "dinners"
    __table_args__ = ({"extend_existing": True, "sqlite_autoincrement": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    # Free text, stored verbatim
    date: str = Field(description="Dinner date as entered")
    time: str = Field(description="Dinner time as entered")
    attendees: str = Field(description="Comma-joined attendee names")

    def __repr__(self) -> str:
        return f"Dinner(id={self.id}, date={self.date}, time={self.time})"
