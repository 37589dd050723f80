"""
Database repository layer using SQLModel.

Each module provides async data access operations for its corresponding
SQLModel entity, built on a session owned by the caller.

Modules:
- base: AsyncBaseRepository with shared writes and ordered listing
- dinners: Dinner repository operations
- family_members: Family member repository operations
- topics: Conversation topic repository operations
"""

from .dinners import DinnerRepository
from .family_members import FamilyMemberRepository
from .topics import TopicRepository

__all__ = [
    "DinnerRepository",
    "FamilyMemberRepository",
    "TopicRepository",
]
