"""
Database entity models.

Each module represents a single table of the local store:

- dinners: Scheduled family dinners
- family_members: Family members and their online status
- topics: Conversation starter prompts
"""

from .dinners import Dinner
from .family_members import FamilyMember
from .topics import Topic

__all__ = [
    "Dinner",
    "FamilyMember",
    "Topic",
]
