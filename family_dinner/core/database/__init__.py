"""
Local persistence layer for Family Dinner.

Structure:
- entities/: SQLModel table models (dinners, family_members, topics)
- repositories/: Async data access per table
- live.py: Table change notification and live queries
- seed.py: Default conversation topics
- store.py: DinnerStore, the typed read/write surface used by the UI binder
- utils.py: Engine, session factory and schema helpers
"""

from .base import Base
from .entities import Dinner, FamilyMember, Topic
from .live import LiveQuery, TableChangeNotifier
from .seed import DEFAULT_TOPICS
from .store import SCHEMA_VERSION, DinnerStore
from .utils import create_engine, create_sessionmaker

__all__ = [
    "Base",
    "DEFAULT_TOPICS",
    "Dinner",
    "DinnerStore",
    "FamilyMember",
    "LiveQuery",
    "SCHEMA_VERSION",
    "TableChangeNotifier",
    "Topic",
    "create_engine",
    "create_sessionmaker",
]
