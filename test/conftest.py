"""Shared fixtures.

Stores run against a temporary SQLite file per test so durability and
first-creation behaviour can be exercised the same way as in production.
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession

from family_dinner.core.database import DinnerStore
from family_dinner.core.database.utils import create_all, create_engine, create_sessionmaker


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "dinner_db.sqlite3"


@pytest.fixture()
def db_url(db_path: Path) -> str:
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture()
async def store(db_url: str) -> AsyncGenerator[DinnerStore, None]:
    """Opened (and therefore seeded) store."""
    dinner_store = DinnerStore(db_url)
    await dinner_store.open()
    try:
        yield dinner_store
    finally:
        await dinner_store.close()


@pytest.fixture()
async def engine(db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Engine over empty tables, without seed data."""
    db_engine = create_engine(db_url)
    async with db_engine.begin() as conn:
        await create_all(conn)
    try:
        yield db_engine
    finally:
        await db_engine.dispose()


@pytest.fixture()
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(engine)() as db_session:
        yield db_session
