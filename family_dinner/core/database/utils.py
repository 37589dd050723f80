"""
Database utility functions for engine, session and schema management.

Functions:
- create_engine: Creates the async SQLite engine
- create_sessionmaker: Creates async session factory with safe defaults
- create_all / drop_all: Create or drop every table of the ORM metadata
- get_schema_version / set_schema_version: Read and stamp ``PRAGMA user_version``
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from .base import Base

# Registers the tables on Base.metadata.
from . import entities  # noqa: F401

logger = logging.getLogger(__name__)


def create_engine(db_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async SQLAlchemy engine for a SQLite database.

    Plain ``sqlite://`` URLs are rewritten to use the ``aiosqlite`` driver.

    Args:
        db_url: Database connection URL
        echo: Log every SQL statement

    Returns:
        Configured AsyncEngine instance
    """
    if db_url.startswith("sqlite://"):
        db_url = "sqlite+aiosqlite://" + db_url[len("sqlite://") :]
    return create_async_engine(db_url, echo=echo)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project.

    Args:
        engine: Async SQLAlchemy engine

    Returns:
        Configured async session factory producing SQLModel sessions
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(conn: AsyncConnection) -> None:
    """Create all tables for the current ORM metadata."""
    await conn.run_sync(Base.metadata.create_all)


async def drop_all(conn: AsyncConnection) -> None:
    """Drop every user table in the database, including tables unknown to the ORM."""
    result = await conn.exec_driver_sql(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    )
    for (name,) in result.all():
        await conn.exec_driver_sql(f'DROP TABLE IF EXISTS "{name}"')
        logger.info("Dropped table %s", name)


async def get_schema_version(conn: AsyncConnection) -> int:
    result = await conn.exec_driver_sql("PRAGMA user_version")
    return int(result.scalar() or 0)


async def set_schema_version(conn: AsyncConnection, version: int) -> None:
    # PRAGMA does not accept bound parameters.
    await conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")
