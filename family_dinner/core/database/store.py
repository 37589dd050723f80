"""
Persistence store for dinners, family members and conversation topics.

``DinnerStore`` owns the async engine and is the only component that writes to
the database. Every operation runs in its own session and commits before it
returns; table listeners are notified after the commit so live queries only
ever observe committed state.

Storage failures are wrapped in :class:`StorageError` and propagated. Nothing
is retried.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from family_dinner.core.config import Settings
from family_dinner.core.errors import StorageError, StoreClosedError

from .entities import Dinner, FamilyMember, Topic
from .live import LiveQuery, TableChangeNotifier
from .repositories import DinnerRepository, FamilyMemberRepository, TopicRepository
from .seed import default_topics
from .utils import (
    create_all,
    create_engine,
    create_sessionmaker,
    drop_all,
    get_schema_version,
    set_schema_version,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

DINNERS = Dinner.__tablename__
FAMILY_MEMBERS = FamilyMember.__tablename__
TOPICS = Topic.__tablename__


class DinnerStore:
    """Typed read/write surface over the three tables of the local database."""

    def __init__(self, db_url: str, *, echo: bool = False, notifier: Optional[TableChangeNotifier] = None) -> None:
        """Create an unopened store.

        Args:
            db_url: SQLAlchemy URL of the SQLite database
            echo: Log emitted SQL
            notifier: Change notifier shared with live queries
        """
        self.db_url = db_url
        self._echo = echo
        self._notifier = notifier or TableChangeNotifier()
        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._open_lock: Optional[asyncio.Lock] = None
        self._ready = False
        self.created_on_open = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "DinnerStore":
        database = settings.database
        return cls(database.url, echo=database.echo)

    @property
    def notifier(self) -> TableChangeNotifier:
        return self._notifier

    @property
    def is_open(self) -> bool:
        """True once schema preparation and seeding have finished."""
        return self._ready

    # ---- lifecycle ----

    async def open(self) -> None:
        """Open the database, creating and seeding it on first use.

        Safe to call concurrently and repeatedly: schema preparation and the
        seed population happen at most once per store.
        """
        if self.is_open:
            return
        if self._open_lock is None:
            self._open_lock = asyncio.Lock()
        async with self._open_lock:
            if self.is_open:
                return

            engine = create_engine(self.db_url, echo=self._echo)
            try:
                needs_seed = await self._prepare_schema(engine)
            except SQLAlchemyError as exc:
                await engine.dispose()
                raise StorageError("open", str(exc)) from exc

            self._engine = engine
            self._session_maker = create_sessionmaker(engine)
            try:
                if needs_seed:
                    await self.seed_topics_if_empty()
                    async with engine.begin() as conn:
                        await set_schema_version(conn, SCHEMA_VERSION)
            except SQLAlchemyError as exc:
                await self._discard_engine()
                raise StorageError("open", str(exc)) from exc
            except BaseException:
                await self._discard_engine()
                raise

            self.created_on_open = needs_seed
            self._ready = True
            logger.info("DinnerStore ready url=%s created=%s", self.db_url, needs_seed)

    async def _prepare_schema(self, engine: AsyncEngine) -> bool:
        """Create or recreate tables as needed.

        Returns:
            True when the database was created (or recreated) and needs seeding
        """
        async with engine.begin() as conn:
            version = await get_schema_version(conn)
            if version == SCHEMA_VERSION:
                return False
            if version != 0:
                logger.warning(
                    "Schema version %s does not match %s; destroying and recreating database", version, SCHEMA_VERSION
                )
                await drop_all(conn)
            await create_all(conn)
            return True

    async def _discard_engine(self) -> None:
        # A failed open leaves no engine behind, so a retry starts clean.
        engine = self._engine
        self._engine = None
        self._session_maker = None
        if engine is not None:
            await engine.dispose()
        logger.warning("DinnerStore open failed url=%s", self.db_url)

    async def close(self) -> None:
        """Dispose of the engine. Live queries stop working after this."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("DinnerStore closed url=%s", self.db_url)
        self._engine = None
        self._session_maker = None
        self._ready = False

    async def __aenter__(self) -> "DinnerStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        if self._session_maker is None:
            raise StoreClosedError()
        try:
            async with self._session_maker() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Storage operation %s failed: %s", operation, exc)
            raise StorageError(operation, str(exc)) from exc

    # ---- dinners ----

    def list_dinners(self) -> LiveQuery[List[Dinner]]:
        """Live list of dinners, newest first."""
        return LiveQuery(self._notifier, (DINNERS,), self.fetch_dinners, name="dinners")

    async def fetch_dinners(self) -> List[Dinner]:
        async with self._session("list_dinners") as session:
            return await DinnerRepository(session).list()

    async def insert_dinner(self, date: str, time: str, attendees: str, *, dinner_id: Optional[int] = None) -> Dinner:
        """Store a dinner; an explicit ``dinner_id`` replaces any existing row with that id."""
        async with self._session("insert_dinner") as session:
            dinner = await DinnerRepository(session).upsert(
                Dinner(id=dinner_id, date=date, time=time, attendees=attendees)
            )
        logger.debug("Dinner inserted id=%s date=%s time=%s", dinner.id, date, time)
        await self._notifier.notify(DINNERS)
        return dinner

    async def get_next_dinner(self) -> Optional[Dinner]:
        """Most recently scheduled dinner, read once without subscribing."""
        async with self._session("get_next_dinner") as session:
            return await DinnerRepository(session).latest()

    async def count_dinners(self) -> int:
        async with self._session("count_dinners") as session:
            return await DinnerRepository(session).count()

    # ---- family members ----

    def list_family_members(self) -> LiveQuery[List[FamilyMember]]:
        """Live list of family members in insertion order."""
        return LiveQuery(self._notifier, (FAMILY_MEMBERS,), self.fetch_family_members, name="family_members")

    async def fetch_family_members(self) -> List[FamilyMember]:
        async with self._session("list_family_members") as session:
            return await FamilyMemberRepository(session).list()

    async def get_family_member(self, member_id: int) -> Optional[FamilyMember]:
        async with self._session("get_family_member") as session:
            return await FamilyMemberRepository(session).get_by_id(member_id)

    async def insert_family_member(self, name: str, role: str, *, member_id: Optional[int] = None) -> FamilyMember:
        """Store a family member; an explicit ``member_id`` replaces any existing row with that id."""
        async with self._session("insert_family_member") as session:
            member = await FamilyMemberRepository(session).upsert(FamilyMember(id=member_id, name=name, role=role))
        logger.debug("Family member inserted id=%s name=%s", member.id, name)
        await self._notifier.notify(FAMILY_MEMBERS)
        return member

    async def update_member_status(self, member_id: Optional[int], status: bool) -> bool:
        """Set a member's online status.

        Returns:
            False without raising when no member has ``member_id``
        """
        if member_id is None:
            return False
        async with self._session("update_member_status") as session:
            updated = await FamilyMemberRepository(session).set_online_status(member_id, status)
        if not updated:
            logger.debug("Status update skipped, no member id=%s", member_id)
            return False
        logger.debug("Member status updated id=%s online=%s", member_id, status)
        await self._notifier.notify(FAMILY_MEMBERS)
        return True

    async def delete_family_member(self, member: FamilyMember) -> bool:
        """Delete the row with ``member.id``.

        Returns:
            False without raising when the row is already gone
        """
        if member.id is None:
            return False
        async with self._session("delete_family_member") as session:
            deleted = await FamilyMemberRepository(session).delete(member.id)
        if not deleted:
            logger.debug("Delete skipped, no member id=%s", member.id)
            return False
        logger.debug("Family member deleted id=%s", member.id)
        await self._notifier.notify(FAMILY_MEMBERS)
        return True

    # ---- topics ----

    async def get_random_topic(self, category: Optional[str] = None) -> Optional[Topic]:
        """Uniformly random topic, optionally within ``category``; None if there is none."""
        async with self._session("get_random_topic") as session:
            return await TopicRepository(session).random(category)

    async def list_topics(self) -> List[Topic]:
        async with self._session("list_topics") as session:
            return await TopicRepository(session).list()

    async def count_topics(self) -> int:
        async with self._session("count_topics") as session:
            return await TopicRepository(session).count()

    async def seed_topics_if_empty(self) -> int:
        """Insert the default topics when the topics table is empty.

        Returns:
            Number of topics inserted
        """
        async with self._session("seed_topics") as session:
            repo = TopicRepository(session)
            if await repo.count() > 0:
                return 0
            inserted = await repo.bulk_create(default_topics())
        logger.info("Seeded %s conversation topics", inserted)
        await self._notifier.notify(TOPICS)
        return inserted
