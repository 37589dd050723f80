"""Tests for DinnerStore.

Exercises the store end to end against SQLite files: seeding, schema
versioning, not-found no-ops, random topics and durability across reopen.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from family_dinner.core.config import Settings
from family_dinner.core.database import DEFAULT_TOPICS, SCHEMA_VERSION, DinnerStore, FamilyMember
from family_dinner.core.database.utils import create_engine, get_schema_version, set_schema_version
from family_dinner.core.errors import StorageError, StoreClosedError


class TestStoreLifecycle:
    """Opening, seeding and closing."""

    async def test_first_open_seeds_topics(self, store):
        assert store.created_on_open is True
        assert await store.count_topics() == len(DEFAULT_TOPICS)

        topics = await store.list_topics()
        assert [(t.text, t.category) for t in topics] == list(DEFAULT_TOPICS)
        assert all(t.last_used == 0 for t in topics)

    async def test_reopen_does_not_reseed(self, db_url):
        async with DinnerStore(db_url) as first:
            assert first.created_on_open is True

        async with DinnerStore(db_url) as second:
            assert second.created_on_open is False
            assert await second.count_topics() == len(DEFAULT_TOPICS)

    async def test_schema_version_stamped(self, store, db_url):
        engine = create_engine(db_url)
        try:
            async with engine.connect() as conn:
                assert await get_schema_version(conn) == SCHEMA_VERSION
        finally:
            await engine.dispose()

    async def test_concurrent_open_seeds_once(self, db_url):
        """Concurrent openers of one store prepare the schema and seed once."""
        store = DinnerStore(db_url)
        original_seed = DinnerStore.seed_topics_if_empty
        seed_calls = []

        async def counting_seed(self):
            seed_calls.append(self)
            return await original_seed(self)

        with patch.object(DinnerStore, "seed_topics_if_empty", counting_seed):
            await asyncio.gather(*(store.open() for _ in range(5)))
        try:
            assert len(seed_calls) == 1
            assert await store.count_topics() == len(DEFAULT_TOPICS)
        finally:
            await store.close()

    async def test_failed_seed_leaves_store_closed(self, db_url):
        """A failure during the first seed releases the engine; a retry opens and seeds."""
        store = DinnerStore(db_url)

        async def failing_seed(self):
            raise StorageError("seed_topics", "disk full")

        with patch.object(DinnerStore, "seed_topics_if_empty", failing_seed):
            with pytest.raises(StorageError):
                await store.open()

        assert store.is_open is False
        assert store._engine is None
        with pytest.raises(StoreClosedError):
            await store.insert_family_member("Mom", "Mom")

        await store.open()
        try:
            assert store.is_open
            assert store.created_on_open is True
            assert await store.count_topics() == len(DEFAULT_TOPICS)
        finally:
            await store.close()

    async def test_failed_version_stamp_wrapped(self, db_url):
        store = DinnerStore(db_url)
        failure = OperationalError("PRAGMA", {}, Exception("database is locked"))

        with patch("family_dinner.core.database.store.set_schema_version", side_effect=failure):
            with pytest.raises(StorageError) as exc_info:
                await store.open()

        assert exc_info.value.operation == "open"
        assert store._engine is None
        with pytest.raises(StoreClosedError):
            await store.fetch_dinners()

    async def test_open_is_idempotent(self, store):
        await store.open()

        assert await store.count_topics() == len(DEFAULT_TOPICS)

    async def test_seed_topics_if_empty_skips_populated_table(self, store):
        assert await store.seed_topics_if_empty() == 0
        assert await store.count_topics() == len(DEFAULT_TOPICS)

    async def test_schema_mismatch_recreates_database(self, db_url):
        async with DinnerStore(db_url) as store:
            await store.insert_family_member("Mom", "Mom")

        engine = create_engine(db_url)
        try:
            async with engine.begin() as conn:
                await set_schema_version(conn, SCHEMA_VERSION + 1)
                await conn.exec_driver_sql("CREATE TABLE legacy (id INTEGER PRIMARY KEY)")
        finally:
            await engine.dispose()

        async with DinnerStore(db_url) as store:
            assert store.created_on_open is True
            assert await store.fetch_family_members() == []
            assert await store.count_topics() == len(DEFAULT_TOPICS)

    async def test_use_before_open_raises(self, db_url):
        store = DinnerStore(db_url)

        with pytest.raises(StoreClosedError):
            await store.fetch_dinners()

    async def test_use_after_close_raises(self, db_url):
        store = DinnerStore(db_url)
        await store.open()
        await store.close()

        assert store.is_open is False
        with pytest.raises(StoreClosedError):
            await store.insert_family_member("Mom", "Mom")

    def test_from_settings(self, db_path):
        settings = Settings(database_path=str(db_path))

        store = DinnerStore.from_settings(settings)

        assert store.db_url == f"sqlite+aiosqlite:///{db_path}"


class TestDinners:
    """Dinner operations."""

    async def test_insert_dinner_listed_first(self, store):
        await store.insert_dinner("Oct 3", "6:30 PM", "Mom, Sam")
        previous_ids = [d.id for d in await store.fetch_dinners()]

        dinner = await store.insert_dinner("Oct 4", "7:00 PM", "Dad")
        dinners = await store.fetch_dinners()

        assert dinners[0].id == dinner.id
        assert (dinners[0].date, dinners[0].time, dinners[0].attendees) == ("Oct 4", "7:00 PM", "Dad")
        assert all(dinner.id > previous for previous in previous_ids)
        assert await store.count_dinners() == 2

    async def test_get_next_dinner(self, store):
        assert await store.get_next_dinner() is None

        await store.insert_dinner("Oct 3", "6:30 PM", "Mom")
        newest = await store.insert_dinner("Oct 4", "7:00 PM", "Dad")

        next_dinner = await store.get_next_dinner()
        assert next_dinner is not None
        assert next_dinner.id == newest.id

    async def test_insert_dinner_with_existing_id_replaces(self, store):
        dinner = await store.insert_dinner("Oct 3", "6:30 PM", "Mom")

        await store.insert_dinner("Oct 5", "8:00 PM", "Sam", dinner_id=dinner.id)

        dinners = await store.fetch_dinners()
        assert len(dinners) == 1
        assert dinners[0].date == "Oct 5"


class TestFamilyMembers:
    """Family member operations."""

    async def test_insert_members_distinct_ids(self, store):
        for i in range(5):
            await store.insert_family_member(f"Member {i}", "Child")

        members = await store.fetch_family_members()

        assert len(members) == 5
        assert len({m.id for m in members}) == 5
        assert [m.name for m in members] == [f"Member {i}" for i in range(5)]

    async def test_update_member_status(self, store):
        member = await store.insert_family_member("Mom", "Mom")

        assert await store.update_member_status(member.id, True) is True

        reloaded = await store.get_family_member(member.id)
        assert reloaded is not None
        assert reloaded.is_online is True

    async def test_update_missing_member_is_noop(self, store):
        assert await store.update_member_status(12345, True) is False

    async def test_update_unsaved_member_is_noop(self, store):
        version = store.notifier.version("family_members")

        assert await store.update_member_status(None, True) is False
        assert store.notifier.version("family_members") == version

    async def test_delete_member_twice(self, store):
        member = await store.insert_family_member("Sam", "Child")

        assert await store.delete_family_member(member) is True
        assert member.id not in {m.id for m in await store.fetch_family_members()}
        assert await store.delete_family_member(member) is False

    async def test_delete_unsaved_member(self, store):
        assert await store.delete_family_member(FamilyMember(name="Ghost", role="None")) is False


class TestTopics:
    """Random topic selection."""

    async def test_random_topic_is_seeded(self, store):
        seeded = {text for text, _ in DEFAULT_TOPICS}

        for _ in range(10):
            topic = await store.get_random_topic()
            assert topic is not None
            assert topic.text in seeded

    async def test_random_topic_by_category(self, store):
        topic = await store.get_random_topic("Gratitude")

        assert topic is not None
        assert topic.text == "What was the best part of your day?"

    async def test_random_topic_empty_table(self, store, db_url):
        engine = create_engine(db_url)
        try:
            async with engine.begin() as conn:
                await conn.exec_driver_sql("DELETE FROM topics")
        finally:
            await engine.dispose()

        assert await store.get_random_topic() is None


class TestDurability:
    """Committed rows survive closing and reopening the database file."""

    async def test_rows_survive_reopen(self, db_url):
        async with DinnerStore(db_url) as store:
            dinner = await store.insert_dinner("Oct 3", "6:30 PM", "Mom, Sam")
            member = await store.insert_family_member("Sam", "Child")
            await store.update_member_status(member.id, True)

        async with DinnerStore(db_url) as reopened:
            dinners = await reopened.fetch_dinners()
            members = await reopened.fetch_family_members()

        assert [(d.id, d.attendees) for d in dinners] == [(dinner.id, "Mom, Sam")]
        assert [(m.id, m.name, m.is_online) for m in members] == [(member.id, "Sam", True)]


class TestStorageErrors:
    """Driver failures surface as StorageError."""

    async def test_driver_error_is_wrapped(self, store):
        failure = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch(
            "family_dinner.core.database.store.DinnerRepository.upsert", side_effect=failure
        ):
            with pytest.raises(StorageError) as exc_info:
                await store.insert_dinner("Oct 3", "6:30 PM", "Mom")

        assert exc_info.value.operation == "insert_dinner"
        assert exc_info.value.__cause__ is failure
