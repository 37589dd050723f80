"""
View model binding the dinner store to the presentation layer.

The view model republishes the store's live queries as :class:`StateValue`
observables and turns user intents into store writes. Writes run as background
tasks owned by the view model's scope and report completion only through the
live queries (or the returned task, for callers that want it).

Closing the view model cancels work that has not reached the store yet. A store
call that is already running is left to finish and ``close()`` waits for it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Set, TypeVar

from family_dinner.core.database import Dinner, DinnerStore, FamilyMember, LiveQuery, Topic

from .state import StateValue

logger = logging.getLogger(__name__)

T = TypeVar("T")

ATTENDEE_SEPARATOR = ", "


def join_attendees(names: Sequence[str]) -> str:
    """Display string stored on a dinner for the selected member names."""
    return ATTENDEE_SEPARATOR.join(names)


class DinnerViewModel:
    """Observable dinner and family state plus user intents."""

    def __init__(self, store: DinnerStore) -> None:
        self._store = store
        self.current_dinners: StateValue[List[Dinner]] = StateValue([], name="dinners")
        self.current_family_members: StateValue[List[FamilyMember]] = StateValue([], name="family_members")
        self._collectors: List[asyncio.Task] = []
        self._tasks: Set[asyncio.Task] = set()
        self._in_flight: Set[asyncio.Future] = set()
        self._closed = False

    # ---- lifecycle ----

    def start(self) -> None:
        """Start following the store's live queries. Requires a running loop."""
        if self._closed:
            raise RuntimeError("DinnerViewModel is closed")
        if self._collectors:
            return
        self._collectors = [
            asyncio.create_task(self._collect(self._store.list_dinners(), self.current_dinners)),
            asyncio.create_task(self._collect(self._store.list_family_members(), self.current_family_members)),
        ]
        for task in self._collectors:
            task.add_done_callback(self._on_task_done)

    async def close(self) -> None:
        """Tear down the scope: cancel pending work and stop the collectors."""
        if self._closed:
            return
        self._closed = True
        pending = [*self._collectors, *self._tasks]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if self._in_flight:
            logger.debug("Waiting for %s in-flight store calls", len(self._in_flight))
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        self._collectors = []
        logger.debug("DinnerViewModel closed")

    async def __aenter__(self) -> "DinnerViewModel":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def _collect(self, query: LiveQuery[List[Any]], state: StateValue[List[Any]]) -> None:
        async for rows in query:
            state.set(rows)
            logger.debug("%s updated: %s rows", state.name, len(rows))

    # ---- derived state ----

    @property
    def next_dinner(self) -> Optional[Dinner]:
        """Most recently scheduled dinner, shown as the next dinner on the home screen."""
        dinners = self.current_dinners.value
        return dinners[0] if dinners else None

    @property
    def dinner_count(self) -> int:
        return len(self.current_dinners.value)

    # ---- intents ----

    def request_random_topic(
        self,
        callback: Optional[Callable[[Optional[Topic]], None]] = None,
        *,
        category: Optional[str] = None,
    ) -> "asyncio.Task[Optional[Topic]]":
        """Fetch a random topic in the background.

        Args:
            callback: Invoked once with the topic (or None) when the fetch succeeds
            category: Restrict the pick to one category

        Returns:
            Task resolving to the topic, or None when there are no topics
        """
        task = self._launch(lambda: self._store.get_random_topic(category), "random-topic")
        if callback is not None:

            def deliver(done: "asyncio.Task[Optional[Topic]]") -> None:
                if done.cancelled() or done.exception() is not None:
                    return
                callback(done.result())

            task.add_done_callback(deliver)
        return task

    def schedule_dinner(self, date: str, time: str, attendee_names: Sequence[str]) -> "asyncio.Task[Dinner]":
        """Schedule a dinner. Date and time are stored verbatim."""
        attendees = join_attendees(attendee_names)
        return self._launch(lambda: self._store.insert_dinner(date, time, attendees), "schedule-dinner")

    def add_family_member(self, name: str, role: str) -> "asyncio.Task[FamilyMember]":
        return self._launch(lambda: self._store.insert_family_member(name, role), "add-family-member")

    def remove_family_member(self, member: FamilyMember) -> "asyncio.Task[bool]":
        return self._launch(lambda: self._store.delete_family_member(member), "remove-family-member")

    def toggle_online_status(self, member: FamilyMember) -> "asyncio.Task[bool]":
        """Flip the member's status relative to the given snapshot of the member."""
        return self._launch(
            lambda: self._store.update_member_status(member.id, not member.is_online), "toggle-online-status"
        )

    # ---- scope ----

    def _launch(self, factory: Callable[[], Awaitable[T]], name: str) -> "asyncio.Task[T]":
        task = asyncio.create_task(self._run(factory), name=f"family-dinner-{name}")
        if self._closed:
            logger.warning("Intent %s ignored, view model is closed", name)
            task.cancel()
            return task
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _run(self, factory: Callable[[], Awaitable[T]]) -> T:
        # Once the store call has started it is shielded from scope cancellation.
        inner = asyncio.ensure_future(factory())
        self._in_flight.add(inner)
        inner.add_done_callback(self._in_flight.discard)
        return await asyncio.shield(inner)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task %s failed", task.get_name(), exc_info=exc)
