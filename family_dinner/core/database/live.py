"""
Table change notification and live queries.

Writers call :meth:`TableChangeNotifier.notify` after a commit. A
:class:`LiveQuery` re-runs its query whenever one of its tables changed since
the last snapshot it emitted, so every emission reflects committed state.
Several changes that land while a subscriber is busy collapse into a single
re-query.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Dict, Generic, Iterable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TableChangeNotifier:
    """Per-table version counters with a condition to wait on."""

    def __init__(self) -> None:
        self._versions: Dict[str, int] = {}
        self._condition: Optional[asyncio.Condition] = None

    def _get_condition(self) -> asyncio.Condition:
        # Created lazily so the notifier can be built outside a running loop.
        if self._condition is None:
            self._condition = asyncio.Condition()
        return self._condition

    def version(self, table: str) -> int:
        return self._versions.get(table, 0)

    def snapshot(self, tables: Iterable[str]) -> Tuple[int, ...]:
        return tuple(self.version(t) for t in tables)

    async def notify(self, *tables: str) -> None:
        """Record a committed change to ``tables`` and wake every waiter."""
        condition = self._get_condition()
        async with condition:
            for table in tables:
                self._versions[table] = self.version(table) + 1
            condition.notify_all()
        logger.debug("Tables changed: %s", ", ".join(tables))

    async def wait_for_change(self, tables: Tuple[str, ...], seen: Tuple[int, ...]) -> Tuple[int, ...]:
        """Block until any of ``tables`` moves past the ``seen`` versions.

        Returns:
            The versions observed when the wait ended
        """
        condition = self._get_condition()
        async with condition:
            await condition.wait_for(lambda: self.snapshot(tables) != seen)
            return self.snapshot(tables)


class LiveQuery(Generic[T]):
    """Continuously updating read over one or more tables.

    Iterating yields the current result first, then a fresh result after each
    committed change. Iteration only ends when the consumer stops iterating
    (``break``, cancellation or :meth:`aclose`).

    Usage::

        async for dinners in store.list_dinners():
            render(dinners)
    """

    def __init__(
        self,
        notifier: TableChangeNotifier,
        tables: Iterable[str],
        fetch: Callable[[], Awaitable[T]],
        name: str = "live-query",
    ) -> None:
        self._notifier = notifier
        self._tables = tuple(tables)
        self._fetch = fetch
        self.name = name

    @property
    def tables(self) -> Tuple[str, ...]:
        return self._tables

    async def first(self) -> T:
        """Run the query once without subscribing."""
        return await self._fetch()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        # Versions are captured before fetching so a commit racing the read
        # triggers another emission instead of being missed.
        seen = self._notifier.snapshot(self._tables)
        logger.debug("Live query %s subscribed", self.name)
        try:
            while True:
                yield await self._fetch()
                seen = await self._notifier.wait_for_change(self._tables, seen)
        finally:
            logger.debug("Live query %s detached", self.name)
