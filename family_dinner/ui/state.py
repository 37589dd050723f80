"""
Observable state holder used by the view model.

A ``StateValue`` always has a value (there is no "not loaded yet" state).
Consumers either register a callback or iterate asynchronously; iteration
yields the current value first and then each new value. Slow iterators see
only the latest value, intermediate ones are skipped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateValue(Generic[T]):
    """Holds the latest value of some state and tells observers when it changes."""

    def __init__(self, initial: T, name: str = "state") -> None:
        self.name = name
        self._value = initial
        self._version = 0
        self._callbacks: List[Callable[[T], None]] = []
        self._changed: Optional[asyncio.Event] = None

    @property
    def value(self) -> T:
        return self._value

    @property
    def version(self) -> int:
        """Number of times the value has been set."""
        return self._version

    def set(self, value: T) -> None:
        self._value = value
        self._version += 1
        if self._changed is not None:
            self._changed.set()
            self._changed = None
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception:
                logger.exception("Observer of %s failed", self.name)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` for future values.

        Returns:
            A function that removes the callback again
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def wait_for_version(self, version: int) -> T:
        """Wait until the value has been set at least ``version`` times."""
        while self._version < version:
            await self._changed_event().wait()
        return self._value

    def _changed_event(self) -> asyncio.Event:
        if self._changed is None:
            self._changed = asyncio.Event()
        return self._changed

    async def updates(self) -> AsyncIterator[T]:
        seen = self._version
        yield self._value
        while True:
            if self._version == seen:
                await self._changed_event().wait()
            seen = self._version
            yield self._value

    def __aiter__(self) -> AsyncIterator[T]:
        return self.updates()

    def __repr__(self) -> str:
        return f"StateValue(name={self.name}, version={self._version})"
