"""
Application composition root.

``FamilyDinnerApp`` owns the settings, the single store instance and the view
models built on it. The store is created lazily through :class:`StoreCell`,
so concurrent first access still opens (and seeds) exactly one store.

Usage::

    async with FamilyDinnerApp() as app:
        view_model = await app.view_model()
        view_model.schedule_dinner("Oct 3", "6:30 PM", ["Mom", "Sam"])
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from family_dinner.core.config import Settings
from family_dinner.core.database import DinnerStore
from family_dinner.core.logging_config import setup_logging
from family_dinner.ui import DinnerViewModel

logger = logging.getLogger(__name__)


class StoreCell:
    """Lazily initialized, at-most-once holder for the opened store."""

    def __init__(self, factory: Callable[[], DinnerStore]) -> None:
        self._factory = factory
        self._store: Optional[DinnerStore] = None
        self._lock: Optional[asyncio.Lock] = None

    @property
    def initialized(self) -> bool:
        return self._store is not None

    async def get(self) -> DinnerStore:
        """Return the store, constructing and opening it on first call."""
        if self._store is not None:
            return self._store
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._store is None:
                store = self._factory()
                await store.open()
                self._store = store
                logger.debug("Store initialized url=%s", store.db_url)
        return self._store

    async def reset(self) -> None:
        """Close and forget the store; the next ``get`` opens a new one."""
        if self._store is not None:
            await self._store.close()
        self._store = None


class FamilyDinnerApp:
    """Wires settings, logging, the store and view models together."""

    def __init__(self, settings: Optional[Settings] = None, *, configure_logging: bool = True) -> None:
        self.settings = settings or Settings()
        self._configure_logging = configure_logging
        self.store_cell = StoreCell(lambda: DinnerStore.from_settings(self.settings))
        self._view_models: List[DinnerViewModel] = []

    async def start(self) -> None:
        if self._configure_logging:
            logging_config = self.settings.logging
            setup_logging(
                log_level=logging_config.level,
                log_format=logging_config.format,
                enable_file=logging_config.enable_file,
                log_file_dir=logging_config.file_dir,
            )
        await self.store_cell.get()

    async def store(self) -> DinnerStore:
        return await self.store_cell.get()

    async def view_model(self) -> DinnerViewModel:
        """Build a started view model bound to the shared store."""
        view_model = DinnerViewModel(await self.store_cell.get())
        view_model.start()
        self._view_models.append(view_model)
        return view_model

    async def shutdown(self) -> None:
        for view_model in self._view_models:
            await view_model.close()
        self._view_models.clear()
        await self.store_cell.reset()

    async def __aenter__(self) -> "FamilyDinnerApp":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
