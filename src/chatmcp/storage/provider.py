"""StoreProvider — lazily constructed, process-lifetime record store handle."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from chatmcp.storage.backend import InMemoryStore, RecordStore
from chatmcp.storage.errors import StorageConfigError
from chatmcp.storage.postgrest import PostgrestStore

if TYPE_CHECKING:
    from chatmcp.config import ServerSettings

logger = logging.getLogger(__name__)


class StoreProvider:
    """Owns the single :class:`RecordStore` shared by all requests.

    The store is built on first :meth:`get` and reused afterwards. A factory
    that raises :class:`StorageConfigError` leaves the provider empty, so the
    next call tries again.

    Usage::

        provider = StoreProvider.from_settings(settings)
        store = provider.get()        # may raise StorageConfigError
        await provider.aclose()
    """

    def __init__(self, factory: Callable[[], RecordStore], *, table: str = "memories") -> None:
        self._factory = factory
        self._store: RecordStore | None = None
        self.table = table

    @classmethod
    def from_settings(cls, settings: ServerSettings) -> StoreProvider:
        """Build a provider whose factory follows ``settings.storage``."""
        if settings.storage == "memory":
            return cls(InMemoryStore, table=settings.memory_table)

        def _postgrest() -> RecordStore:
            if not settings.supabase_url:
                msg = (
                    "Missing SUPABASE_URL environment variable. "
                    "Please set it to your Supabase project URL."
                )
                raise StorageConfigError(msg)
            if not settings.supabase_anon_key:
                msg = (
                    "Missing SUPABASE_ANON_KEY environment variable. "
                    "Please set it to your Supabase anon/public key."
                )
                raise StorageConfigError(msg)
            return PostgrestStore(
                settings.supabase_url,
                settings.supabase_anon_key,
                timeout=settings.storage_timeout,
            )

        return cls(_postgrest, table=settings.memory_table)

    @classmethod
    def for_store(cls, store: RecordStore, *, table: str = "memories") -> StoreProvider:
        """Wrap an already-built store."""
        provider = cls(lambda: store, table=table)
        provider._store = store
        return provider

    def get(self) -> RecordStore:
        """Return the store, constructing it on first use.

        Raises:
            StorageConfigError: If required connection parameters are missing.
        """
        if self._store is None:
            self._store = self._factory()
            logger.info("Storage backend initialised: %s", type(self._store).__name__)
        return self._store

    async def aclose(self) -> None:
        """Close the store if it was ever built."""
        if self._store is not None:
            await self._store.aclose()
            self._store = None
