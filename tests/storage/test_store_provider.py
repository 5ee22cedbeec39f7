"""Tests for StoreProvider."""

from __future__ import annotations

import pytest

from chatmcp.config import ServerSettings
from chatmcp.storage.backend import InMemoryStore
from chatmcp.storage.errors import StorageConfigError
from chatmcp.storage.postgrest import PostgrestStore
from chatmcp.storage.provider import StoreProvider


class TestFromSettings:
    def test_memory_backend(self) -> None:
        provider = StoreProvider.from_settings(ServerSettings(storage="memory"))
        assert isinstance(provider.get(), InMemoryStore)

    def test_builds_once(self) -> None:
        provider = StoreProvider.from_settings(ServerSettings(storage="memory"))
        assert provider.get() is provider.get()

    def test_table_from_settings(self) -> None:
        provider = StoreProvider.from_settings(
            ServerSettings(storage="memory", memory_table="notes")
        )
        assert provider.table == "notes"

    async def test_postgrest_backend(self) -> None:
        settings = ServerSettings(supabase_url="https://db.example.co", supabase_anon_key="k")
        provider = StoreProvider.from_settings(settings)
        assert isinstance(provider.get(), PostgrestStore)
        await provider.aclose()

    def test_missing_url(self) -> None:
        provider = StoreProvider.from_settings(ServerSettings(supabase_anon_key="k"))
        with pytest.raises(StorageConfigError, match="Missing SUPABASE_URL"):
            provider.get()

    def test_missing_key(self) -> None:
        provider = StoreProvider.from_settings(ServerSettings(supabase_url="https://x"))
        with pytest.raises(StorageConfigError, match="Missing SUPABASE_ANON_KEY"):
            provider.get()


class TestLifecycle:
    def test_failed_factory_retries(self) -> None:
        attempts: list[int] = []

        def factory() -> InMemoryStore:
            attempts.append(1)
            if len(attempts) == 1:
                raise StorageConfigError("not yet")
            return InMemoryStore()

        provider = StoreProvider(factory)
        with pytest.raises(StorageConfigError):
            provider.get()
        assert isinstance(provider.get(), InMemoryStore)
        assert len(attempts) == 2

    async def test_aclose_resets(self) -> None:
        provider = StoreProvider.from_settings(ServerSettings(storage="memory"))
        first = provider.get()
        await provider.aclose()
        assert provider.get() is not first

    async def test_aclose_without_store(self) -> None:
        await StoreProvider(InMemoryStore).aclose()

    def test_for_store(self) -> None:
        store = InMemoryStore()
        assert StoreProvider.for_store(store, table="t").get() is store
