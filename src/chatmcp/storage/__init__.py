"""Storage layer — record store protocol, backends and the lazy provider."""

from chatmcp.storage.backend import InMemoryStore, RecordStore
from chatmcp.storage.errors import StorageConfigError, StorageError
from chatmcp.storage.models import (
    MEMORIES_TABLE,
    MEMORY_TYPES,
    MemoryRecord,
    MemoryType,
    OrderBy,
    RecordFilter,
    RecordQuery,
    SelectResult,
)
from chatmcp.storage.postgrest import PostgrestStore
from chatmcp.storage.provider import StoreProvider

__all__ = [
    "MEMORIES_TABLE",
    "MEMORY_TYPES",
    "InMemoryStore",
    "MemoryRecord",
    "MemoryType",
    "OrderBy",
    "PostgrestStore",
    "RecordFilter",
    "RecordQuery",
    "RecordStore",
    "SelectResult",
    "StorageConfigError",
    "StorageError",
    "StoreProvider",
]
