"""Record store backends.

:class:`RecordStore` defines the async storage protocol consumed by the
memory tools. :class:`InMemoryStore` provides a lightweight dict-based
implementation suitable for testing and single-process deployments.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any, Protocol
from uuid import uuid4

from chatmcp.storage.models import RecordFilter, RecordQuery, SelectResult, utc_now


class RecordStore(Protocol):
    """Async protocol for a networked, table-addressed record store.

    Every operation is a single round trip; failures raise
    :class:`~chatmcp.storage.errors.StorageError`.
    """

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert *row* and return the stored row, including generated columns."""
        ...

    async def select(self, table: str, query: RecordQuery) -> SelectResult:
        """Return rows matching *query*."""
        ...

    async def update(
        self, table: str, values: dict[str, Any], where: RecordFilter
    ) -> list[dict[str, Any]]:
        """Apply *values* to rows matching *where* and return the updated rows."""
        ...

    async def delete(self, table: str, where: RecordFilter) -> list[dict[str, Any]]:
        """Delete rows matching *where* and return them."""
        ...

    async def aclose(self) -> None:
        """Release any held connections."""
        ...


class InMemoryStore:
    """Dict-backed :class:`RecordStore` implementation.

    Emulates the column defaults of the hosted schema (``id``, ``created_at``,
    ``updated_at``) and returns copies so callers never share state with the
    store.
    """

    def __init__(self, clock: Callable[[], str] = utc_now) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._clock = clock

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        now = self._clock()
        stored = {"id": str(uuid4()), "created_at": now, "updated_at": now, **row}
        self._tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def select(self, table: str, query: RecordQuery) -> SelectResult:
        rows = [r for r in self._tables.get(table, []) if _matches(r, query)]
        rows = _sorted(rows, query)
        total = len(rows) if query.count else None
        end = None if query.limit is None else query.offset + query.limit
        window = rows[query.offset:end]
        return SelectResult(rows=copy.deepcopy(window), total=total)

    async def update(
        self, table: str, values: dict[str, Any], where: RecordFilter
    ) -> list[dict[str, Any]]:
        updated: list[dict[str, Any]] = []
        for row in self._tables.get(table, []):
            if _matches(row, where):
                row.update(copy.deepcopy(values))
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, table: str, where: RecordFilter) -> list[dict[str, Any]]:
        rows = self._tables.get(table, [])
        removed = [r for r in rows if _matches(r, where)]
        self._tables[table] = [r for r in rows if not _matches(r, where)]
        return removed

    async def aclose(self) -> None:
        return None


def _matches(row: dict[str, Any], where: RecordFilter) -> bool:
    for column, value in where.eq.items():
        if row.get(column) != value:
            return False
    for column, needle in where.contains.items():
        haystack = row.get(column)
        if not isinstance(haystack, str) or needle.casefold() not in haystack.casefold():
            return False
    return True


def _sorted(rows: list[dict[str, Any]], query: RecordQuery) -> list[dict[str, Any]]:
    # Apply keys last-to-first; list.sort is stable so earlier keys dominate.
    for key in reversed(query.order):
        present = [r for r in rows if r.get(key.column) is not None]
        missing = [r for r in rows if r.get(key.column) is None]
        present.sort(key=lambda r, col=key.column: r[col], reverse=key.descending)
        rows = present + missing if key.nulls_last else missing + present
    return rows
