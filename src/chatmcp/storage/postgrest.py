"""PostgrestStore — :class:`RecordStore` over a PostgREST (Supabase REST) endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from chatmcp.storage.errors import StorageError
from chatmcp.storage.models import OrderBy, RecordFilter, RecordQuery, SelectResult

logger = logging.getLogger(__name__)

_REST_PATH = "/rest/v1"


class PostgrestStore:
    """Talks to ``<base_url>/rest/v1/<table>`` with the PostgREST query dialect.

    Holds one :class:`httpx.AsyncClient` for its lifetime; call :meth:`aclose`
    on shutdown. Satisfies the :class:`~chatmcp.storage.backend.RecordStore`
    protocol.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") + _REST_PATH
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "POST", table, json=row, prefer="return=representation"
        )
        rows = _rows(response)
        if not rows:
            raise StorageError(f"insert into {table} returned no rows")
        return rows[0]

    async def select(self, table: str, query: RecordQuery) -> SelectResult:
        params = [("select", "*"), *_filter_params(query)]
        if query.order:
            params.append(("order", ",".join(_order_term(o) for o in query.order)))
        if query.offset:
            params.append(("offset", str(query.offset)))
        if query.limit is not None:
            params.append(("limit", str(query.limit)))

        response = await self._request(
            "GET", table, params=params, prefer="count=exact" if query.count else None
        )
        total = _content_range_total(response) if query.count else None
        return SelectResult(rows=_rows(response), total=total)

    async def update(
        self, table: str, values: dict[str, Any], where: RecordFilter
    ) -> list[dict[str, Any]]:
        response = await self._request(
            "PATCH",
            table,
            params=[("select", "*"), *_filter_params(where)],
            json=values,
            prefer="return=representation",
        )
        return _rows(response)

    async def delete(self, table: str, where: RecordFilter) -> list[dict[str, Any]]:
        response = await self._request(
            "DELETE",
            table,
            params=[("select", "id"), *_filter_params(where)],
            prefer="return=representation",
        )
        return _rows(response)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            response = await self._client.request(
                method,
                f"{self._base_url}/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise StorageError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            message = _error_message(response)
            logger.debug(
                "PostgREST %s %s failed (%s): %s", method, table, response.status_code, message
            )
            raise StorageError(message, status_code=response.status_code)
        return response


def _filter_params(where: RecordFilter) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for column, value in where.eq.items():
        if value is None:
            params.append((column, "is.null"))
        else:
            params.append((column, f"eq.{value}"))
    for column, needle in where.contains.items():
        params.append((column, f"ilike.%{escape_like(needle)}%"))
    return params


def escape_like(text: str) -> str:
    """Escape LIKE metacharacters so *text* matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _order_term(order: OrderBy) -> str:
    term = f"{order.column}.{'desc' if order.descending else 'asc'}"
    return term + (".nullslast" if order.nulls_last else ".nullsfirst")


def _rows(response: httpx.Response) -> list[dict[str, Any]]:
    if not response.content:
        return []
    try:
        data = response.json()
    except ValueError as exc:
        msg = f"Malformed response body (HTTP {response.status_code}): {exc}"
        raise StorageError(msg, status_code=response.status_code) from exc
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        msg = f"Unexpected response shape (HTTP {response.status_code})"
        raise StorageError(msg, status_code=response.status_code)
    return data


def _content_range_total(response: httpx.Response) -> int | None:
    """Read the total from a ``Content-Range: 0-19/57`` header."""
    header = response.headers.get("content-range", "")
    _, _, total = header.partition("/")
    if not total or total == "*":
        return None
    try:
        return int(total)
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or f"HTTP {response.status_code}"
