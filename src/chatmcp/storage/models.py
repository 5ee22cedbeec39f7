"""Memory record model and the query descriptors understood by record stores."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MemoryType = Literal["preference", "profile", "task", "note", "fact"]
MEMORY_TYPES: tuple[str, ...] = ("preference", "profile", "task", "note", "fact")

MEMORIES_TABLE = "memories"


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class MemoryRecord(BaseModel):
    """A row of the ``memories`` table.

    Validated from snake_case storage columns; :meth:`to_output` renders the
    camelCase shape returned to MCP clients.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(serialization_alias="userId")
    session_id: str | None = Field(default=None, serialization_alias="sessionId")
    type: MemoryType
    content: str
    tags: list[str] | None = None
    importance: int | None = None
    created_at: str = Field(serialization_alias="createdAt")
    updated_at: str = Field(serialization_alias="updatedAt")

    def to_output(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# Query descriptors
# ---------------------------------------------------------------------------


class OrderBy(BaseModel):
    """A sort key; ``None`` values sort after all others when ``nulls_last``."""

    column: str
    descending: bool = True
    nulls_last: bool = True


class RecordFilter(BaseModel):
    """Row filter: exact matches plus case-insensitive substring matches."""

    eq: dict[str, Any] = {}
    contains: dict[str, str] = {}


class RecordQuery(RecordFilter):
    """A filtered, ordered, windowed select."""

    order: list[OrderBy] = []
    offset: int = 0
    limit: int | None = None
    count: bool = False


class SelectResult(BaseModel):
    """Rows returned by a select, plus the unwindowed total when requested."""

    rows: list[dict[str, Any]] = []
    total: int | None = None
