"""Memory tools — save, search, forget, list and update per-user memory records.

Records are scoped by ``userId`` alone; there is no caller identity check.
Argument violations escalate as :class:`InvalidParamsError` (JSON-RPC
``INVALID_PARAMS``), while storage failures stay in-band as ``isError``
results.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chatmcp.protocol.errors import InvalidParamsError, describe_violations
from chatmcp.protocol.models import ToolDefinition, ToolResult
from chatmcp.storage.errors import StorageConfigError, StorageError
from chatmcp.storage.models import (
    MEMORY_TYPES,
    MemoryRecord,
    MemoryType,
    OrderBy,
    RecordFilter,
    RecordQuery,
    utc_now,
)
from chatmcp.tools._fields import Integer, bounded_text
from chatmcp.tools.registry import Tool

if TYPE_CHECKING:
    from chatmcp.tools.registry import ToolContext

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 50_000
MAX_QUERY_LENGTH = 1_000

_M = TypeVar("_M", bound=BaseModel)

ContentText = bounded_text(1, MAX_CONTENT_LENGTH)
QueryText = bounded_text(1, MAX_QUERY_LENGTH)

# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class _MemoryInput(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)


class MemorySaveInput(_MemoryInput):
    content: ContentText
    type: MemoryType = "note"
    tags: list[str] | None = None
    importance: Integer = Field(default=0, ge=-10, le=10)
    session_id: str | None = Field(default=None, alias="sessionId")


class MemorySearchInput(_MemoryInput):
    query: QueryText
    limit: Integer = Field(default=10, ge=1, le=100)
    type: MemoryType | None = None
    session_id: str | None = Field(default=None, alias="sessionId")


class MemoryForgetInput(_MemoryInput):
    id: str | None = None
    content_match: str | None = Field(default=None, alias="contentMatch")

    @model_validator(mode="after")
    def _require_target(self) -> MemoryForgetInput:
        if not self.id and not self.content_match:
            msg = "Either id or contentMatch must be provided"
            raise ValueError(msg)
        return self


class MemoryListInput(_MemoryInput):
    type: MemoryType | None = None
    limit: Integer = Field(default=20, ge=1, le=100)
    offset: Integer = Field(default=0, ge=0)


class MemoryUpdateInput(_MemoryInput):
    id: str = Field(min_length=1)
    content: ContentText | None = None
    type: MemoryType | None = None
    tags: list[str] | None = None
    importance: Integer | None = Field(default=None, ge=-10, le=10)


def _parse(model: type[_M], arguments: Any) -> _M:
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        raise InvalidParamsError(describe_violations(exc)) from exc


def _storage_failure(exc: StorageError, action: str) -> ToolResult:
    if isinstance(exc, StorageConfigError):
        return ToolResult.failure(exc.message)
    logger.error("Storage error while trying to %s: %s", action, exc.message)
    return ToolResult.failure(f"Failed to {action}: {exc.message}")


def _outputs(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Render stored rows for clients; a row off the schema is a backend fault."""
    try:
        return [MemoryRecord.model_validate(row).to_output() for row in rows]
    except ValidationError as exc:
        msg = f"Malformed memory record: {describe_violations(exc)}"
        raise StorageError(msg) from exc


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def memory_save(arguments: Any, context: ToolContext) -> ToolResult:
    args = _parse(MemorySaveInput, arguments)
    row = {
        "user_id": args.user_id,
        "content": args.content,
        "type": args.type,
        "tags": args.tags or [],
        "importance": args.importance,
        "session_id": args.session_id or None,
    }
    try:
        store = context.store.get()
        saved = await store.insert(context.store.table, row)
        if saved.get("id") is None:
            raise StorageError("Inserted row has no id")
    except StorageError as exc:
        return _storage_failure(exc, "save memory")

    return ToolResult.from_payload({"id": str(saved["id"]), "saved": True})


async def memory_search(arguments: Any, context: ToolContext) -> ToolResult:
    """Case-insensitive substring search, most important then newest first."""
    args = _parse(MemorySearchInput, arguments)
    eq: dict[str, Any] = {"user_id": args.user_id}
    if args.type:
        eq["type"] = args.type
    if args.session_id:
        eq["session_id"] = args.session_id

    query = RecordQuery(
        eq=eq,
        contains={"content": args.query},
        order=[OrderBy(column="importance"), OrderBy(column="created_at")],
        limit=args.limit,
    )
    try:
        store = context.store.get()
        result = await store.select(context.store.table, query)
        memories = _outputs(result.rows)
    except StorageError as exc:
        return _storage_failure(exc, "search memories")

    return ToolResult.from_payload({"memories": memories})


async def memory_forget(arguments: Any, context: ToolContext) -> ToolResult:
    """Delete one record by id, or every record whose content contains a match."""
    args = _parse(MemoryForgetInput, arguments)
    if args.id:
        where = RecordFilter(eq={"user_id": args.user_id, "id": args.id})
    else:
        where = RecordFilter(
            eq={"user_id": args.user_id}, contains={"content": args.content_match or ""}
        )

    try:
        store = context.store.get()
        deleted = await store.delete(context.store.table, where)
    except StorageError as exc:
        return _storage_failure(exc, "delete memories")

    return ToolResult.from_payload({"deletedCount": len(deleted)})


async def memory_list(arguments: Any, context: ToolContext) -> ToolResult:
    args = _parse(MemoryListInput, arguments)
    eq: dict[str, Any] = {"user_id": args.user_id}
    if args.type:
        eq["type"] = args.type

    query = RecordQuery(
        eq=eq,
        order=[OrderBy(column="created_at")],
        offset=args.offset,
        limit=args.limit,
        count=True,
    )
    try:
        store = context.store.get()
        result = await store.select(context.store.table, query)
        memories = _outputs(result.rows)
    except StorageError as exc:
        return _storage_failure(exc, "list memories")

    return ToolResult.from_payload({
        "memories": memories,
        "total": result.total or 0,
    })


async def memory_update(arguments: Any, context: ToolContext) -> ToolResult:
    """Change only the supplied fields; ``updated_at`` is always refreshed."""
    args = _parse(MemoryUpdateInput, arguments)
    values: dict[str, Any] = {"updated_at": utc_now()}
    for field in ("content", "type", "tags", "importance"):
        value = getattr(args, field)
        if value is not None:
            values[field] = value

    where = RecordFilter(eq={"user_id": args.user_id, "id": args.id})
    try:
        store = context.store.get()
        updated = await store.update(context.store.table, values, where)
        memories = _outputs(updated[:1])
    except StorageError as exc:
        return _storage_failure(exc, "update memory")

    if not memories:
        return ToolResult.failure("Memory not found or not owned by user")

    memory = memories[0]
    return ToolResult.from_payload({"memory": memory, "updated": True})


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

_USER_ID = {"type": "string", "description": "Unique identifier for the user"}
_TYPE_ENUM = list(MEMORY_TYPES)

MEMORY_TOOLS: list[Tool] = [
    Tool(
        ToolDefinition(
            name="memory_save",
            description=(
                "Save a memory item (fact, preference, note, task, or profile info) for a "
                "user. Use this when the user explicitly asks to remember something or "
                "expresses stable preferences."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "userId": _USER_ID,
                    "content": {
                        "type": "string",
                        "description": (
                            "The memory content to save (concise summary, not raw conversation)"
                        ),
                        "maxLength": MAX_CONTENT_LENGTH,
                    },
                    "type": {
                        "type": "string",
                        "enum": _TYPE_ENUM,
                        "description": 'Category of memory. Defaults to "note".',
                    },
                    "tags": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Optional tags for categorization and search",
                    },
                    "importance": {
                        "type": "integer",
                        "description": "Importance level from -10 to 10. Defaults to 0.",
                        "minimum": -10,
                        "maximum": 10,
                    },
                    "sessionId": {
                        "type": "string",
                        "description": "Optional session identifier for grouping related memories",
                    },
                },
                "required": ["userId", "content"],
            },
        ),
        memory_save,
    ),
    Tool(
        ToolDefinition(
            name="memory_search",
            description=(
                "Search for relevant memories for a user. Call this before answering to "
                "retrieve context from previous interactions."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "userId": _USER_ID,
                    "query": {
                        "type": "string",
                        "description": "Search query to find relevant memories",
                        "maxLength": MAX_QUERY_LENGTH,
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of results to return. Defaults to 10.",
                        "minimum": 1,
                        "maximum": 100,
                    },
                    "type": {
                        "type": "string",
                        "enum": _TYPE_ENUM,
                        "description": "Filter by memory type",
                    },
                    "sessionId": {"type": "string", "description": "Filter by session identifier"},
                },
                "required": ["userId", "query"],
            },
        ),
        memory_search,
    ),
    Tool(
        ToolDefinition(
            name="memory_forget",
            description=(
                "Delete one or more memories for a user. Use when the user asks to forget "
                "something."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "userId": _USER_ID,
                    "id": {"type": "string", "description": "Specific memory ID to delete"},
                    "contentMatch": {
                        "type": "string",
                        "description": (
                            "Delete memories where content contains this text (case-insensitive)"
                        ),
                    },
                },
                "required": ["userId"],
            },
        ),
        memory_forget,
    ),
    Tool(
        ToolDefinition(
            name="memory_list",
            description=(
                "List all memories for a user with optional filtering. Useful for "
                "inspection and debugging."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "userId": _USER_ID,
                    "type": {
                        "type": "string",
                        "enum": _TYPE_ENUM,
                        "description": "Filter by memory type",
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Maximum number of results. Defaults to 20.",
                        "minimum": 1,
                        "maximum": 100,
                    },
                    "offset": {
                        "type": "integer",
                        "description": "Number of results to skip for pagination. Defaults to 0.",
                        "minimum": 0,
                    },
                },
                "required": ["userId"],
            },
        ),
        memory_list,
    ),
    Tool(
        ToolDefinition(
            name="memory_update",
            description=(
                "Update an existing memory record. Only provided fields will be updated."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "userId": _USER_ID,
                    "id": {"type": "string", "description": "ID of the memory to update"},
                    "content": {
                        "type": "string",
                        "description": "New content for the memory",
                        "maxLength": MAX_CONTENT_LENGTH,
                    },
                    "type": {
                        "type": "string",
                        "enum": _TYPE_ENUM,
                        "description": "New type for the memory",
                    },
                    "tags": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "New tags for the memory",
                    },
                    "importance": {
                        "type": "integer",
                        "description": "New importance level from -10 to 10",
                        "minimum": -10,
                        "maximum": 10,
                    },
                },
                "required": ["userId", "id"],
            },
        ),
        memory_update,
    ),
]
