"""Events repository module."""

from datetime import UTC, datetime
from typing import Any

from psycopg.types.json import Jsonb

from devevent.db.core import _get_connection

EVENT_COLUMNS = (
    "id",
    "title",
    "slug",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "agenda",
    "organizer",
    "tags",
    "created_at",
    "updated_at",
)

_SELECT = f"SELECT {', '.join(EVENT_COLUMNS)} FROM events"

_JSON_COLUMNS = ("agenda", "tags")


def _row_to_event(row: tuple) -> dict[str, Any]:
    event = dict(zip(EVENT_COLUMNS, row))
    event["created_at"] = event["created_at"].astimezone(UTC).isoformat()
    event["updated_at"] = event["updated_at"].astimezone(UTC).isoformat()
    return event


def _dump(column: str, value: Any) -> Any:
    return Jsonb(value) if column in _JSON_COLUMNS else value


async def events_insert(record: dict[str, Any]) -> dict[str, Any]:
    """Insert a normalized event.

    Raises ``psycopg.errors.UniqueViolation`` when the slug is taken.
    """
    now = datetime.now(UTC)
    columns = [c for c in EVENT_COLUMNS if c not in ("id", "created_at", "updated_at")]
    values = [_dump(c, record[c]) for c in columns]
    placeholders = ", ".join(["%s"] * (len(columns) + 2))

    async with _get_connection() as conn:
        row = await (await conn.execute(
            f"""
            INSERT INTO events ({', '.join(columns)}, created_at, updated_at)
            VALUES ({placeholders})
            RETURNING {', '.join(EVENT_COLUMNS)}
            """,
            (*values, now, now),
        )).fetchone()
    return _row_to_event(row)


async def events_get_by_slug(slug: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (await conn.execute(f"{_SELECT} WHERE slug = %s", (slug,))).fetchone()
    return _row_to_event(row) if row else None


async def events_get_by_id(event_id: int) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (await conn.execute(f"{_SELECT} WHERE id = %s", (event_id,))).fetchone()
    return _row_to_event(row) if row else None


async def events_slug_exists(slug: str) -> bool:
    async with _get_connection() as conn:
        row = await (await conn.execute(
            "SELECT 1 FROM events WHERE slug = %s", (slug,)
        )).fetchone()
    return row is not None


async def events_fetch_all() -> list[dict[str, Any]]:
    """Return every event, newest first."""
    async with _get_connection() as conn:
        rows = await conn.execute(f"{_SELECT} ORDER BY created_at DESC, id DESC")
        return [_row_to_event(row) async for row in rows]


async def events_fetch_similar(slug: str, tags: list[str], limit: int) -> list[dict[str, Any]]:
    """Return other events sharing at least one of ``tags``, newest first."""
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"{_SELECT} WHERE slug <> %s AND tags ?| %s ORDER BY created_at DESC, id DESC LIMIT %s",
            (slug, list(tags), limit),
        )
        return [_row_to_event(row) async for row in rows]


async def events_update(slug: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    """Apply normalized ``changes`` to the event with ``slug``.

    The slug column is never written here.
    """
    columns = [c for c in changes if c in EVENT_COLUMNS and c not in ("id", "slug", "created_at", "updated_at")]
    assignments = ", ".join(f"{c} = %s" for c in columns + ["updated_at"])
    params = [_dump(c, changes[c]) for c in columns]
    params.extend([datetime.now(UTC), slug])

    async with _get_connection() as conn:
        row = await (await conn.execute(
            f"UPDATE events SET {assignments} WHERE slug = %s RETURNING {', '.join(EVENT_COLUMNS)}",
            tuple(params),
        )).fetchone()
    return _row_to_event(row) if row else None
