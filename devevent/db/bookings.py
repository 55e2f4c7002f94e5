"""Bookings repository module."""

from datetime import UTC, datetime
from typing import Any

from devevent.db.core import _get_connection


async def bookings_insert(event_id: int, email: str) -> dict[str, Any] | None:
    """Insert a booking if ``event_id`` names an existing event.

    The existence check and the insert are one statement. Returns None,
    having written nothing, when the event is missing.
    """
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        row = await (await conn.execute(
            """
            INSERT INTO bookings (event_id, email, created_at, updated_at)
            SELECT %s::bigint, %s::text, %s::timestamptz, %s::timestamptz
            WHERE EXISTS (SELECT 1 FROM events WHERE id = %s)
            RETURNING id, event_id, email, created_at, updated_at
            """,
            (event_id, email, now, now, event_id),
        )).fetchone()
    if not row:
        return None
    return {
        "id": row[0],
        "event_id": row[1],
        "email": row[2],
        "created_at": row[3].astimezone(UTC).isoformat(),
        "updated_at": row[4].astimezone(UTC).isoformat(),
    }


async def bookings_count_for_event(event_id: int) -> int:
    async with _get_connection() as conn:
        row = await (await conn.execute(
            "SELECT COUNT(*) FROM bookings WHERE event_id = %s", (event_id,)
        )).fetchone()
    return int(row[0]) if row else 0
