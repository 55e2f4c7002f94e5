"""Event catalog operations.

Every write runs the checks in ``devevent.normalize`` first and only then
touches the store. Store failures surface as ``psycopg.Error`` and are
translated by the callers at the HTTP boundary.
"""

import logging
from collections.abc import Mapping
from typing import Any

from psycopg import errors as pg_errors

from devevent import db
from devevent.errors import DuplicateSlugError, EventNotFoundError, EventReferenceError, InvalidFieldError
from devevent.normalize import normalize_email, normalize_slug, prepare_event, prepare_event_update

logger = logging.getLogger(__name__)

SIMILAR_EVENTS_LIMIT = 3
# events.id is a BIGSERIAL
MAX_EVENT_ID = 2**63 - 1


async def ensure_slug_available(slug: str) -> None:
    if await db.events_slug_exists(slug):
        raise DuplicateSlugError(slug)


async def create_event(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate, normalize and store a new event.

    Raises:
        InvalidFieldError: A field is missing or malformed.
        DuplicateSlugError: Another event already derives the same slug.
    """
    record = prepare_event(fields)
    await ensure_slug_available(record["slug"])
    try:
        event = await db.events_insert(record)
    except pg_errors.UniqueViolation:
        # Lost a race with a concurrent writer on the unique slug index.
        raise DuplicateSlugError(record["slug"]) from None
    logger.info("Created event id=%s slug=%s", event["id"], event["slug"])
    return event


async def get_event_by_slug(slug: str) -> dict[str, Any] | None:
    """Return the event with ``slug`` or None when there is none."""
    return await db.events_get_by_slug(normalize_slug(slug))


async def get_event(event_id: int) -> dict[str, Any] | None:
    return await db.events_get_by_id(event_id)


async def list_events() -> list[dict[str, Any]]:
    return await db.events_fetch_all()


async def update_event(slug: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Apply a partial update; the slug stays what it was at creation."""
    slug = normalize_slug(slug)
    changes = prepare_event_update(fields)
    event = await db.events_update(slug, changes)
    if event is None:
        raise EventNotFoundError(slug)
    logger.info("Updated event slug=%s fields=%s", slug, sorted(changes))
    return event


async def similar_events(slug: str, limit: int = SIMILAR_EVENTS_LIMIT) -> list[dict[str, Any]]:
    """Return up to ``limit`` other events that share a tag with ``slug``."""
    event = await get_event_by_slug(slug)
    if event is None:
        raise EventNotFoundError(normalize_slug(slug))
    return await db.events_fetch_similar(event["slug"], event["tags"], limit)


async def count_bookings(event_id: int) -> int:
    return await db.bookings_count_for_event(event_id)


async def create_booking(event_id: int, email: Any) -> dict[str, Any]:
    """Book a spot on an existing event.

    Raises:
        InvalidFieldError: The email or event id is malformed.
        EventReferenceError: No event has ``event_id``; nothing is stored.
    """
    if isinstance(event_id, bool) or not isinstance(event_id, int) or not 1 <= event_id <= MAX_EVENT_ID:
        raise InvalidFieldError("eventId", "Event ID is required")
    email = normalize_email(email)
    booking = await db.bookings_insert(event_id, email)
    if booking is None:
        logger.warning("Booking rejected: event %s does not exist", event_id)
        raise EventReferenceError(event_id)
    logger.info("Created booking id=%s event_id=%s", booking["id"], event_id)
    return booking
