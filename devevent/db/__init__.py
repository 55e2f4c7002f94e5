from devevent.db.bookings import bookings_count_for_event, bookings_insert
from devevent.db.core import close_pool, get_pool, get_pool_stats, init_pool
from devevent.db.events import (
    events_fetch_all,
    events_fetch_similar,
    events_get_by_id,
    events_get_by_slug,
    events_insert,
    events_slug_exists,
    events_update,
)

__all__ = [
    "bookings_count_for_event",
    "bookings_insert",
    "close_pool",
    "events_fetch_all",
    "events_fetch_similar",
    "events_get_by_id",
    "events_get_by_slug",
    "events_insert",
    "events_slug_exists",
    "events_update",
    "get_pool",
    "get_pool_stats",
    "init_pool",
]
