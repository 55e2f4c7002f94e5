"""Validation and canonicalization of raw event and booking input.

Everything here is synchronous and side-effect free. Each check raises
``InvalidFieldError`` naming the offending field; callers run these before
touching the store so a failed check never leaves a partial write behind.
"""

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from devevent.errors import InvalidFieldError

MODES = ("online", "offline", "hybrid")

TEXT_FIELDS = (
    "title",
    "description",
    "overview",
    "venue",
    "location",
    "audience",
    "organizer",
)

_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_SLUG_SPACE_RE = re.compile(r"\s+")
_SLUG_DASH_RE = re.compile(r"-+")
SLUG_RE = re.compile(r"[a-z0-9]+(?:-[a-z0-9]+)*")

_TIME_24_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})")
_TIME_12_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})\s*(AM|PM)", re.IGNORECASE)

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.\S+")

_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)


def derive_slug(title: str) -> str:
    """Return the URL-safe slug for ``title``.

    Lowercases, drops everything except ASCII letters, digits, whitespace
    and hyphens, turns whitespace runs into single hyphens and trims
    hyphens from both ends.
    """
    slug = _SLUG_STRIP_RE.sub("", title.lower().strip())
    slug = _SLUG_SPACE_RE.sub("-", slug)
    slug = _SLUG_DASH_RE.sub("-", slug)
    return slug.strip("-")


def normalize_date(value: str) -> str:
    """Parse a calendar date and return it as ``YYYY-MM-DD``."""
    raw = value.strip()
    if raw:
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(UTC)
            return parsed.date().isoformat()
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(raw, fmt).date().isoformat()
            except ValueError:
                continue
    raise InvalidFieldError("date", f"Invalid date format: {value}")


def normalize_time(value: str) -> str:
    """Return ``value`` as 24-hour ``HH:MM``.

    Accepts ``H:MM``/``HH:MM`` and ``H:MM AM``/``HH:MM PM``.
    """
    raw = value.strip()

    match = _TIME_24_RE.fullmatch(raw)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if not (0 <= hours <= 23 and 0 <= minutes <= 59):
            raise InvalidFieldError("time", f"Invalid time format: {value}")
        return f"{hours:02d}:{minutes:02d}"

    match = _TIME_12_RE.fullmatch(raw)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        period = match.group(3).upper()
        if not (1 <= hours <= 12 and 0 <= minutes <= 59):
            raise InvalidFieldError("time", f"Invalid time format: {value}")
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0
        return f"{hours:02d}:{minutes:02d}"

    raise InvalidFieldError(
        "time", f"Invalid time format: {value}. Expected HH:MM or HH:MM AM/PM"
    )


def validate_email(value: str) -> bool:
    # local@domain.tld, no whitespace anywhere.
    return EMAIL_RE.fullmatch(value) is not None


def normalize_email(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidFieldError("email", "Email is required")
    email = value.strip().lower()
    if not email:
        raise InvalidFieldError("email", "Email is required")
    if not validate_email(email):
        raise InvalidFieldError("email", "Invalid email format")
    return email


def normalize_slug(value: Any) -> str:
    """Canonicalize a slug taken from a URL or query."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidFieldError("slug", "Invalid or missing slug parameter")
    slug = value.strip().lower()
    if not SLUG_RE.fullmatch(slug):
        raise InvalidFieldError("slug", f"Invalid slug: {slug}")
    return slug


def require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidFieldError(field, f"Event {field} is required")
    return value.strip()


def normalize_mode(value: Any) -> str:
    mode = require_text("mode", value).lower()
    if mode not in MODES:
        raise InvalidFieldError("mode", "Mode must be either online, offline, or hybrid")
    return mode


def require_list(field: str, values: Any, *, unique: bool = False) -> list[str]:
    """Return the non-blank string items of ``values``, in order.

    With ``unique`` set, later duplicates are dropped.
    """
    if not isinstance(values, (list, tuple)):
        raise InvalidFieldError(field, f"Event {field} must be a list of strings")
    items: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise InvalidFieldError(field, f"Event {field} must be a list of strings")
        item = item.strip()
        if not item or (unique and item in items):
            continue
        items.append(item)
    if not items:
        raise InvalidFieldError(field, f"Event {field} must contain at least one item")
    return items


def prepare_event_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate every event field except ``image``.

    Returns the canonical record, including the derived ``slug``. Used on
    its own to reject a bad form before an image is uploaded.
    """
    record: dict[str, Any] = {name: require_text(name, fields.get(name)) for name in TEXT_FIELDS}
    record["date"] = normalize_date(require_text("date", fields.get("date")))
    record["time"] = normalize_time(require_text("time", fields.get("time")))
    record["mode"] = normalize_mode(fields.get("mode"))
    record["agenda"] = require_list("agenda", fields.get("agenda"))
    record["tags"] = require_list("tags", fields.get("tags"), unique=True)

    slug = derive_slug(record["title"])
    if not slug:
        raise InvalidFieldError("title", "Event title must contain at least one letter or digit")
    record["slug"] = slug
    return record


def prepare_event(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a complete event, image URL included."""
    record = prepare_event_fields(fields)
    record["image"] = require_text("image", fields.get("image"))
    return record


def prepare_event_update(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a partial event update.

    Only the keys present are checked. The slug is fixed at creation, so
    it cannot be set here and a new title does not change it.
    """
    if "slug" in fields:
        raise InvalidFieldError("slug", "Event slug is immutable")

    changes: dict[str, Any] = {}
    for name, value in fields.items():
        if name in TEXT_FIELDS or name == "image":
            changes[name] = require_text(name, value)
        elif name == "date":
            changes[name] = normalize_date(require_text(name, value))
        elif name == "time":
            changes[name] = normalize_time(require_text(name, value))
        elif name == "mode":
            changes[name] = normalize_mode(value)
        elif name == "agenda":
            changes[name] = require_list(name, value)
        elif name == "tags":
            changes[name] = require_list(name, value, unique=True)
        else:
            raise InvalidFieldError(name, f"Unknown event field: {name}")

    if not changes:
        raise InvalidFieldError("event", "No fields to update")
    return changes
