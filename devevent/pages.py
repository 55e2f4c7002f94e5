"""Server-to-server client for page data.

A rendering layer builds its pages from the public API at ``BASE_URL``.
It must tell "this event does not exist" (render a not-found view) apart
from every other failure (render an error), so the two raise different
exceptions here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from devevent.config import get_settings

logger = logging.getLogger(__name__)


class PageFetchError(Exception):
    """Page data could not be loaded."""

    def __init__(self, path: str, status_code: int | None = None, reason: str | None = None) -> None:
        self.path = path
        self.status_code = status_code
        if reason is None:
            reason = f"status {status_code}" if status_code is not None else "transport error"
        super().__init__(f"Failed to fetch {path}: {reason}")


class PageNotFoundError(PageFetchError):
    """The requested page's resource does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(path, 404)


@dataclass
class EventPage:
    event: dict[str, Any]
    similar_events: list[dict[str, Any]] = field(default_factory=list)
    booking_count: int = 0


class EventPagesClient:
    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @classmethod
    def from_settings(cls) -> "EventPagesClient":
        return cls(get_settings().site.base_url)

    async def _get_json(self, path: str) -> dict[str, Any]:
        try:
            r = await self._client.get(path)
        except httpx.HTTPError as e:
            logger.warning("Page data fetch failed path=%s err=%r", path, e)
            raise PageFetchError(path) from e
        if r.status_code == 404:
            raise PageNotFoundError(path)
        if not r.is_success:
            raise PageFetchError(path, r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            logger.warning("Page data is not JSON path=%s", path)
            raise PageFetchError(path, r.status_code, "malformed response") from e
        if not isinstance(data, dict):
            raise PageFetchError(path, r.status_code, "malformed response")
        return data

    async def _get_field(self, path: str, key: str) -> Any:
        data = await self._get_json(path)
        if key not in data:
            logger.warning("Page data missing %r path=%s", key, path)
            raise PageFetchError(path, reason=f"missing {key!r}")
        return data[key]

    async def home(self) -> list[dict[str, Any]]:
        """Events for the landing page, newest first."""
        return await self._get_field("/events", "events")

    async def event_page(self, slug: str) -> EventPage:
        """Everything the event detail page shows.

        Raises:
            PageNotFoundError: No event has ``slug``.
            PageFetchError: Any other failure.
        """
        base = f"/events/{quote(slug, safe='')}"
        event = await self._get_field(base, "event")
        similar = await self._get_field(f"{base}/similar", "events")
        count = await self._get_field(f"{base}/bookings/count", "count")
        return EventPage(event=event, similar_events=similar, booking_count=count)

    async def aclose(self) -> None:
        await self._client.aclose()
