import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from starlette.datastructures import FormData, UploadFile

from devevent import catalog
from devevent.dependencies import AppSettings, get_image_uploader
from devevent.errors import BadRequestError, EventNotFoundError, store_errors
from devevent.images import ImageFile, check_image
from devevent.models.events import (
    BookingCountResponse,
    EventsListResponse,
    EventUpdateRequest,
    SimilarEventsResponse,
    SingleEventResponse,
)
from devevent.normalize import TEXT_FIELDS, normalize_slug, prepare_event_fields

logger = logging.getLogger("devevent.events")
router = APIRouter(prefix="/events", tags=["events"])

FORM_TEXT_FIELDS = TEXT_FIELDS + ("date", "time", "mode")


def _parse_list_fields(form: FormData) -> dict[str, Any]:
    parsed: dict[str, Any] = {}
    for name in ("tags", "agenda"):
        raw = form.get(name)
        try:
            if not isinstance(raw, str):
                raise ValueError(name)
            parsed[name] = json.loads(raw)
            if not isinstance(parsed[name], list):
                raise ValueError(name)
        except ValueError:
            raise BadRequestError(detail="Invalid tags or agenda format") from None
    return parsed


async def _read_image(form: FormData, max_bytes: int) -> ImageFile | None:
    upload = form.get("image")
    if not isinstance(upload, UploadFile):
        return None
    # One byte past the limit is enough to tell an oversized file apart.
    data = await upload.read(max_bytes + 1)
    return ImageFile(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        data=data,
    )


@router.get("", response_model=EventsListResponse)
async def list_events() -> EventsListResponse:
    with store_errors("fetch events"):
        events = await catalog.list_events()
    return EventsListResponse(message="Events fetched successfully", events=events)


@router.post("", status_code=201, response_model=SingleEventResponse)
async def create_event(request: Request, settings: AppSettings) -> SingleEventResponse:
    form = await request.form()
    limits = settings.upload

    image = await _read_image(form, limits.max_bytes)
    if image is None:
        raise BadRequestError(detail="Image file is required")
    # Image presence is checked before upload configuration.
    uploader = get_image_uploader()
    fields: dict[str, Any] = {name: form.get(name) for name in FORM_TEXT_FIELDS}
    fields.update(_parse_list_fields(form))
    check_image(image, limits)

    # Nothing is uploaded until every field has passed.
    record = prepare_event_fields(fields)
    logger.info("POST /events title=%s slug=%s image=%d bytes", record["title"], record["slug"], image.size)
    with store_errors("create event"):
        await catalog.ensure_slug_available(record["slug"])

    image_url = await uploader.upload(image, settings.cloudinary.folder)

    with store_errors("create event"):
        event = await catalog.create_event({**fields, "image": image_url})
    return SingleEventResponse(message="Event created successfully", event=event)


@router.get("/{slug}", response_model=SingleEventResponse)
async def get_event(slug: str) -> SingleEventResponse:
    slug = normalize_slug(slug)
    with store_errors("fetch event"):
        event = await catalog.get_event_by_slug(slug)
    if event is None:
        logger.info("Event not found: %s", slug)
        raise EventNotFoundError(slug)
    return SingleEventResponse(message="Event fetched successfully", event=event)


@router.patch("/{slug}", response_model=SingleEventResponse)
async def update_event(slug: str, req: EventUpdateRequest) -> SingleEventResponse:
    with store_errors("update event"):
        event = await catalog.update_event(slug, req.model_dump(exclude_unset=True))
    return SingleEventResponse(message="Event updated successfully", event=event)


@router.get("/{slug}/similar", response_model=SimilarEventsResponse)
async def get_similar_events(slug: str) -> SimilarEventsResponse:
    slug = normalize_slug(slug)
    with store_errors("fetch similar events"):
        events = await catalog.similar_events(slug)
    return SimilarEventsResponse(slug=slug, events=events)


@router.get("/{slug}/bookings/count", response_model=BookingCountResponse)
async def get_booking_count(slug: str) -> BookingCountResponse:
    slug = normalize_slug(slug)
    with store_errors("count bookings"):
        event = await catalog.get_event_by_slug(slug)
        if event is None:
            raise EventNotFoundError(slug)
        count = await catalog.count_bookings(event["id"])
    return BookingCountResponse(event_id=event["id"], count=count)
