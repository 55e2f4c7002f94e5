import logging

from fastapi import APIRouter

from devevent import catalog
from devevent.errors import store_errors
from devevent.models.bookings import BookingRequest, BookingResponse

logger = logging.getLogger("devevent.bookings")
router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", status_code=201, response_model=BookingResponse)
async def create_booking(req: BookingRequest) -> BookingResponse:
    logger.info("POST /bookings event_id=%s", req.event_id)
    with store_errors("create booking"):
        booking = await catalog.create_booking(req.event_id, req.email)
    return BookingResponse(message="Booking created successfully", booking=booking)
