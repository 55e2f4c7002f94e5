from pydantic import BaseModel, ConfigDict, StrictInt
from pydantic.alias_generators import to_camel


class Booking(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    event_id: int
    email: str
    created_at: str
    updated_at: str


class BookingRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: StrictInt
    email: str


class BookingResponse(BaseModel):
    message: str
    booking: Booking
