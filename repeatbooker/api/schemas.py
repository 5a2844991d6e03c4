"""
Request and response bodies of the HTTP interface.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.models import Booking, parse_date, parse_time

MISSING_PARAMETERS = "Missing required parameters."


class InitialBookingPayload(BaseModel):
    """The first occurrence, already stored by the caller."""
    model_config = ConfigDict(extra="ignore")

    room_id: str
    title: str = ""
    date: str
    start_time: str
    end_time: str
    remarks: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("room_id", mode="before")
    @classmethod
    def coerce_room_id(cls, value):
        """Room ids may arrive as numbers from older clients."""
        return str(value) if isinstance(value, int) else value


class GenerateRepeatedBookingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    initial_booking: Optional[InitialBookingPayload] = Field(default=None, alias="initialBooking")
    repeat_type: Optional[str] = Field(default=None, alias="repeatType")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    user_id: Optional[str] = Field(default=None, alias="userId")

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or empty."""
        missing = []
        if self.initial_booking is None:
            missing.append("initialBooking")
        if not self.repeat_type:
            missing.append("repeatType")
        if not self.user_id:
            missing.append("userId")
        return missing

    def to_template(self) -> Booking:
        """
        Convert the initial booking into a domain Booking.

        Raises:
            ValueError: If a date or time is malformed or start is not before end
        """
        payload = self.initial_booking
        return Booking(
            room_id=payload.room_id,
            user_id=payload.user_id or self.user_id,
            title=payload.title,
            date=parse_date(payload.date),
            start_time=parse_time(payload.start_time),
            end_time=parse_time(payload.end_time),
            remarks=payload.remarks,
        )


class GenerateRepeatedBookingsResponse(BaseModel):
    message: str
    count: int


class ErrorResponse(BaseModel):
    error: str
