"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from stayhub.models.booking import (
    BOOKING_PRIORITIES,
    BOOKING_SOURCES,
    BOOKING_STATUSES,
    PAYMENT_METHODS,
    REFUND_STATUSES,
)
from stayhub.schemas.common import Pagination
from stayhub.schemas.hotel import AmenityList, ImageList


def _choice(values: tuple[str, ...]) -> str:
    return "^(" + "|".join(values) + ")$"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class GuestInfo(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr | None = None
    phone: str | None = None
    special_requests: str | None = None
    dietary_restrictions: list[str] = []


class BookingCreate(BaseModel):
    """Schema for creating a booking.

    The date range is checked by the booking service, not here, so an
    inverted range is reported as a booking error rather than a field error.
    """

    hotel_id: uuid.UUID
    room_id: uuid.UUID
    start_date: date
    end_date: date
    guest_count: int = Field(1, ge=1)
    guest_info: list[GuestInfo] = []
    taxes: Decimal = Field(Decimal("0"), ge=0)
    fees: Decimal = Field(Decimal("0"), ge=0)
    discount: Decimal = Field(Decimal("0"), ge=0)
    special_requests: str | None = None
    check_in_time: str | None = Field(None, max_length=20)
    check_out_time: str | None = Field(None, max_length=20)
    source: str = Field("website", pattern=_choice(BOOKING_SOURCES))
    payment_method: str | None = Field(None, pattern=_choice(PAYMENT_METHODS))


class StatusUpdate(BaseModel):
    status: str = Field(..., pattern=_choice(BOOKING_STATUSES))
    notes: str | None = None
    reason: str | None = None


class AdminCancelRequest(BaseModel):
    reason: str | None = None
    refund_amount: Decimal | None = Field(None, ge=0)
    refund_status: str = Field("pending", pattern=_choice(REFUND_STATUSES))


class RefundRequest(BaseModel):
    refund_status: str = Field(..., pattern=_choice(REFUND_STATUSES))
    refund_amount: Decimal | None = Field(None, ge=0)
    notes: str | None = None


class AssignRequest(BaseModel):
    assigned_to: uuid.UUID


class PriorityUpdate(BaseModel):
    priority: str = Field(..., pattern=_choice(BOOKING_PRIORITIES))


class NotesRequest(BaseModel):
    notes: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingUserSummary(BaseModel):
    id: uuid.UUID
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class BookingHotelSummary(BaseModel):
    id: uuid.UUID
    name: str
    location: str
    images: ImageList = []

    model_config = ConfigDict(from_attributes=True)


class BookingRoomSummary(BaseModel):
    id: uuid.UUID
    type: str
    name: str | None = None
    room_number: str | None = None
    price: Decimal
    amenities: AmenityList = []

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """A booking with summaries of its user, hotel and room."""

    id: uuid.UUID
    user_id: uuid.UUID
    hotel_id: uuid.UUID
    room_id: uuid.UUID
    start_date: date
    end_date: date
    check_in_time: str | None = None
    check_out_time: str | None = None
    status: str
    guest_count: int
    guest_info: list[dict[str, Any]] = []
    base_price: Decimal
    taxes: Decimal
    fees: Decimal
    discount: Decimal
    total_amount: Decimal
    payment: dict[str, Any] | None = None
    cancellation: dict[str, Any] | None = None
    source: str
    special_requests: str | None = None
    notes: str | None = None
    assigned_to_id: uuid.UUID | None = None
    priority: str
    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    checked_out_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    user: BookingUserSummary | None = None
    hotel: BookingHotelSummary | None = None
    room: BookingRoomSummary | None = None
    assigned_to: BookingUserSummary | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingEnvelope(BaseModel):
    """A single booking plus a human-readable outcome message."""

    message: str
    booking: BookingResponse


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    bookings: list[BookingResponse]
    pagination: Pagination
