"""Bookings router.

Customers create, list and cancel their own bookings; status changes and the
full listing are admin-only.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import PageParams, admin_only, customer_or_admin, get_current_user, get_db
from stayhub.models.user import User
from stayhub.schemas.booking import (
    BookingCreate,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    StatusUpdate,
)
from stayhub.schemas.common import Pagination
from stayhub.services import booking_service

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(customer_or_admin),
) -> BookingEnvelope:
    """Reserve one room for ``[start_date, end_date)``; the booking starts as a draft."""
    booking = await booking_service.create_booking(db, current_user, body)
    return BookingEnvelope(message="Booking created successfully", booking=BookingResponse.model_validate(booking))


@router.get("/user", response_model=list[BookingResponse], summary="List my bookings")
async def my_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await booking_service.list_user_bookings(db, current_user.id)


@router.get("/user/{booking_id}", response_model=BookingResponse)
async def my_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await booking_service.get_user_booking(db, booking_id, current_user.id)


@router.put("/{booking_id}/cancel", response_model=BookingEnvelope, summary="Cancel my booking")
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingEnvelope:
    booking = await booking_service.cancel_booking(db, booking_id, current_user)
    return BookingEnvelope(message="Booking cancelled successfully", booking=BookingResponse.model_validate(booking))


@router.put("/{booking_id}/status", response_model=BookingEnvelope)
async def update_status(
    booking_id: uuid.UUID,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.update_status(db, booking_id, body.status, admin, body.notes, body.reason)
    return BookingEnvelope(message="Booking status updated successfully", booking=BookingResponse.model_validate(booking))


@router.get("/all", response_model=BookingListResponse)
async def all_bookings(
    pages: PageParams = Depends(),
    status_filter: str | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingListResponse:
    bookings, total = await booking_service.list_bookings(db, pages.page, pages.limit, status=status_filter)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        pagination=Pagination.build(pages.page, pages.limit, total),
    )
