"""Admin booking management router: listing, lifecycle, refunds and reports."""

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import PageParams, admin_only, get_db
from stayhub.models.user import User
from stayhub.schemas.booking import (
    AdminCancelRequest,
    AssignRequest,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    NotesRequest,
    PriorityUpdate,
    RefundRequest,
    StatusUpdate,
)
from stayhub.schemas.common import Pagination
from stayhub.services import analytics_service, booking_service, exports
from stayhub.services.periods import DEFAULT_PERIOD

router = APIRouter(prefix="/api/admin/bookings", tags=["admin: bookings"])


def _booking(message: str, booking) -> BookingEnvelope:
    return BookingEnvelope(message=message, booking=BookingResponse.model_validate(booking))


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    pages: PageParams = Depends(),
    status: str | None = Query(None),
    hotel_id: uuid.UUID | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    priority: str | None = Query(None),
    assigned_to: uuid.UUID | None = Query(None),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingListResponse:
    bookings, total = await booking_service.list_bookings(
        db,
        pages.page,
        pages.limit,
        status=status,
        hotel_id=hotel_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        priority=priority,
        assigned_to=assigned_to,
        search=search,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        pagination=Pagination.build(pages.page, pages.limit, total),
    )


@router.get("/stats")
async def booking_stats(
    period: str = Query(DEFAULT_PERIOD),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.booking_stats(db, period)


@router.get("/revenue")
async def revenue_trends(
    period: str = Query(DEFAULT_PERIOD),
    group_by: str = Query("day", pattern="^(hour|day|week|month)$"),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.revenue_trends(db, period, group_by)


@router.get("/performance")
async def admin_performance(
    period: str = Query(DEFAULT_PERIOD),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.admin_performance(db, period)


@router.get("/export")
async def export_bookings(
    format: str = Query("json", pattern="^(json|csv)$"),
    status: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    bookings, _total = await booking_service.list_bookings(
        db, page=1, limit=10_000, status=status, start_date=start_date, end_date=end_date
    )
    if format == "csv":
        return exports.csv_response([exports.booking_row(b) for b in bookings], "bookings", exports.BOOKING_COLUMNS)
    return exports.json_export(
        "Bookings exported successfully", "bookings", [BookingResponse.model_validate(b) for b in bookings]
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    return await booking_service.get_booking(db, booking_id)


@router.put("/{booking_id}/status", response_model=BookingEnvelope)
async def update_status(
    booking_id: uuid.UUID,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.update_status(db, booking_id, body.status, admin, body.notes, body.reason)
    return _booking("Booking status updated successfully", booking)


@router.put("/{booking_id}/assign", response_model=BookingEnvelope)
async def assign_booking(
    booking_id: uuid.UUID,
    body: AssignRequest,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.assign_booking(db, booking_id, body.assigned_to)
    return _booking("Booking assigned successfully", booking)


@router.put("/{booking_id}/priority", response_model=BookingEnvelope)
async def set_priority(
    booking_id: uuid.UUID,
    body: PriorityUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.set_priority(db, booking_id, body.priority)
    return _booking("Booking priority updated successfully", booking)


@router.put("/{booking_id}/cancel", response_model=BookingEnvelope)
async def cancel_booking(
    booking_id: uuid.UUID,
    body: AdminCancelRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.admin_cancel(db, booking_id, admin, body)
    return _booking("Booking cancelled successfully", booking)


@router.put("/{booking_id}/refund", response_model=BookingEnvelope)
async def process_refund(
    booking_id: uuid.UUID,
    body: RefundRequest,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.process_refund(db, booking_id, body)
    return _booking("Refund processed successfully", booking)


@router.post("/{booking_id}/notes", response_model=BookingEnvelope)
async def add_notes(
    booking_id: uuid.UUID,
    body: NotesRequest,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BookingEnvelope:
    booking = await booking_service.add_notes(db, booking_id, body.notes)
    return _booking("Notes added successfully", booking)
