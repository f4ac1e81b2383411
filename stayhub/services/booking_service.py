"""Booking lifecycle service.

Creation locks the room row before checking for overlaps, status changes go
through the transition table in ``booking_lifecycle``, and the hotel/room
booking counters move only when a booking is created.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.database import utcnow
from stayhub.exceptions import InvalidRange, NotFound, RoomUnavailable, ValidationFailed
from stayhub.models.booking import Booking
from stayhub.models.hotel import Hotel, Room
from stayhub.models.user import User
from stayhub.schemas.booking import AdminCancelRequest, BookingCreate, RefundRequest
from stayhub.services.booking_lifecycle import TRANSITION_TIMESTAMPS, ensure_transition
from stayhub.services.user_service import record_behavior

logger = logging.getLogger(__name__)

# Only bookings in these statuses block a room for overlapping dates.
ROOM_HOLDING_STATUSES = ("completed",)


def _money_json(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


async def _reload(db: AsyncSession, booking: Booking) -> Booking:
    await db.flush()
    await db.refresh(booking)
    return booking


async def get_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    return booking


async def find_overlapping(
    db: AsyncSession,
    room_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> Booking | None:
    """First room-holding booking whose [start, end) range meets the given one."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.room_id == room_id,
            Booking.status.in_(ROOM_HOLDING_STATUSES),
            Booking.start_date < end_date,
            Booking.end_date > start_date,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def increment_booking_counters(
    db: AsyncSession, user_id: uuid.UUID, hotel_id: uuid.UUID, room_id: uuid.UUID
) -> None:
    await db.execute(
        update(Hotel).where(Hotel.id == hotel_id).values(total_bookings=Hotel.total_bookings + 1)
    )
    await db.execute(
        update(Room).where(Room.id == room_id).values(total_bookings=Room.total_bookings + 1)
    )
    await db.execute(
        update(User).where(User.id == user_id).values(total_bookings=User.total_bookings + 1)
    )


async def create_booking(db: AsyncSession, user: User, body: BookingCreate) -> Booking:
    """Create a draft booking for one room over ``[start_date, end_date)``.

    Raises:
        InvalidRange: ``end_date`` is not after ``start_date``.
        NotFound: The hotel or room does not exist.
        RoomUnavailable: A room-holding booking overlaps the range.
    """
    if body.start_date >= body.end_date:
        raise InvalidRange()

    hotel = await db.get(Hotel, body.hotel_id)
    if hotel is None:
        raise NotFound("Hotel not found")

    # Serialises concurrent creations for the same room on PostgreSQL.
    room = (
        await db.execute(
            select(Room)
            .where(Room.id == body.room_id, Room.hotel_id == body.hotel_id)
            .with_for_update()
        )
    ).scalar_one_or_none()
    if room is None:
        raise NotFound("Room not found")

    if await find_overlapping(db, room.id, body.start_date, body.end_date) is not None:
        logger.warning("Room %s unavailable for %s..%s", room.id, body.start_date, body.end_date)
        raise RoomUnavailable()

    nights = (body.end_date - body.start_date).days
    base_price = Decimal(room.price) * nights
    booking = Booking(
        user_id=user.id,
        hotel_id=hotel.id,
        room_id=room.id,
        start_date=body.start_date,
        end_date=body.end_date,
        check_in_time=body.check_in_time,
        check_out_time=body.check_out_time,
        status="draft",
        guest_count=body.guest_count,
        guest_info=[guest.model_dump(mode="json") for guest in body.guest_info],
        base_price=base_price,
        taxes=body.taxes,
        fees=body.fees,
        discount=body.discount,
        special_requests=body.special_requests,
        source=body.source,
        priority="normal",
    )
    booking.total_amount = booking.compute_total()
    if body.payment_method is not None:
        booking.payment = {
            "method": body.payment_method,
            "amount": _money_json(booking.total_amount),
            "currency": "USD",
            "status": "pending",
        }
    db.add(booking)
    await db.flush()

    await increment_booking_counters(db, user.id, hotel.id, room.id)
    await record_behavior(
        db,
        user.id,
        "booked",
        hotel_id=hotel.id,
        room_id=room.id,
        metadata={"booking_id": str(booking.id), "nights": nights},
    )
    logger.info("Booking %s created for room %s by user %s", booking.id, room.id, user.id)
    return await _reload(db, booking)


def _cancellation(
    booking: Booking,
    actor_id: uuid.UUID,
    reason: str | None,
    refund_amount: Decimal | None = None,
    refund_status: str = "pending",
) -> dict[str, Any]:
    return {
        **(booking.cancellation or {}),
        "cancelled_at": utcnow().isoformat(),
        "cancelled_by": str(actor_id),
        "reason": reason,
        "refund_amount": _money_json(refund_amount if refund_amount is not None else booking.total_amount),
        "refund_status": refund_status,
    }


def _append_note(booking: Booking, note: str) -> None:
    stamped = f"[{utcnow().isoformat()}] {note.strip()}"
    booking.notes = f"{booking.notes}\n\n{stamped}" if booking.notes else stamped


async def update_status(
    db: AsyncSession,
    booking_id: uuid.UUID,
    new_status: str,
    actor: User,
    notes: str | None = None,
    reason: str | None = None,
) -> Booking:
    """Move a booking along its lifecycle on behalf of an admin."""
    booking = await get_booking(db, booking_id)
    old_status = booking.status
    ensure_transition(old_status, new_status)

    booking.status = new_status
    timestamp_field = TRANSITION_TIMESTAMPS.get(new_status)
    if timestamp_field is not None:
        setattr(booking, timestamp_field, utcnow())
    if new_status == "cancelled":
        booking.cancellation = _cancellation(booking, actor.id, reason or "Cancelled by admin")
    if notes and notes.strip():
        _append_note(booking, notes)

    await record_behavior(
        db,
        actor.id,
        "updated_booking_status",
        hotel_id=booking.hotel_id,
        room_id=booking.room_id,
        metadata={"old_status": old_status, "new_status": new_status, "booking_id": str(booking.id)},
    )
    logger.info("Booking %s: %s -> %s by %s", booking.id, old_status, new_status, actor.id)
    return await _reload(db, booking)


async def cancel_booking(db: AsyncSession, booking_id: uuid.UUID, user: User) -> Booking:
    """Self-service cancellation of one of the caller's own bookings.

    Allowed from any status other than ``cancelled``; the lifecycle table
    governs admin status changes only.
    """
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.user_id == user.id)
    )
    booking = result.scalar_one_or_none()
    if booking is None or booking.status == "cancelled":
        raise NotFound("Booking not found or already cancelled")

    booking.status = "cancelled"
    booking.cancellation = _cancellation(booking, user.id, "Cancelled by customer")
    await record_behavior(
        db,
        user.id,
        "cancelled",
        hotel_id=booking.hotel_id,
        room_id=booking.room_id,
        metadata={"booking_id": str(booking.id)},
    )
    logger.info("Booking %s cancelled by its owner %s", booking.id, user.id)
    return await _reload(db, booking)


async def admin_cancel(db: AsyncSession, booking_id: uuid.UUID, actor: User, body: AdminCancelRequest) -> Booking:
    booking = await get_booking(db, booking_id)
    if booking.status == "cancelled":
        raise ValidationFailed("Booking is already cancelled")
    ensure_transition(booking.status, "cancelled")

    booking.status = "cancelled"
    booking.cancellation = _cancellation(
        booking,
        actor.id,
        body.reason or "Cancelled by admin",
        refund_amount=body.refund_amount,
        refund_status=body.refund_status,
    )
    await record_behavior(
        db,
        actor.id,
        "cancelled_booking",
        hotel_id=booking.hotel_id,
        room_id=booking.room_id,
        metadata={
            "reason": body.reason,
            "refund_amount": _money_json(body.refund_amount),
            "booking_id": str(booking.id),
        },
    )
    logger.info("Booking %s cancelled by admin %s", booking.id, actor.id)
    return await _reload(db, booking)


async def process_refund(db: AsyncSession, booking_id: uuid.UUID, body: RefundRequest) -> Booking:
    """Update the refund state of a cancelled booking."""
    booking = await get_booking(db, booking_id)
    if booking.status != "cancelled":
        raise ValidationFailed("Only cancelled bookings can be refunded")

    cancellation = dict(booking.cancellation or {})
    cancellation["refund_status"] = body.refund_status
    cancellation["refunded_at"] = utcnow().isoformat() if body.refund_status == "completed" else None
    if body.refund_amount is not None:
        cancellation["refund_amount"] = _money_json(body.refund_amount)
    if body.notes:
        cancellation["refund_notes"] = body.notes
    booking.cancellation = cancellation

    if body.refund_status == "completed" and booking.payment:
        booking.payment = {**booking.payment, "status": "refunded", "refunded_at": cancellation["refunded_at"]}

    logger.info("Refund for booking %s set to %s", booking.id, body.refund_status)
    return await _reload(db, booking)


async def assign_booking(db: AsyncSession, booking_id: uuid.UUID, assignee_id: uuid.UUID) -> Booking:
    assignee = await db.get(User, assignee_id)
    if assignee is None or assignee.role != "admin":
        raise ValidationFailed("Invalid admin user")
    booking = await get_booking(db, booking_id)
    booking.assigned_to_id = assignee.id
    logger.info("Booking %s assigned to %s", booking.id, assignee.id)
    return await _reload(db, booking)


async def set_priority(db: AsyncSession, booking_id: uuid.UUID, priority: str) -> Booking:
    booking = await get_booking(db, booking_id)
    booking.priority = priority
    return await _reload(db, booking)


async def add_notes(db: AsyncSession, booking_id: uuid.UUID, notes: str) -> Booking:
    """Append a timestamped entry to the booking's notes log."""
    if not notes or not notes.strip():
        raise ValidationFailed("Notes cannot be empty")
    booking = await get_booking(db, booking_id)
    _append_note(booking, notes)
    return await _reload(db, booking)


async def list_user_bookings(db: AsyncSession, user_id: uuid.UUID) -> list[Booking]:
    result = await db.execute(
        select(Booking).where(Booking.user_id == user_id).order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


async def get_user_booking(db: AsyncSession, booking_id: uuid.UUID, user_id: uuid.UUID) -> Booking:
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.user_id == user_id)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def filtered_bookings_query(
    status: str | None = None,
    hotel_id: uuid.UUID | None = None,
    user_id: uuid.UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    priority: str | None = None,
    assigned_to: uuid.UUID | None = None,
    search: str | None = None,
):
    query = select(Booking)
    if status:
        query = query.where(Booking.status == status)
    if hotel_id is not None:
        query = query.where(Booking.hotel_id == hotel_id)
    if user_id is not None:
        query = query.where(Booking.user_id == user_id)
    if start_date is not None and end_date is not None:
        query = query.where(Booking.start_date >= start_date, Booking.start_date <= end_date)
    if priority:
        query = query.where(Booking.priority == priority)
    if assigned_to is not None:
        query = query.where(Booking.assigned_to_id == assigned_to)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                cast(Booking.guest_info, String).ilike(pattern),
                Booking.special_requests.ilike(pattern),
                Booking.notes.ilike(pattern),
            )
        )
    return query


async def list_bookings(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    **filters: Any,
) -> tuple[list[Booking], int]:
    """Admin booking list, newest first. Returns ``(bookings, total_count)``."""
    query = filtered_bookings_query(**filters)
    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Booking.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total
