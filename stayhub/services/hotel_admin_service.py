"""Privileged hotel and room management."""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.exceptions import ConflictError, NotFound, RoomHasBookings
from stayhub.models.analytics import HotelMetrics
from stayhub.models.hotel import Hotel, Room
from stayhub.models.user import User
from stayhub.schemas.hotel import BulkPriceUpdate, HotelCreate, HotelUpdate, RoomCreate, RoomUpdate
from stayhub.services.periods import resolve_period

logger = logging.getLogger(__name__)

# Embedded objects stored in JSON columns.
_JSON_FIELDS = {"contact", "business_hours", "seasonal_pricing"}


def _column_values(body: HotelCreate | HotelUpdate | RoomCreate | RoomUpdate, exclude: set[str] | None = None) -> dict[str, Any]:
    """Model fields ready for assignment to ORM columns.

    Embedded objects become JSON-safe dicts; money stays ``Decimal``.
    """
    exclude = exclude or set()
    values = body.model_dump(exclude_unset=True, exclude=exclude | _JSON_FIELDS)
    json_values = body.model_dump(mode="json", exclude_unset=True, include=_JSON_FIELDS - exclude, exclude_none=True)
    values.update(json_values)
    return values


async def get_hotel(db: AsyncSession, hotel_id: uuid.UUID) -> Hotel:
    hotel = await db.get(Hotel, hotel_id)
    if hotel is None:
        raise NotFound("Hotel not found")
    return hotel


def get_room(hotel: Hotel, room_id: uuid.UUID) -> Room:
    room = hotel.find_room(room_id)
    if room is None:
        raise NotFound("Room not found")
    return room


def _ensure_room_number_free(hotel: Hotel, room_number: str | None, exclude: Room | None = None) -> None:
    if not room_number:
        return
    if any(r.room_number == room_number and r is not exclude for r in hotel.rooms):
        raise ConflictError("Room number already exists in this hotel")


def _build_room(body: RoomCreate) -> Room:
    values = _column_values(body)
    values.setdefault("seasonal_pricing", [])
    if values.get("base_price") is None:
        values["base_price"] = body.price
    return Room(**values)


async def _reload(db: AsyncSession, hotel: Hotel) -> Hotel:
    await db.flush()
    await db.refresh(hotel)
    return hotel


async def create_hotel(db: AsyncSession, admin: User, body: HotelCreate) -> Hotel:
    """Create a hotel with any inline rooms and seed its first metrics snapshot."""
    values = _column_values(body, exclude={"rooms"})
    values.setdefault("contact", {})
    values.setdefault("business_hours", {})
    values.setdefault("seasonal_pricing", [])

    hotel = Hotel(**values, created_by_id=admin.id, last_updated_by_id=admin.id, rooms=[])
    for room_body in body.rooms:
        _ensure_room_number_free(hotel, room_body.room_number)
        hotel.rooms.append(_build_room(room_body))
    db.add(hotel)
    await db.flush()

    db.add(HotelMetrics(hotel_id=hotel.id, total_rooms=len(hotel.rooms)))
    logger.info("Hotel %s (%s) created by %s", hotel.id, hotel.name, admin.id)
    return await _reload(db, hotel)


async def list_hotels(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    search: str | None = None,
    is_active: bool | None = None,
    featured: bool | None = None,
    verified: bool | None = None,
) -> tuple[list[Hotel], int]:
    """All hotels, inactive ones included, newest first."""
    query = select(Hotel)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(Hotel.name.ilike(pattern), Hotel.location.ilike(pattern), Hotel.description.ilike(pattern))
        )
    if is_active is not None:
        query = query.where(Hotel.is_active.is_(is_active))
    if featured is not None:
        query = query.where(Hotel.featured.is_(featured))
    if verified is not None:
        query = query.where(Hotel.verified.is_(verified))

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(
        query.order_by(Hotel.created_at.desc(), Hotel.id).offset((page - 1) * limit).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_hotel(db: AsyncSession, hotel_id: uuid.UUID, admin: User, body: HotelUpdate) -> Hotel:
    hotel = await get_hotel(db, hotel_id)
    for field, value in _column_values(body).items():
        setattr(hotel, field, value)
    hotel.last_updated_by_id = admin.id
    logger.info("Hotel %s updated by %s", hotel.id, admin.id)
    return await _reload(db, hotel)


async def set_hotel_flag(db: AsyncSession, hotel_id: uuid.UUID, flag: str, value: bool, admin: User | None = None) -> Hotel:
    """Set one of ``is_active``, ``featured`` or ``verified``."""
    if flag not in ("is_active", "featured", "verified"):
        raise ValueError(f"Unknown hotel flag: {flag}")
    hotel = await get_hotel(db, hotel_id)
    setattr(hotel, flag, value)
    if admin is not None:
        hotel.last_updated_by_id = admin.id
    logger.info("Hotel %s %s=%s", hotel.id, flag, value)
    return await _reload(db, hotel)


async def deactivate_hotel(db: AsyncSession, hotel_id: uuid.UUID, admin: User) -> Hotel:
    return await set_hotel_flag(db, hotel_id, "is_active", False, admin)


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


async def add_room(db: AsyncSession, hotel_id: uuid.UUID, body: RoomCreate) -> Room:
    hotel = await get_hotel(db, hotel_id)
    _ensure_room_number_free(hotel, body.room_number)
    room = _build_room(body)
    hotel.rooms.append(room)
    await db.flush()
    await db.refresh(room)
    logger.info("Room %s added to hotel %s", room.id, hotel.id)
    return room


async def update_room(db: AsyncSession, hotel_id: uuid.UUID, room_id: uuid.UUID, body: RoomUpdate) -> Room:
    hotel = await get_hotel(db, hotel_id)
    room = get_room(hotel, room_id)
    values = _column_values(body)
    if "room_number" in values:
        _ensure_room_number_free(hotel, values["room_number"], exclude=room)
    for field, value in values.items():
        setattr(room, field, value)
    await db.flush()
    await db.refresh(room)
    return room


async def remove_room(db: AsyncSession, hotel_id: uuid.UUID, room_id: uuid.UUID) -> None:
    """Delete a room that has never been booked."""
    hotel = await get_hotel(db, hotel_id)
    room = get_room(hotel, room_id)
    await db.refresh(room, ["total_bookings"])
    if room.total_bookings > 0:
        logger.warning("Refusing to remove room %s with %d bookings", room.id, room.total_bookings)
        raise RoomHasBookings()
    hotel.rooms.remove(room)
    await db.flush()
    logger.info("Room %s removed from hotel %s", room_id, hotel.id)


async def set_room_flag(db: AsyncSession, hotel_id: uuid.UUID, room_id: uuid.UUID, flag: str, value: bool) -> Room:
    """Set ``is_available`` or ``maintenance_mode`` on one room."""
    if flag not in ("is_available", "maintenance_mode"):
        raise ValueError(f"Unknown room flag: {flag}")
    hotel = await get_hotel(db, hotel_id)
    room = get_room(hotel, room_id)
    setattr(room, flag, value)
    await db.flush()
    await db.refresh(room)
    return room


async def bulk_update_prices(db: AsyncSession, hotel_id: uuid.UUID, body: BulkPriceUpdate) -> int:
    """Apply a percentage change to every room, or explicit per-room prices.

    Percentage changes round to whole currency units. Returns the number of
    rooms whose price changed.
    """
    hotel = await get_hotel(db, hotel_id)
    updated = 0
    if body.percentage_change is not None:
        factor = Decimal(1) + Decimal(str(body.percentage_change)) / Decimal(100)
        for room in hotel.rooms:
            room.price = (Decimal(room.price) * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
            updated += 1
    else:
        for change in body.room_prices or []:
            room = hotel.find_room(change.room_id)
            if room is not None:
                room.price = change.price
                updated += 1
    await db.flush()
    logger.info("Repriced %d rooms in hotel %s", updated, hotel.id)
    return updated


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


async def hotel_stats(db: AsyncSession, hotel_id: uuid.UUID) -> dict[str, Any]:
    hotel = await get_hotel(db, hotel_id)
    rooms = hotel.rooms
    by_type: dict[str, int] = {}
    for room in rooms:
        by_type[room.type] = by_type.get(room.type, 0) + 1

    prices = [float(r.price) for r in rooms if r.price and r.price > 0]
    return {
        "hotel_id": hotel.id,
        "name": hotel.name,
        "total_rooms": len(rooms),
        "available_rooms": sum(1 for r in rooms if r.is_available and not r.maintenance_mode),
        "maintenance_rooms": sum(1 for r in rooms if r.maintenance_mode),
        "rooms_by_type": by_type,
        "pricing": {
            "average_price": round(sum(prices) / len(prices), 2) if prices else 0,
            "min_price": min(prices) if prices else 0,
            "max_price": max(prices) if prices else 0,
        },
        "total_bookings": hotel.total_bookings,
        "total_revenue": hotel.total_revenue,
        "average_rating": hotel.average_rating,
        "occupancy_rate": hotel.occupancy_rate,
    }


async def hotel_metrics(db: AsyncSession, hotel_id: uuid.UUID, period: str) -> dict[str, Any]:
    hotel = await get_hotel(db, hotel_id)
    start, end = resolve_period(period)
    result = await db.execute(
        select(HotelMetrics)
        .where(HotelMetrics.hotel_id == hotel.id, HotelMetrics.date >= start, HotelMetrics.date <= end)
        .order_by(HotelMetrics.date)
    )
    metrics = list(result.scalars().all())
    return {
        "hotel": {"id": str(hotel.id), "name": hotel.name, "location": hotel.location, "total_rooms": len(hotel.rooms)},
        "period": period,
        "start_date": start,
        "end_date": end,
        "summary": {
            "total_views": sum(m.total_views for m in metrics),
            "total_bookings": sum(m.total_bookings for m in metrics),
            "total_revenue": float(sum((Decimal(m.total_revenue) for m in metrics), Decimal(0))),
            "average_rating": hotel.rating,
            "total_rooms": len(hotel.rooms),
            "available_rooms": sum(1 for r in hotel.rooms if r.is_available and not r.maintenance_mode),
        },
        "daily_metrics": [
            {
                "date": m.date,
                "total_views": m.total_views,
                "unique_views": m.unique_views,
                "total_bookings": m.total_bookings,
                "confirmed_bookings": m.confirmed_bookings,
                "cancelled_bookings": m.cancelled_bookings,
                "total_revenue": float(m.total_revenue),
                "occupancy_rate": m.occupancy_rate,
            }
            for m in metrics
        ],
    }
