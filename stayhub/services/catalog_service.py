"""Public catalog reads: search, featured hotels and single-hotel lookups."""

import logging
import uuid
from typing import Any

from sqlalchemy import Select, String, and_, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.exceptions import NotFound
from stayhub.models.analytics import SearchAnalytics
from stayhub.models.hotel import Hotel, Room
from stayhub.models.user import User
from stayhub.schemas.hotel import HotelFilters
from stayhub.services.user_service import record_behavior

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "rating": Hotel.rating,
    "name": Hotel.name,
    "created_at": Hotel.created_at,
    "base_price": Hotel.base_price,
    "total_bookings": Hotel.total_bookings,
    "average_rating": Hotel.average_rating,
}


def _contains(value: str) -> str:
    return f"%{value}%"


def location_clause(location: str):
    """Match the free-text location or any of the contact city/state/country fields."""
    pattern = _contains(location)
    return or_(
        Hotel.location.ilike(pattern),
        Hotel.contact["city"].as_string().ilike(pattern),
        Hotel.contact["state"].as_string().ilike(pattern),
        Hotel.contact["country"].as_string().ilike(pattern),
    )


def amenity_clause(amenity: str):
    # Substring match over the serialized column covers list and legacy string rows alike.
    return cast(Hotel.amenities, String).ilike(_contains(amenity))


def apply_filters(query: Select, filters: HotelFilters) -> Select:
    conditions = []
    if filters.query:
        pattern = _contains(filters.query)
        conditions.append(or_(Hotel.name.ilike(pattern), Hotel.description.ilike(pattern)))
    if filters.location:
        conditions.append(location_clause(filters.location))
    if filters.price_range:
        conditions.append(Hotel.price_range == filters.price_range)
    if filters.rating is not None:
        conditions.append(Hotel.rating >= filters.rating)
    if filters.category:
        conditions.append(Hotel.category.ilike(_contains(filters.category)))
    for amenity in filters.amenities or []:
        conditions.append(amenity_clause(amenity))
    if filters.room_type:
        conditions.append(Hotel.rooms.any(Room.type.ilike(_contains(filters.room_type))))
    if filters.guests is not None:
        conditions.append(Hotel.rooms.any(Room.capacity >= filters.guests))
    if conditions:
        query = query.where(and_(*conditions))
    return query


def active_hotels() -> Select:
    return select(Hotel).where(Hotel.is_active.is_(True))


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int,
    limit: int,
    order_by: Any,
) -> tuple[list[Hotel], int]:
    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(query.order_by(order_by, Hotel.id).offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


async def record_search(
    db: AsyncSession,
    filters: HotelFilters,
    results_count: int,
    user: User | None = None,
    session_id: str | None = None,
) -> SearchAnalytics:
    criteria = filters.criteria()
    search_query = criteria.pop("query", None)
    entry = SearchAnalytics(
        search_query=search_query,
        filters=criteria,
        results_count=results_count,
        clicked_results=[],
        session_id=session_id,
        user_id=user.id if user is not None else None,
    )
    db.add(entry)
    await db.flush()
    return entry


async def search_hotels(
    db: AsyncSession,
    filters: HotelFilters,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "rating",
    sort_order: str = "desc",
    user: User | None = None,
) -> tuple[list[Hotel], int]:
    """Filter, sort and paginate active hotels.

    Searches that carry any criterion are recorded for search analytics.
    """
    column = SORTABLE_FIELDS.get(sort_by, Hotel.rating)
    order_by = column.asc() if sort_order == "asc" else column.desc()
    hotels, total = await paginate(db, apply_filters(active_hotels(), filters), page, limit, order_by)

    if filters.criteria():
        await record_search(db, filters, total, user=user)
        if user is not None:
            await record_behavior(
                db,
                user.id,
                "searched",
                search_query=filters.query,
                filters={k: v for k, v in filters.criteria().items() if k != "query"},
            )
    return hotels, total


async def featured_hotels(db: AsyncSession, limit: int = 10) -> list[Hotel]:
    """Active hotels flagged as featured, best rated first."""
    result = await db.execute(
        active_hotels()
        .where(Hotel.featured.is_(True))
        .order_by(Hotel.rating.desc(), Hotel.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def hotels_by_location(db: AsyncSession, location: str, page: int = 1, limit: int = 20):
    return await paginate(db, active_hotels().where(location_clause(location)), page, limit, Hotel.rating.desc())


async def hotels_by_price_range(db: AsyncSession, price_range: str, page: int = 1, limit: int = 20):
    query = active_hotels().where(Hotel.price_range.ilike(_contains(price_range)))
    return await paginate(db, query, page, limit, Hotel.rating.desc())


async def hotels_by_amenity(db: AsyncSession, amenity: str, page: int = 1, limit: int = 20):
    return await paginate(db, active_hotels().where(amenity_clause(amenity)), page, limit, Hotel.rating.desc())


async def get_public_hotel(db: AsyncSession, hotel_id: uuid.UUID, viewer: User | None = None) -> Hotel:
    hotel = await db.get(Hotel, hotel_id)
    if hotel is None or not hotel.is_active:
        raise NotFound("Hotel not found")
    if viewer is not None:
        await record_behavior(db, viewer.id, "viewed", hotel_id=hotel.id)
    return hotel
