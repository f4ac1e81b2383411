"""Public hotel catalog router.

Only active hotels are visible here. Searches carrying any criterion are
recorded for search analytics, and signed-in viewers leave a behavior trail.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import PageParams, get_db, get_optional_user
from stayhub.models.user import User
from stayhub.schemas.common import Pagination
from stayhub.schemas.hotel import FeaturedHotelsResponse, HotelFilters, HotelListResponse, HotelResponse
from stayhub.services import catalog_service

router = APIRouter(prefix="/api/hotels", tags=["hotels"])


def search_filters(
    query: str | None = Query(None, description="Matches name or description"),
    location: str | None = Query(None, description="Matches location, city, state or country"),
    price_range: str | None = Query(None),
    rating: float | None = Query(None, ge=0, le=5, description="Minimum rating"),
    category: str | None = Query(None),
    amenities: str | None = Query(None, description="Comma-separated amenities, all required"),
    room_type: str | None = Query(None),
    guests: int | None = Query(None, ge=1, description="Minimum room capacity"),
) -> HotelFilters:
    return HotelFilters(
        query=query,
        location=location,
        price_range=price_range,
        rating=rating,
        category=category,
        amenities=amenities,
        room_type=room_type,
        guests=guests,
    )


def _listing(hotels, total: int, pages: PageParams) -> HotelListResponse:
    return HotelListResponse(
        hotels=[HotelResponse.model_validate(h) for h in hotels],
        pagination=Pagination.build(pages.page, pages.limit, total),
    )


async def _search(
    db: AsyncSession,
    filters: HotelFilters,
    pages: PageParams,
    sort_by: str,
    sort_order: str,
    viewer: User | None,
) -> HotelListResponse:
    hotels, total = await catalog_service.search_hotels(
        db, filters, pages.page, pages.limit, sort_by, sort_order, user=viewer
    )
    return _listing(hotels, total, pages)


@router.get("", response_model=HotelListResponse, summary="List and search hotels")
async def list_hotels(
    filters: HotelFilters = Depends(search_filters),
    pages: PageParams = Depends(),
    sort_by: str = Query("rating"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> HotelListResponse:
    return await _search(db, filters, pages, sort_by, sort_order, viewer)


@router.get("/search", response_model=HotelListResponse, summary="Search hotels")
async def search_hotels(
    filters: HotelFilters = Depends(search_filters),
    pages: PageParams = Depends(),
    sort_by: str = Query("rating"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> HotelListResponse:
    return await _search(db, filters, pages, sort_by, sort_order, viewer)


@router.get("/allhotels", response_model=HotelListResponse, include_in_schema=False)
async def all_hotels(
    pages: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
) -> HotelListResponse:
    """Unfiltered listing kept for older clients."""
    return await _search(db, HotelFilters(), pages, "rating", "desc", None)


@router.post("/search/advanced", response_model=HotelListResponse)
async def advanced_search(
    filters: HotelFilters,
    pages: PageParams = Depends(),
    sort_by: str = Query("rating"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> HotelListResponse:
    """Same filters as ``GET /search`` sent as a JSON body."""
    return await _search(db, filters, pages, sort_by, sort_order, viewer)


@router.get("/featured", response_model=FeaturedHotelsResponse)
async def featured_hotels(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> FeaturedHotelsResponse:
    hotels = await catalog_service.featured_hotels(db, limit)
    return FeaturedHotelsResponse(hotels=[HotelResponse.model_validate(h) for h in hotels], count=len(hotels))


@router.get("/location/{location}", response_model=HotelListResponse)
async def hotels_by_location(
    location: str,
    pages: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
) -> HotelListResponse:
    hotels, total = await catalog_service.hotels_by_location(db, location, pages.page, pages.limit)
    return _listing(hotels, total, pages)


@router.get("/price/{price_range}", response_model=HotelListResponse)
async def hotels_by_price_range(
    price_range: str,
    pages: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
) -> HotelListResponse:
    hotels, total = await catalog_service.hotels_by_price_range(db, price_range, pages.page, pages.limit)
    return _listing(hotels, total, pages)


@router.get("/amenities/{amenity}", response_model=HotelListResponse)
async def hotels_by_amenity(
    amenity: str,
    pages: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
) -> HotelListResponse:
    hotels, total = await catalog_service.hotels_by_amenity(db, amenity, pages.page, pages.limit)
    return _listing(hotels, total, pages)


@router.get("/{hotel_id}", response_model=HotelResponse)
async def get_hotel(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
):
    return await catalog_service.get_public_hotel(db, hotel_id, viewer)
