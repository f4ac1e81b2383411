"""Admin hotel and room management router."""

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import PageParams, admin_only, get_db
from stayhub.models.user import User
from stayhub.schemas.admin import (
    ActiveToggle,
    AvailabilityToggle,
    FeaturedToggle,
    HotelEnvelope,
    MaintenanceToggle,
    PriceUpdateResult,
    RoomEnvelope,
    VerifiedToggle,
)
from stayhub.schemas.common import MessageResponse, Pagination
from stayhub.schemas.hotel import (
    BulkPriceUpdate,
    HotelCreate,
    HotelListResponse,
    HotelResponse,
    HotelStatsResponse,
    HotelUpdate,
    RoomCreate,
    RoomResponse,
    RoomUpdate,
)
from stayhub.services import hotel_admin_service
from stayhub.services.periods import DEFAULT_PERIOD

router = APIRouter(prefix="/api/admin/hotels", tags=["admin: hotels"])


def _hotel(message: str, hotel) -> HotelEnvelope:
    return HotelEnvelope(message=message, hotel=HotelResponse.model_validate(hotel))


def _room(message: str, room) -> RoomEnvelope:
    return RoomEnvelope(message=message, room=RoomResponse.model_validate(room))


# ---------------------------------------------------------------------------
# Hotels
# ---------------------------------------------------------------------------


@router.post("", response_model=HotelEnvelope, status_code=status.HTTP_201_CREATED)
async def create_hotel(
    body: HotelCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> HotelEnvelope:
    hotel = await hotel_admin_service.create_hotel(db, admin, body)
    return _hotel("Hotel created successfully", hotel)


@router.get("", response_model=HotelListResponse)
async def list_hotels(
    pages: PageParams = Depends(),
    search: str | None = Query(None),
    is_active: bool | None = Query(None, alias="status"),
    featured: bool | None = Query(None),
    verified: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> HotelListResponse:
    """Every hotel, inactive ones included."""
    hotels, total = await hotel_admin_service.list_hotels(
        db, pages.page, pages.limit, search=search, is_active=is_active, featured=featured, verified=verified
    )
    return HotelListResponse(
        hotels=[HotelResponse.model_validate(h) for h in hotels],
        pagination=Pagination.build(pages.page, pages.limit, total),
    )


@router.get("/{hotel_id}", response_model=HotelResponse)
async def get_hotel(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    return await hotel_admin_service.get_hotel(db, hotel_id)


@router.put("/{hotel_id}", response_model=HotelEnvelope)
async def update_hotel(
    hotel_id: uuid.UUID,
    body: HotelUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> HotelEnvelope:
    hotel = await hotel_admin_service.update_hotel(db, hotel_id, admin, body)
    return _hotel("Hotel updated successfully", hotel)


@router.delete("/{hotel_id}", response_model=MessageResponse)
async def delete_hotel(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> MessageResponse:
    """Soft delete: the hotel is deactivated, never removed."""
    await hotel_admin_service.deactivate_hotel(db, hotel_id, admin)
    return MessageResponse(message="Hotel deleted successfully")


@router.put("/{hotel_id}/featured", response_model=HotelEnvelope)
async def set_featured(
    hotel_id: uuid.UUID,
    body: FeaturedToggle,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> HotelEnvelope:
    hotel = await hotel_admin_service.set_hotel_flag(db, hotel_id, "featured", body.featured, admin)
    verb = "marked as featured" if body.featured else "unmarked as featured"
    return _hotel(f"Hotel {verb} successfully", hotel)


@router.put("/{hotel_id}/verify", response_model=HotelEnvelope)
async def set_verified(
    hotel_id: uuid.UUID,
    body: VerifiedToggle,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> HotelEnvelope:
    hotel = await hotel_admin_service.set_hotel_flag(db, hotel_id, "verified", body.verified, admin)
    verb = "verified" if body.verified else "unverified"
    return _hotel(f"Hotel {verb} successfully", hotel)


@router.put("/{hotel_id}/status", response_model=HotelEnvelope)
async def set_active(
    hotel_id: uuid.UUID,
    body: ActiveToggle,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(admin_only),
) -> HotelEnvelope:
    hotel = await hotel_admin_service.set_hotel_flag(db, hotel_id, "is_active", body.is_active, admin)
    verb = "activated" if body.is_active else "deactivated"
    return _hotel(f"Hotel {verb} successfully", hotel)


@router.get("/{hotel_id}/stats", response_model=HotelStatsResponse)
async def hotel_stats(
    hotel_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await hotel_admin_service.hotel_stats(db, hotel_id)


@router.get("/{hotel_id}/metrics")
async def hotel_metrics(
    hotel_id: uuid.UUID,
    period: str = Query(DEFAULT_PERIOD),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await hotel_admin_service.hotel_metrics(db, hotel_id, period)


@router.put("/{hotel_id}/prices", response_model=PriceUpdateResult)
async def bulk_update_prices(
    hotel_id: uuid.UUID,
    body: BulkPriceUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> PriceUpdateResult:
    updated = await hotel_admin_service.bulk_update_prices(db, hotel_id, body)
    return PriceUpdateResult(message="Room prices updated successfully", updated_rooms=updated)


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------


@router.post("/{hotel_id}/rooms", response_model=RoomEnvelope, status_code=status.HTTP_201_CREATED)
async def add_room(
    hotel_id: uuid.UUID,
    body: RoomCreate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> RoomEnvelope:
    room = await hotel_admin_service.add_room(db, hotel_id, body)
    return _room("Room added successfully", room)


@router.put("/{hotel_id}/rooms/{room_id}", response_model=RoomEnvelope)
async def update_room(
    hotel_id: uuid.UUID,
    room_id: uuid.UUID,
    body: RoomUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> RoomEnvelope:
    room = await hotel_admin_service.update_room(db, hotel_id, room_id, body)
    return _room("Room updated successfully", room)


@router.delete("/{hotel_id}/rooms/{room_id}", response_model=MessageResponse)
async def remove_room(
    hotel_id: uuid.UUID,
    room_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> MessageResponse:
    await hotel_admin_service.remove_room(db, hotel_id, room_id)
    return MessageResponse(message="Room removed successfully")


@router.put("/{hotel_id}/rooms/{room_id}/availability", response_model=RoomEnvelope)
async def set_room_availability(
    hotel_id: uuid.UUID,
    room_id: uuid.UUID,
    body: AvailabilityToggle,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> RoomEnvelope:
    room = await hotel_admin_service.set_room_flag(db, hotel_id, room_id, "is_available", body.is_available)
    return _room(f"Room {'available' if body.is_available else 'unavailable'}", room)


@router.put("/{hotel_id}/rooms/{room_id}/maintenance", response_model=RoomEnvelope)
async def set_room_maintenance(
    hotel_id: uuid.UUID,
    room_id: uuid.UUID,
    body: MaintenanceToggle,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> RoomEnvelope:
    room = await hotel_admin_service.set_room_flag(db, hotel_id, room_id, "maintenance_mode", body.maintenance_mode)
    return _room(f"Room maintenance mode {'enabled' if body.maintenance_mode else 'disabled'}", room)
