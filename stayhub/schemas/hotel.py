"""Pydantic v2 request/response schemas for hotels and their rooms.

Response models are the read boundary for legacy catalog data: ``amenities``
may be stored as a comma-joined string and ``images`` as anything, but both
always leave the API as lists of strings.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from stayhub.models.hotel import HOTEL_CATEGORIES, ROOM_TYPES
from stayhub.schemas.common import Pagination

_ROOM_TYPE_PATTERN = "^(" + "|".join(ROOM_TYPES) + ")$"
_CATEGORY_PATTERN = "^(" + "|".join(HOTEL_CATEGORIES) + ")$"


def normalize_string_list(value: Any) -> list[str]:
    """Coerce a legacy string, list or missing value into a clean list of strings.

    ``"wifi, pool"`` and ``["wifi, pool"]`` both become ``["wifi", "pool"]``;
    blank entries are dropped and anything else becomes an empty list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: list[Any] = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        return []

    result: list[str] = []
    for item in items:
        if item is None:
            continue
        for part in str(item).split(","):
            part = part.strip()
            if part:
                result.append(part)
    return result


def _list_or_empty(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _dict_or_empty(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


AmenityList = Annotated[list[str], BeforeValidator(normalize_string_list)]
LooseList = Annotated[list[Any], BeforeValidator(_list_or_empty)]
LooseDict = Annotated[dict[str, Any], BeforeValidator(_dict_or_empty)]
ImageList = Annotated[list[str], BeforeValidator(_list_or_empty)]


# ---------------------------------------------------------------------------
# Embedded objects
# ---------------------------------------------------------------------------


class Coordinates(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


class HotelContact(BaseModel):
    phone: list[str] = []
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    website: str | None = None
    coordinates: Coordinates | None = None


class BusinessHours(BaseModel):
    check_in: str | None = None
    check_out: str | None = None
    front_desk: str | None = None


class SeasonalPrice(BaseModel):
    season: str
    price: Decimal = Field(..., ge=0)
    start_date: date | None = None
    end_date: date | None = None


# ---------------------------------------------------------------------------
# Room schemas
# ---------------------------------------------------------------------------


class RoomCreate(BaseModel):
    """Schema for adding a room to a hotel."""

    type: str = Field(..., pattern=_ROOM_TYPE_PATTERN)
    name: str | None = Field(None, max_length=255)
    room_number: str | None = Field(None, max_length=20)
    floor: int | None = None
    capacity: int = Field(1, ge=1)
    bed_type: str | None = None
    price: Decimal = Field(..., ge=0)
    base_price: Decimal | None = Field(None, ge=0)
    seasonal_pricing: list[SeasonalPrice] = []
    pictures: list[str] = []
    amenities: AmenityList = []
    description: str | None = None
    is_available: bool = True
    maintenance_mode: bool = False


class RoomUpdate(BaseModel):
    """Schema for partially updating a room. All fields optional."""

    type: str | None = Field(None, pattern=_ROOM_TYPE_PATTERN)
    name: str | None = Field(None, max_length=255)
    room_number: str | None = Field(None, max_length=20)
    floor: int | None = None
    capacity: int | None = Field(None, ge=1)
    bed_type: str | None = None
    price: Decimal | None = Field(None, ge=0)
    base_price: Decimal | None = Field(None, ge=0)
    seasonal_pricing: list[SeasonalPrice] | None = None
    pictures: list[str] | None = None
    amenities: AmenityList | None = None
    description: str | None = None
    is_available: bool | None = None
    maintenance_mode: bool | None = None


class RoomResponse(BaseModel):
    id: uuid.UUID
    hotel_id: uuid.UUID
    type: str
    name: str | None = None
    room_number: str | None = None
    floor: int | None = None
    capacity: int
    bed_type: str | None = None
    price: Decimal
    base_price: Decimal | None = None
    seasonal_pricing: LooseList = []
    pictures: ImageList = []
    amenities: AmenityList = []
    description: str | None = None
    is_available: bool
    maintenance_mode: bool
    total_bookings: int
    average_rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Hotel schemas
# ---------------------------------------------------------------------------


class HotelCreate(BaseModel):
    """Schema for creating a hotel; rooms may be supplied inline."""

    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    rating: float = Field(0, ge=0, le=5)
    amenities: AmenityList = []
    price_range: str | None = Field(None, max_length=50)
    base_price: Decimal | None = Field(None, ge=0)
    seasonal_pricing: list[SeasonalPrice] = []
    images: list[str] = []
    contact: HotelContact | None = None
    business_hours: BusinessHours | None = None
    category: str = Field("Luxury Hotels", pattern=_CATEGORY_PATTERN)
    is_active: bool = True
    featured: bool = False
    verified: bool = False
    rooms: list[RoomCreate] = []


class HotelUpdate(BaseModel):
    """Schema for partially updating a hotel.

    Counters and the creator reference are not writable.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    amenities: AmenityList | None = None
    price_range: str | None = Field(None, max_length=50)
    base_price: Decimal | None = Field(None, ge=0)
    seasonal_pricing: list[SeasonalPrice] | None = None
    images: list[str] | None = None
    contact: HotelContact | None = None
    business_hours: BusinessHours | None = None
    category: str | None = Field(None, pattern=_CATEGORY_PATTERN)
    is_active: bool | None = None
    featured: bool | None = None
    verified: bool | None = None


class HotelResponse(BaseModel):
    """Public hotel information, rooms included."""

    id: uuid.UUID
    name: str
    location: str
    description: str | None = None
    rating: float
    amenities: AmenityList = []
    price_range: str | None = None
    base_price: Decimal | None = None
    seasonal_pricing: LooseList = []
    images: ImageList = []
    contact: LooseDict = {}
    business_hours: LooseDict = {}
    category: str
    is_active: bool
    featured: bool
    verified: bool
    total_bookings: int
    total_revenue: Decimal
    average_rating: float
    review_count: int
    occupancy_rate: float
    rooms: list[RoomResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HotelListResponse(BaseModel):
    """Paginated list of hotels."""

    hotels: list[HotelResponse]
    pagination: Pagination


class FeaturedHotelsResponse(BaseModel):
    hotels: list[HotelResponse]
    count: int


class HotelFilters(BaseModel):
    """Catalog search criteria; every field narrows the result set."""

    query: str | None = None
    location: str | None = None
    price_range: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    category: str | None = None
    amenities: AmenityList | None = None
    room_type: str | None = None
    guests: int | None = Field(None, ge=1)

    def criteria(self) -> dict[str, Any]:
        return {key: value for key, value in self.model_dump().items() if value not in (None, "", [])}


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------


class RoomPriceChange(BaseModel):
    room_id: uuid.UUID
    price: Decimal = Field(..., ge=0)


class BulkPriceUpdate(BaseModel):
    """Either a percentage change for every room or explicit per-room prices."""

    percentage_change: float | None = Field(None, gt=-100)
    room_prices: list[RoomPriceChange] | None = None

    @model_validator(mode="after")
    def check_one_mode(self) -> "BulkPriceUpdate":
        if self.percentage_change is None and not self.room_prices:
            raise ValueError("Provide percentage_change or room_prices")
        return self


class HotelStatsResponse(BaseModel):
    hotel_id: uuid.UUID
    name: str
    total_rooms: int
    available_rooms: int
    maintenance_rooms: int
    rooms_by_type: dict[str, int]
    pricing: dict[str, float]
    total_bookings: int
    total_revenue: Decimal
    average_rating: float
    occupancy_rate: float
