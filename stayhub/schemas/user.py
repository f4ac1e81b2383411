"""Pydantic v2 request/response schemas for user accounts and profiles."""

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from stayhub.config import settings
from stayhub.models.user import ACTIVITY_TYPES, TRAVEL_STYLES

_ACTIVITY_PATTERN = "^(" + "|".join(ACTIVITY_TYPES) + ")$"
_TRAVEL_STYLE_PATTERN = "^(" + "|".join(TRAVEL_STYLES) + ")$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ProfileFields(BaseModel):
    """Optional personal details accepted at signup and on profile update."""

    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    date_of_birth: date | None = None


class SignupRequest(ProfileFields):
    """Schema for self-service account creation."""

    username: str = Field(
        ...,
        min_length=settings.username_min_length,
        max_length=settings.username_max_length,
    )
    email: EmailStr
    password: str = Field(..., min_length=settings.password_min_length, max_length=128)

    @field_validator("username")
    @classmethod
    def strip_username(cls, value: str) -> str:
        return value.strip()


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class PriceRange(BaseModel):
    min: float = Field(0, ge=0)
    max: float = Field(10000, ge=0)


class PreferencesUpdate(BaseModel):
    """Partial update of the embedded preference object."""

    favorite_hotels: list[uuid.UUID] | None = None
    favorite_room_types: list[str] | None = None
    price_range: PriceRange | None = None
    preferred_locations: list[str] | None = None
    preferred_amenities: list[str] | None = None
    travel_style: str | None = Field(None, pattern=_TRAVEL_STYLE_PATTERN)
    preferred_rating: float | None = Field(None, ge=0, le=5)


class ProfileUpdate(ProfileFields):
    """Schema for updating the caller's own profile. All fields optional."""

    preferences: PreferencesUpdate | None = None


class ActivityCreate(BaseModel):
    """One activity appended to the caller's activity log."""

    type: str = Field(..., pattern=_ACTIVITY_PATTERN)
    hotel_id: uuid.UUID | None = None
    room_id: uuid.UUID | None = None
    search_query: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    duration: int | None = Field(None, ge=0)
    session_id: str | None = None
    metadata: dict[str, Any] | None = None


class FavoriteToggle(BaseModel):
    hotel_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public user information; never carries the password hash."""

    id: uuid.UUID
    username: str
    email: str
    role: str
    admin_permissions: dict[str, bool]
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    is_active: bool
    email_verified: bool
    total_bookings: int
    last_login: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    """The caller's own profile, with preferences and booking references."""

    preferences: dict[str, Any]
    bookings: list[uuid.UUID] = []
    last_active: datetime | None = None


class AuthResponse(BaseModel):
    """Returned on signup and login."""

    message: str
    token: str
    user: UserResponse


class ActivityResponse(BaseModel):
    type: str
    hotel_id: str | None = None
    room_id: str | None = None
    search_query: str | None = None
    rating: float | None = None
    duration: int | None = None
    session_id: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime
