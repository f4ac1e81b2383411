"""Pydantic v2 schemas for the admin management endpoints."""

import uuid
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from stayhub.config import settings
from stayhub.models.user import ADMIN_PERMISSION_FLAGS, USER_ROLES
from stayhub.schemas.common import Pagination
from stayhub.schemas.hotel import HotelResponse, RoomResponse
from stayhub.schemas.user import ProfileFields, UserResponse

_ROLE_PATTERN = "^(" + "|".join(USER_ROLES) + ")$"


class AdminPermissions(BaseModel):
    """Partial permission override; unset flags keep their role default."""

    can_manage_hotels: bool | None = None
    can_manage_bookings: bool | None = None
    can_view_analytics: bool | None = None
    can_manage_users: bool | None = None
    can_view_reports: bool | None = None

    def overrides(self) -> dict[str, bool]:
        return {flag: value for flag, value in self.model_dump().items() if flag in ADMIN_PERMISSION_FLAGS and value is not None}


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class AdminUserCreate(ProfileFields):
    username: str = Field(
        ...,
        min_length=settings.username_min_length,
        max_length=settings.username_max_length,
    )
    email: EmailStr
    password: str = Field(..., min_length=settings.password_min_length, max_length=128)
    role: str = Field("customer", pattern=_ROLE_PATTERN)


class AdminUserUpdate(ProfileFields):
    """Admin edit of a user; password and aggregate counters are not writable here."""

    username: str | None = Field(
        None,
        min_length=settings.username_min_length,
        max_length=settings.username_max_length,
    )
    email: EmailStr | None = None
    is_active: bool | None = None
    email_verified: bool | None = None


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=settings.password_min_length, max_length=128)


class ActiveToggle(BaseModel):
    is_active: bool


class RoleUpdate(BaseModel):
    role: str = Field(..., pattern=_ROLE_PATTERN)
    admin_permissions: AdminPermissions | None = None


class BulkUserOperation(BaseModel):
    operation: Literal["activate", "deactivate", "changeRole", "updatePermissions"]
    user_ids: list[uuid.UUID] = Field(..., min_length=1)
    role: str | None = Field(None, pattern=_ROLE_PATTERN)
    admin_permissions: AdminPermissions | None = None

    @model_validator(mode="after")
    def check_payload(self) -> "BulkUserOperation":
        if self.operation == "changeRole" and self.role is None:
            raise ValueError("Role is required for changeRole operation")
        if self.operation == "updatePermissions" and self.admin_permissions is None:
            raise ValueError("Admin permissions are required for updatePermissions operation")
        return self


class UserEnvelope(BaseModel):
    message: str
    user: UserResponse


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class BulkResult(BaseModel):
    message: str
    updated_count: int
    total_requested: int


# ---------------------------------------------------------------------------
# Hotels and rooms
# ---------------------------------------------------------------------------


class FeaturedToggle(BaseModel):
    featured: bool


class VerifiedToggle(BaseModel):
    verified: bool


class AvailabilityToggle(BaseModel):
    is_available: bool


class MaintenanceToggle(BaseModel):
    maintenance_mode: bool


class HotelEnvelope(BaseModel):
    message: str
    hotel: HotelResponse


class RoomEnvelope(BaseModel):
    message: str
    room: RoomResponse


class PriceUpdateResult(BaseModel):
    message: str
    updated_rooms: int
