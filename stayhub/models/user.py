"""User model: authentication, profile, preferences and activity log."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, Date, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from stayhub.database import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow

USER_ROLES = ("customer", "admin")

ADMIN_PERMISSION_FLAGS = (
    "can_manage_hotels",
    "can_manage_bookings",
    "can_view_analytics",
    "can_manage_users",
    "can_view_reports",
)

ACTIVITY_TYPES = (
    "viewed_hotel",
    "viewed_room",
    "searched",
    "draft_booking",
    "completed_booking",
    "cancelled_booking",
    "rated_hotel",
    "rated_room",
    "visited",
    "favorited_hotel",
)

TRAVEL_STYLES = ("budget", "mid-range", "luxury", "business")


def permissions_for_role(role: str) -> dict[str, bool]:
    """Admin permission flags implied by a role: all on for admins, all off otherwise."""
    granted = role == "admin"
    return {flag: granted for flag in ADMIN_PERMISSION_FLAGS}


def default_preferences() -> dict[str, Any]:
    return {
        "favorite_hotels": [],
        "favorite_room_types": [],
        "price_range": {"min": 0, "max": 10000},
        "preferred_locations": [],
        "preferred_amenities": [],
        "travel_style": "mid-range",
        "preferred_rating": None,
    }


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Customer or admin account."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="customer", nullable=False, index=True)
    admin_permissions: Mapped[dict[str, bool]] = mapped_column(
        JSON, default=lambda: permissions_for_role("customer"), nullable=False
    )

    # Embedded documents
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, default=default_preferences, nullable=False)
    activities: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    # Informational aggregates; not recomputed transactionally
    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_spent: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    phone: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(Text)
    date_of_birth: Mapped[date | None] = mapped_column(Date)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(default=utcnow)
    last_active: Mapped[datetime | None] = mapped_column(default=utcnow)

    @validates("role")
    def _sync_permissions(self, key: str, role: str) -> str:
        if role not in USER_ROLES:
            raise ValueError(f"Invalid role: {role}")
        self.admin_permissions = permissions_for_role(role)
        return role

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
