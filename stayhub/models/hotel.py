"""Hotel model and its owned Room rows."""

import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stayhub.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ROOM_TYPES = ("deluxe", "semi-deluxe", "non-deluxe", "suite", "presidential", "standard")

HOTEL_CATEGORIES = ("Luxury Hotels", "Business Hotels", "Resort Hotels", "Boutique Hotels")


class Hotel(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A hotel listing; owns an ordered list of rooms."""

    __tablename__ = "hotels"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Canonical form is a list of strings; legacy rows may hold a comma-joined string.
    amenities: Mapped[Any] = mapped_column(JSON, default=list)

    price_range: Mapped[str | None] = mapped_column(String(50))
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    seasonal_pricing: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    images: Mapped[Any] = mapped_column(JSON, default=list)
    contact: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    business_hours: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    # Management flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="Luxury Hotels", nullable=False)

    # Denormalized counters
    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    occupancy_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    last_updated_by_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    rooms: Mapped[list["Room"]] = relationship(
        back_populates="hotel",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Room.position",
        collection_class=ordering_list("position"),
    )

    def find_room(self, room_id: uuid.UUID) -> "Room | None":
        return next((room for room in self.rooms if room.id == room_id), None)

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, name={self.name!r}, rooms={len(self.rooms)})>"


class Room(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable room; exists only as part of its hotel."""

    __tablename__ = "rooms"

    hotel_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    type: Mapped[str] = mapped_column(String(30), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    room_number: Mapped[str | None] = mapped_column(String(20))
    floor: Mapped[int | None] = mapped_column(Integer)
    capacity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    bed_type: Mapped[str | None] = mapped_column(String(50))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    seasonal_pricing: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    pictures: Mapped[list[str]] = mapped_column(JSON, default=list)
    amenities: Mapped[list[str]] = mapped_column(JSON, default=list)
    description: Mapped[str | None] = mapped_column(Text)

    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    maintenance_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    review_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    hotel: Mapped["Hotel"] = relationship(back_populates="rooms", lazy="selectin")

    # NULL room numbers never collide, so unnumbered rooms are unconstrained.
    __table_args__ = (UniqueConstraint("hotel_id", "room_number", name="uq_rooms_hotel_room_number"),)

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, hotel_id={self.hotel_id}, type={self.type!r}, number={self.room_number!r})>"
