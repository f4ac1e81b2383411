"""Booking model: a room reservation with its lifecycle, pricing and admin fields."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Date, ForeignKey, Index, Integer, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stayhub.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = (
    "draft",
    "pending",
    "confirmed",
    "checked_in",
    "checked_out",
    "completed",
    "cancelled",
    "no_show",
)

BOOKING_PRIORITIES = ("low", "normal", "high", "urgent")
BOOKING_SOURCES = ("website", "mobile_app", "phone", "walk_in")
PAYMENT_METHODS = ("credit_card", "debit_card", "paypal", "bank_transfer", "cash")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
REFUND_STATUSES = ("pending", "completed", "denied")

# Statuses that count as a booking still occupying its user's schedule.
ACTIVE_BOOKING_STATUSES = ("confirmed", "checked_in", "pending")


def _money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of one room in one hotel for a half-open date range."""

    __tablename__ = "bookings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hotel_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_in_time: Mapped[str | None] = mapped_column(String(20))
    check_out_time: Mapped[str | None] = mapped_column(String(20))

    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False, index=True)

    guest_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    guest_info: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Pricing; total_amount is derived on every flush
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    taxes: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    fees: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    payment: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    cancellation: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    source: Mapped[str] = mapped_column(String(20), default="website", nullable=False)
    special_requests: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    # Admin management
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    priority: Mapped[str] = mapped_column(String(10), default="normal", nullable=False)

    # Lifecycle timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column()
    checked_in_at: Mapped[datetime | None] = mapped_column()
    checked_out_at: Mapped[datetime | None] = mapped_column()

    # Relationships
    user: Mapped["User"] = relationship(foreign_keys=[user_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    assigned_to: Mapped["User | None"] = relationship(foreign_keys=[assigned_to_id], lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    hotel: Mapped["Hotel"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    room: Mapped["Room"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        Index("ix_bookings_room_dates", "room_id", "start_date", "end_date"),
        Index("ix_bookings_created_at", "created_at"),
    )

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    def compute_total(self) -> Decimal:
        return _money(self.base_price) + _money(self.taxes) + _money(self.fees) - _money(self.discount)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, room_id={self.room_id}, user_id={self.user_id}, status={self.status})>"


@event.listens_for(Booking, "before_insert")
@event.listens_for(Booking, "before_update")
def _recompute_total(mapper, connection, target: Booking) -> None:
    target.total_amount = target.compute_total()
