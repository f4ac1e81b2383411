"""Write-mostly analytics records consumed by the reporting endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stayhub.database import Base, UUIDPrimaryKeyMixin, utcnow

BEHAVIOR_ACTIONS = (
    "viewed",
    "searched",
    "booked",
    "cancelled",
    "rated",
    "favorited",
    "cancelled_booking",
    "updated_booking_status",
)

RECOMMENDATION_ALGORITHMS = ("content_based", "collaborative", "hybrid", "popularity")


class UserBehavior(UUIDPrimaryKeyMixin, Base):
    """One user action, kept for behavior reports and recommendations."""

    __tablename__ = "user_behaviors"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    hotel_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("hotels.id", ondelete="SET NULL"))
    room_id: Mapped[uuid.UUID | None] = mapped_column()
    action: Mapped[str] = mapped_column(String(40), nullable=False)
    search_query: Mapped[str | None] = mapped_column(Text)
    filters: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    session_id: Mapped[str | None] = mapped_column(String(100))
    timestamp: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON)

    __table_args__ = (
        Index("ix_user_behaviors_user_ts", "user_id", "timestamp"),
        Index("ix_user_behaviors_hotel_ts", "hotel_id", "timestamp"),
        Index("ix_user_behaviors_action_ts", "action", "timestamp"),
    )


class HotelMetrics(UUIDPrimaryKeyMixin, Base):
    """Per-hotel daily snapshot of views, bookings, revenue and occupancy."""

    __tablename__ = "hotel_metrics"

    hotel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    total_views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unique_views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    confirmed_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cancelled_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    average_booking_value: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_rooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    occupied_rooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    occupancy_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    __table_args__ = (
        Index("ix_hotel_metrics_hotel_date", "hotel_id", "date"),
        Index("ix_hotel_metrics_date", "date"),
    )


class Recommendation(UUIDPrimaryKeyMixin, Base):
    """A hotel suggested to a user, with a 0-1 score and click tracking."""

    __tablename__ = "recommendations"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    hotel_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    algorithm: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    generated_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    clicked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    clicked_at: Mapped[datetime | None] = mapped_column()

    __table_args__ = (
        Index("ix_recommendations_user_score", "user_id", "score"),
        Index("ix_recommendations_hotel_score", "hotel_id", "score"),
    )


class BusinessAnalytics(UUIDPrimaryKeyMixin, Base):
    """Platform-wide daily snapshot."""

    __tablename__ = "business_analytics"

    date: Mapped[datetime] = mapped_column(default=utcnow, nullable=False, index=True)

    total_users: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_users: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    new_users: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    total_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    confirmed_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cancelled_bookings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    no_shows: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    total_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    average_order_value: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    refunds: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)

    total_hotels: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_hotels: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_rooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    available_rooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    total_searches: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_hotel_views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    average_session_duration: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    conversion_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    cancellation_rate: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    average_rating: Mapped[float] = mapped_column(Float, default=0, nullable=False)


class SearchAnalytics(UUIDPrimaryKeyMixin, Base):
    """One catalog search with its filters and result count."""

    __tablename__ = "search_analytics"

    date: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    search_query: Mapped[str | None] = mapped_column(Text)
    filters: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    results_count: Mapped[int | None] = mapped_column(Integer)
    # [{"hotel_id": str, "position": int, "clicked": bool}]
    clicked_results: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    session_id: Mapped[str | None] = mapped_column(String(100))
    user_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    timestamp: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_search_analytics_date_query", "date", "search_query"),
        Index("ix_search_analytics_user_ts", "user_id", "timestamp"),
    )
