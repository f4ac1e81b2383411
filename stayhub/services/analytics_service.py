"""Read-only reporting over bookings, users, hotels and the analytics records.

Every report takes a period shorthand (see ``periods``) and aggregates the
rows inside that window in Python, so the same code runs on any backend.
"""

import logging
import uuid
from collections import Counter, defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.exceptions import ValidationFailed
from stayhub.models.analytics import HotelMetrics, Recommendation, SearchAnalytics, UserBehavior
from stayhub.models.booking import Booking
from stayhub.models.hotel import Hotel
from stayhub.models.user import User
from stayhub.services.exports import record_row
from stayhub.services.periods import bucket, normalize_period, resolve_period
from stayhub.services.user_service import get_user

logger = logging.getLogger(__name__)

# Statuses whose amounts count as earned revenue.
REVENUE_STATUSES = ("confirmed", "checked_in", "checked_out", "completed")

SCORE_BOUNDARIES = (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)

ANALYTICS_EXPORTS = {
    "user_behavior": (UserBehavior, UserBehavior.timestamp),
    "hotel_metrics": (HotelMetrics, HotelMetrics.date),
    "search_analytics": (SearchAnalytics, SearchAnalytics.timestamp),
    "recommendations": (Recommendation, Recommendation.generated_at),
}


def _pct(part: float, whole: float, digits: int = 2) -> float:
    return round(part / whole * 100, digits) if whole else 0


def _avg(values: list[float], digits: int = 2) -> float:
    return round(sum(values) / len(values), digits) if values else 0


def _money(values) -> float:
    return float(sum((Decimal(v or 0) for v in values), Decimal(0)))


def _window(period: str | None) -> dict[str, Any]:
    period = normalize_period(period)
    start, end = resolve_period(period)
    return {"period": period, "start_date": start, "end_date": end}


async def _hotels_by_id(db: AsyncSession, hotel_ids) -> dict[uuid.UUID, Hotel]:
    ids = {hid for hid in hotel_ids if hid is not None}
    if not ids:
        return {}
    result = await db.execute(select(Hotel).where(Hotel.id.in_(ids)))
    return {hotel.id: hotel for hotel in result.scalars().all()}


async def _users_by_id(db: AsyncSession, user_ids) -> dict[uuid.UUID, User]:
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def _bookings_created(db: AsyncSession, start: datetime, end: datetime, *criteria) -> list[Booking]:
    result = await db.execute(
        select(Booking).where(Booking.created_at >= start, Booking.created_at <= end, *criteria)
    )
    return list(result.scalars().all())


def _distribution(values) -> list[dict[str, Any]]:
    return [{"value": key, "count": count} for key, count in Counter(values).most_common()]


def behavior_row(entry: UserBehavior) -> dict[str, Any]:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "hotel_id": entry.hotel_id,
        "room_id": entry.room_id,
        "action": entry.action,
        "search_query": entry.search_query,
        "filters": entry.filters,
        "session_id": entry.session_id,
        "metadata": entry.metadata_,
        "timestamp": entry.timestamp,
    }


# ---------------------------------------------------------------------------
# Business dashboard
# ---------------------------------------------------------------------------


async def business_dashboard(db: AsyncSession, period: str | None = None) -> dict[str, Any]:
    window = _window(period)
    start, end = window["start_date"], window["end_date"]

    total_users = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    active_users = (
        await db.execute(select(func.count()).select_from(User).where(User.last_active >= start))
    ).scalar_one()
    new_users = (
        await db.execute(
            select(func.count()).select_from(User).where(User.created_at >= start, User.created_at <= end)
        )
    ).scalar_one()

    bookings = await _bookings_created(db, start, end)
    earning = [b for b in bookings if b.status in REVENUE_STATUSES]
    total_revenue = _money(b.total_amount for b in earning)

    breakdown: dict[str, dict[str, Any]] = defaultdict(lambda: {"count": 0, "revenue": Decimal(0)})
    for booking in bookings:
        breakdown[booking.status]["count"] += 1
        breakdown[booking.status]["revenue"] += Decimal(booking.total_amount or 0)

    hotels = list((await db.execute(select(Hotel))).scalars().all())

    behaviors = (
        await db.execute(
            select(UserBehavior.action).where(UserBehavior.timestamp >= start, UserBehavior.timestamp <= end)
        )
    ).scalars().all()

    searches = (
        await db.execute(
            select(SearchAnalytics.user_id).where(
                SearchAnalytics.timestamp >= start, SearchAnalytics.timestamp <= end
            )
        )
    ).scalars().all()

    return {
        **window,
        "overview": {
            "total_users": total_users,
            "active_users": active_users,
            "new_users": new_users,
            "total_bookings": len(bookings),
            "confirmed_bookings": len(earning),
            "total_revenue": total_revenue,
            "conversion_rate": _pct(len(earning), len(bookings)),
            "average_order_value": round(total_revenue / len(earning), 2) if earning else 0,
        },
        "hotels": {
            "total_hotels": len(hotels),
            "active_hotels": sum(1 for h in hotels if h.is_active),
            "featured_hotels": sum(1 for h in hotels if h.featured),
            "verified_hotels": sum(1 for h in hotels if h.verified),
        },
        "user_behavior": [{"action": a["value"], "count": a["count"]} for a in _distribution(behaviors)],
        "search_analytics": {
            "total_searches": len(searches),
            "unique_users": len({uid for uid in searches if uid is not None}),
        },
        "booking_breakdown": [
            {"status": status, "count": row["count"], "revenue": float(row["revenue"])}
            for status, row in sorted(breakdown.items())
        ],
    }


# ---------------------------------------------------------------------------
# User behavior
# ---------------------------------------------------------------------------


async def behavior_analytics(
    db: AsyncSession,
    period: str | None = None,
    action: str | None = None,
    user_id: uuid.UUID | None = None,
    hotel_id: uuid.UUID | None = None,
) -> dict[str, Any]:
    window = _window(period)
    query = select(UserBehavior).where(
        UserBehavior.timestamp >= window["start_date"], UserBehavior.timestamp <= window["end_date"]
    )
    if action:
        query = query.where(UserBehavior.action == action)
    if user_id is not None:
        query = query.where(UserBehavior.user_id == user_id)
    if hotel_id is not None:
        query = query.where(UserBehavior.hotel_id == hotel_id)
    entries = list((await db.execute(query.order_by(UserBehavior.timestamp.desc()))).scalars().all())

    hourly = Counter(entry.timestamp.hour for entry in entries)
    daily = Counter(bucket(entry.timestamp, "day") for entry in entries)
    views = Counter(entry.hotel_id for entry in entries if entry.action == "viewed" and entry.hotel_id)
    hotels = await _hotels_by_id(db, views)

    return {
        **window,
        "filters": {"action": action, "user_id": user_id, "hotel_id": hotel_id},
        "summary": {
            "total_actions": len(entries),
            "unique_users": len({e.user_id for e in entries}),
            "unique_hotels": len({e.hotel_id for e in entries if e.hotel_id}),
        },
        "action_distribution": [
            {"action": a["value"], "count": a["count"]} for a in _distribution(e.action for e in entries)
        ],
        "hourly_pattern": [{"hour": hour, "count": hourly[hour]} for hour in sorted(hourly)],
        "daily_pattern": [{"date": day, "count": daily[day]} for day in sorted(daily)],
        "top_hotels": [
            {
                "hotel_id": hid,
                "hotel_name": hotels[hid].name,
                "location": hotels[hid].location,
                "view_count": count,
            }
            for hid, count in views.most_common(10)
            if hid in hotels
        ],
        "recent_activity": [behavior_row(e) for e in entries[:50]],
    }


# ---------------------------------------------------------------------------
# Hotel performance
# ---------------------------------------------------------------------------


async def hotel_performance(db: AsyncSession, period: str | None = None, hotel_id: uuid.UUID | None = None) -> dict[str, Any]:
    window = _window(period)
    query = select(HotelMetrics).where(
        HotelMetrics.date >= window["start_date"], HotelMetrics.date <= window["end_date"]
    )
    if hotel_id is not None:
        query = query.where(HotelMetrics.hotel_id == hotel_id)
    metrics = list((await db.execute(query.order_by(HotelMetrics.date))).scalars().all())

    per_hotel: dict[uuid.UUID, list[HotelMetrics]] = defaultdict(list)
    per_day: dict[str, list[HotelMetrics]] = defaultdict(list)
    for m in metrics:
        per_hotel[m.hotel_id].append(m)
        per_day[bucket(m.date, "day")].append(m)
    hotels = await _hotels_by_id(db, per_hotel)

    summary_rows = []
    for hid, rows in per_hotel.items():
        hotel = hotels.get(hid)
        if hotel is None:
            continue
        views = sum(m.total_views for m in rows)
        booked = sum(m.total_bookings for m in rows)
        summary_rows.append(
            {
                "hotel_id": hid,
                "hotel_name": hotel.name,
                "location": hotel.location,
                "rating": hotel.rating,
                "total_views": views,
                "total_bookings": booked,
                "total_revenue": _money(m.total_revenue for m in rows),
                "average_rating": _avg([m.average_rating for m in rows]),
                "total_rooms": max(m.total_rooms for m in rows),
                "average_occupancy": _avg([m.occupancy_rate for m in rows]),
                "conversion_rate": _pct(booked, views),
            }
        )
    summary_rows.sort(key=lambda row: row["total_revenue"], reverse=True)

    room_types: dict[str, list] = defaultdict(list)
    for hotel in (await db.execute(select(Hotel))).scalars().all():
        for room in hotel.rooms:
            room_types[room.type].append(room)
    room_type_rows = [
        {
            "room_type": room_type,
            "total_rooms": len(rooms),
            "average_price": _avg([float(r.price) for r in rooms]),
            "total_bookings": sum(r.total_bookings for r in rooms),
            "average_rating": _avg([r.average_rating for r in rooms]),
        }
        for room_type, rooms in room_types.items()
    ]
    room_type_rows.sort(key=lambda row: row["total_bookings"], reverse=True)

    return {
        **window,
        "hotel_id": hotel_id,
        "summary": {
            "total_hotels": len(summary_rows),
            "total_views": sum(r["total_views"] for r in summary_rows),
            "total_bookings": sum(r["total_bookings"] for r in summary_rows),
            "total_revenue": round(sum(r["total_revenue"] for r in summary_rows), 2),
        },
        "performance_summary": summary_rows,
        "top_hotels": summary_rows[:10],
        "revenue_trends": [
            {
                "date": day,
                "total_revenue": _money(m.total_revenue for m in rows),
                "total_bookings": sum(m.total_bookings for m in rows),
                "total_views": sum(m.total_views for m in rows),
            }
            for day, rows in sorted(per_day.items())
        ],
        "room_type_performance": room_type_rows,
        "daily_metrics": [record_row(m) for m in metrics],
    }


# ---------------------------------------------------------------------------
# Searches
# ---------------------------------------------------------------------------


async def search_analytics(db: AsyncSession, period: str | None = None, search_query: str | None = None) -> dict[str, Any]:
    window = _window(period)
    query = select(SearchAnalytics).where(
        SearchAnalytics.timestamp >= window["start_date"], SearchAnalytics.timestamp <= window["end_date"]
    )
    if search_query:
        query = query.where(SearchAnalytics.search_query.ilike(f"%{search_query}%"))
    searches = list((await db.execute(query.order_by(SearchAnalytics.timestamp.desc()))).scalars().all())

    def summarize(rows: list[SearchAnalytics]) -> dict[str, Any]:
        return {
            "count": len(rows),
            "unique_users": len({r.user_id for r in rows if r.user_id}),
            "average_results": _avg([r.results_count for r in rows if r.results_count is not None]),
        }

    by_query: dict[str | None, list[SearchAnalytics]] = defaultdict(list)
    by_day: dict[str, list[SearchAnalytics]] = defaultdict(list)
    clicks: dict[str, list[int]] = defaultdict(list)
    for entry in searches:
        by_query[entry.search_query].append(entry)
        by_day[bucket(entry.timestamp, "day")].append(entry)
        for click in entry.clicked_results or []:
            if click.get("hotel_id"):
                clicks[str(click["hotel_id"])].append(click.get("position") or 0)

    query_rows = [{"search_query": q, **summarize(rows)} for q, rows in by_query.items()]
    query_rows.sort(key=lambda row: row["count"], reverse=True)

    hotels = await _hotels_by_id(db, (uuid.UUID(hid) for hid in clicks))
    clicked_rows = []
    for hid, positions in clicks.items():
        hotel = hotels.get(uuid.UUID(hid))
        if hotel is None:
            continue
        clicked_rows.append(
            {
                "hotel_id": hid,
                "hotel_name": hotel.name,
                "location": hotel.location,
                "click_count": len(positions),
                "average_position": _avg(positions),
            }
        )
    clicked_rows.sort(key=lambda row: row["click_count"], reverse=True)

    return {
        **window,
        "search_query": search_query,
        "summary": {
            "total_searches": len(searches),
            "unique_users": len({s.user_id for s in searches if s.user_id}),
            "unique_queries": len({s.search_query for s in searches if s.search_query}),
        },
        "query_distribution": query_rows[:20],
        "search_trends": [
            {
                "date": day,
                "total_searches": len(rows),
                "unique_users": summarize(rows)["unique_users"],
                "average_results": summarize(rows)["average_results"],
            }
            for day, rows in sorted(by_day.items())
        ],
        "clicked_results": clicked_rows[:10],
        "filter_usage": {
            "total_searches": len(searches),
            "searches_with_filters": sum(1 for s in searches if s.filters),
        },
        "recent_searches": [record_row(s) for s in searches[:50]],
    }


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


def score_bucket(score: float) -> float | str:
    """Lower bound of the score bucket; scores outside ``[0, 1)`` land in ``"Other"``."""
    for lower, upper in zip(SCORE_BOUNDARIES, SCORE_BOUNDARIES[1:]):
        if lower <= score < upper:
            return lower
    return "Other"


def _engagement(rows: list[Recommendation]) -> dict[str, Any]:
    clicks = sum(1 for r in rows if r.clicked)
    return {
        "total_recommendations": len(rows),
        "total_clicks": clicks,
        "average_score": _avg([r.score for r in rows], 4),
        "click_through_rate": _pct(clicks, len(rows)),
    }


async def recommendation_analytics(
    db: AsyncSession,
    period: str | None = None,
    algorithm: str | None = None,
    user_id: uuid.UUID | None = None,
) -> dict[str, Any]:
    window = _window(period)
    query = select(Recommendation).where(
        Recommendation.generated_at >= window["start_date"], Recommendation.generated_at <= window["end_date"]
    )
    if algorithm:
        query = query.where(Recommendation.algorithm == algorithm)
    if user_id is not None:
        query = query.where(Recommendation.user_id == user_id)
    recs = list((await db.execute(query.order_by(Recommendation.generated_at.desc()))).scalars().all())

    by_algorithm: dict[str, list[Recommendation]] = defaultdict(list)
    by_bucket: dict[float | str, list[Recommendation]] = defaultdict(list)
    by_hotel: dict[uuid.UUID, list[Recommendation]] = defaultdict(list)
    by_user: dict[uuid.UUID, list[Recommendation]] = defaultdict(list)
    for rec in recs:
        by_algorithm[rec.algorithm].append(rec)
        by_bucket[score_bucket(rec.score)].append(rec)
        by_hotel[rec.hotel_id].append(rec)
        by_user[rec.user_id].append(rec)

    hotels = await _hotels_by_id(db, by_hotel)
    users = await _users_by_id(db, by_user)

    algorithm_rows = [{"algorithm": name, **_engagement(rows)} for name, rows in by_algorithm.items()]
    algorithm_rows.sort(key=lambda row: row["click_through_rate"], reverse=True)

    hotel_rows = [
        {
            "hotel_id": hid,
            "hotel_name": hotels[hid].name,
            "location": hotels[hid].location,
            "rating": hotels[hid].rating,
            **_engagement(rows),
        }
        for hid, rows in by_hotel.items()
        if hid in hotels
    ]
    hotel_rows.sort(key=lambda row: row["total_recommendations"], reverse=True)

    user_rows = [
        {
            "user_id": uid,
            "user_name": users[uid].full_name,
            "user_email": users[uid].email,
            **_engagement(rows),
        }
        for uid, rows in by_user.items()
        if uid in users
    ]
    user_rows.sort(key=lambda row: row["click_through_rate"], reverse=True)

    numeric_buckets = sorted(b for b in by_bucket if b != "Other")
    bucket_order = numeric_buckets + (["Other"] if "Other" in by_bucket else [])

    return {
        **window,
        "algorithm": algorithm,
        "user_id": user_id,
        "summary": {
            "total_recommendations": len(recs),
            "unique_users": len(by_user),
            "unique_hotels": len(by_hotel),
            "total_clicks": sum(1 for r in recs if r.clicked),
        },
        "algorithm_performance": algorithm_rows,
        "score_distribution": [
            {
                "bucket": key,
                "count": len(by_bucket[key]),
                "average_click_rate": _avg([1 if r.clicked else 0 for r in by_bucket[key]], 4),
            }
            for key in bucket_order
        ],
        "top_recommended_hotels": hotel_rows[:10],
        "user_engagement": user_rows[:20],
        "recent_recommendations": [record_row(r) for r in recs[:50]],
    }


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


async def booking_stats(db: AsyncSession, period: str | None = None) -> dict[str, Any]:
    window = _window(period)
    bookings = await _bookings_created(db, window["start_date"], window["end_date"])
    total_revenue = _money(b.total_amount for b in bookings if b.status in REVENUE_STATUSES)

    by_status: dict[str, list[Booking]] = defaultdict(list)
    for booking in bookings:
        by_status[booking.status].append(booking)

    distribution = {}
    for status, rows in sorted(by_status.items()):
        amounts = [float(b.total_amount or 0) for b in rows]
        distribution[status] = {
            "count": len(rows),
            "percentage": _pct(len(rows), len(bookings)),
            "revenue": round(sum(amounts), 2),
            "average_amount": _avg(amounts),
        }

    return {
        **window,
        "summary": {
            "total_bookings": len(bookings),
            "total_revenue": total_revenue,
            "average_revenue": round(total_revenue / len(bookings), 2) if bookings else 0,
        },
        "status_distribution": distribution,
    }


async def revenue_trends(db: AsyncSession, period: str | None = None, group_by: str = "day") -> dict[str, Any]:
    """Earned revenue and cancellations per hour, day, week or month bucket."""
    window = _window(period)
    bookings = await _bookings_created(db, window["start_date"], window["end_date"])

    earned: dict[str, list[float]] = defaultdict(list)
    cancelled: dict[str, list[float]] = defaultdict(list)
    for booking in bookings:
        label = bucket(booking.created_at, group_by)
        if booking.status in REVENUE_STATUSES:
            earned[label].append(float(booking.total_amount or 0))
        elif booking.status == "cancelled":
            cancelled[label].append(float(booking.total_amount or 0))

    return {
        **window,
        "group_by": group_by,
        "revenue_data": [
            {
                "bucket": label,
                "total_revenue": round(sum(amounts), 2),
                "total_bookings": len(amounts),
                "average_amount": _avg(amounts),
            }
            for label, amounts in sorted(earned.items())
        ],
        "cancellation_data": [
            {"bucket": label, "cancelled_bookings": len(amounts), "cancelled_revenue": round(sum(amounts), 2)}
            for label, amounts in sorted(cancelled.items())
        ],
    }


async def admin_performance(db: AsyncSession, period: str | None = None) -> dict[str, Any]:
    window = _window(period)
    result = await db.execute(
        select(Booking).where(
            Booking.updated_at >= window["start_date"],
            Booking.updated_at <= window["end_date"],
            Booking.assigned_to_id.is_not(None),
        )
    )
    by_admin: dict[uuid.UUID, list[Booking]] = defaultdict(list)
    for booking in result.scalars().all():
        by_admin[booking.assigned_to_id].append(booking)
    admins = await _users_by_id(db, by_admin)

    rows = []
    for admin_id, bookings in by_admin.items():
        admin = admins.get(admin_id)
        if admin is None:
            continue
        confirmed = sum(1 for b in bookings if b.status == "confirmed")
        rows.append(
            {
                "admin_id": admin_id,
                "admin_name": admin.full_name,
                "admin_email": admin.email,
                "total_bookings": len(bookings),
                "confirmed_bookings": confirmed,
                "cancelled_bookings": sum(1 for b in bookings if b.status == "cancelled"),
                "total_revenue": _money(b.total_amount for b in bookings if b.status in REVENUE_STATUSES),
                "confirmation_rate": _pct(confirmed, len(bookings)),
            }
        )
    rows.sort(key=lambda row: row["total_bookings"], reverse=True)
    return {**window, "admin_performance": rows}


# ---------------------------------------------------------------------------
# Per-user reports
# ---------------------------------------------------------------------------


async def user_analytics(db: AsyncSession, user_id: uuid.UUID, period: str | None = None) -> dict[str, Any]:
    user = await get_user(db, user_id)
    window = _window(period)
    start, end = window["start_date"], window["end_date"]

    entries = list(
        (
            await db.execute(
                select(UserBehavior)
                .where(UserBehavior.user_id == user.id, UserBehavior.timestamp >= start, UserBehavior.timestamp <= end)
                .order_by(UserBehavior.timestamp.desc())
            )
        ).scalars().all()
    )
    bookings = sorted(
        await _bookings_created(db, start, end, Booking.user_id == user.id),
        key=lambda b: b.created_at,
        reverse=True,
    )
    earning = [b for b in bookings if b.status in REVENUE_STATUSES]
    total_spent = _money(b.total_amount for b in earning)

    interactions: dict[uuid.UUID, list[UserBehavior]] = defaultdict(list)
    for entry in entries:
        if entry.hotel_id:
            interactions[entry.hotel_id].append(entry)
    hotels = await _hotels_by_id(db, interactions)
    interaction_rows = [
        {
            "hotel_id": hid,
            "hotel_name": hotels[hid].name,
            "location": hotels[hid].location,
            "total_interactions": len(rows),
            "actions": sorted({r.action for r in rows}),
        }
        for hid, rows in interactions.items()
        if hid in hotels
    ]
    interaction_rows.sort(key=lambda row: row["total_interactions"], reverse=True)

    return {
        **window,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "role": user.role,
            "is_active": user.is_active,
            "last_active": user.last_active,
            "created_at": user.created_at,
        },
        "summary": {
            "total_actions": len(entries),
            "total_bookings": len(bookings),
            "confirmed_bookings": len(earning),
            "total_spent": total_spent,
            "average_order_value": round(total_spent / len(earning), 2) if earning else 0,
        },
        "behavior_stats": [
            {"action": a["value"], "count": a["count"]} for a in _distribution(e.action for e in entries)
        ],
        "hotel_interactions": interaction_rows,
        "search_behavior": [
            {"search_query": a["value"], "count": a["count"]}
            for a in _distribution(e.search_query for e in entries if e.action == "searched")
        ][:10],
        "recent_activity": [behavior_row(e) for e in entries[:20]],
        "recent_bookings": [
            {
                "id": b.id,
                "hotel_id": b.hotel_id,
                "hotel_name": b.hotel.name if b.hotel else None,
                "start_date": b.start_date,
                "end_date": b.end_date,
                "status": b.status,
                "total_amount": float(b.total_amount),
                "created_at": b.created_at,
            }
            for b in bookings[:10]
        ],
    }


async def user_preference_insights(db: AsyncSession, user_id: uuid.UUID) -> dict[str, Any]:
    """What a user's favorites and interaction history say about their tastes."""
    user = await get_user(db, user_id)
    preferences = user.preferences or {}

    entries = list(
        (await db.execute(select(UserBehavior).where(UserBehavior.user_id == user.id))).scalars().all()
    )
    favorite_ids = []
    for raw in preferences.get("favorite_hotels") or []:
        try:
            favorite_ids.append(uuid.UUID(str(raw)))
        except ValueError:
            logger.warning("Ignoring malformed favorite hotel id %r for user %s", raw, user.id)
    hotels = await _hotels_by_id(db, [e.hotel_id for e in entries] + favorite_ids)

    per_hotel: dict[uuid.UUID, list[UserBehavior]] = defaultdict(list)
    for entry in entries:
        if entry.hotel_id in hotels:
            per_hotel[entry.hotel_id].append(entry)

    activity_rows = [
        {
            "hotel_id": hid,
            "hotel_name": hotels[hid].name,
            "location": hotels[hid].location,
            "rating": hotels[hid].rating,
            "amenities": hotels[hid].amenities,
            "price_range": hotels[hid].price_range,
            "total_interactions": len(rows),
            "last_interaction": max(r.timestamp for r in rows),
            "actions": sorted({r.action for r in rows}),
        }
        for hid, rows in per_hotel.items()
    ]
    activity_rows.sort(key=lambda row: row["total_interactions"], reverse=True)
    activity_rows = activity_rows[:20]

    browsing = [hotels[e.hotel_id] for e in entries if e.action in ("viewed", "searched") and e.hotel_id in hotels]
    prices = [float(h.base_price) for h in browsing if h.base_price is not None]
    locations = Counter(h.location for h in browsing)
    location_rows = [{"location": loc, "visit_count": count} for loc, count in locations.most_common(10)]

    return {
        "user": {
            "id": user.id,
            "preferences": preferences,
            "favorite_hotels": [
                {
                    "id": hid,
                    "name": hotels[hid].name,
                    "location": hotels[hid].location,
                    "rating": hotels[hid].rating,
                    "amenities": hotels[hid].amenities,
                    "price_range": hotels[hid].price_range,
                }
                for hid in favorite_ids
                if hid in hotels
            ],
        },
        "activity_preferences": activity_rows,
        "price_preferences": {
            "average_price": _avg(prices),
            "min_price": min(prices) if prices else 0,
            "max_price": max(prices) if prices else 0,
        },
        "location_preferences": location_rows,
        "recommendation_insights": {
            "total_interactions": len(activity_rows),
            "top_hotels": activity_rows[:5],
            "preferred_locations": location_rows[:5],
        },
    }


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


async def export_records(
    db: AsyncSession,
    record_type: str,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 1000,
) -> list[dict[str, Any]]:
    """Raw analytics rows of one type, optionally restricted to ``[start, end]``."""
    if record_type not in ANALYTICS_EXPORTS:
        raise ValidationFailed("Invalid analytics type")
    model, moment = ANALYTICS_EXPORTS[record_type]
    query = select(model)
    if start is not None and end is not None:
        query = query.where(moment >= start, moment <= end)
    result = await db.execute(query.order_by(moment.desc()).limit(limit))
    rows = [record_row(record) for record in result.scalars().all()]
    logger.info("Exported %d %s rows", len(rows), record_type)
    return rows
