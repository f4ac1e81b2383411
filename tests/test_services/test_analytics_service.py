"""Service tests for the reporting aggregates."""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.database import utcnow
from stayhub.exceptions import ValidationFailed
from stayhub.models.analytics import HotelMetrics, Recommendation, SearchAnalytics
from stayhub.models.user import User
from stayhub.services import analytics_service
from stayhub.services.periods import bucket
from stayhub.services.user_service import record_behavior


class TestScoreBucket:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [(0.0, 0.0), (0.19, 0.0), (0.2, 0.2), (0.55, 0.4), (0.99, 0.8), (1.0, "Other"), (-0.1, "Other")],
    )
    def test_buckets(self, score: float, expected):
        assert analytics_service.score_bucket(score) == expected


class TestBookingStats:
    async def test_revenue_counts_earning_statuses_only(
        self, db_session: AsyncSession, customer: User, hotel, make_booking
    ):
        await make_booking(customer, hotel, status="confirmed", nights=2)
        await make_booking(customer, hotel, status="completed", nights=1)
        await make_booking(customer, hotel, status="cancelled", nights=3)
        await make_booking(customer, hotel, status="draft", nights=1)

        stats = await analytics_service.booking_stats(db_session, "7d")
        assert stats["period"] == "7d"
        assert stats["summary"]["total_bookings"] == 4
        assert stats["summary"]["total_revenue"] == 600.0
        assert stats["summary"]["average_revenue"] == 150.0

        cancelled = stats["status_distribution"]["cancelled"]
        assert cancelled["count"] == 1
        assert cancelled["percentage"] == 25.0
        assert cancelled["revenue"] == 600.0

    async def test_unknown_period_uses_30_days(self, db_session: AsyncSession):
        stats = await analytics_service.booking_stats(db_session, "fortnight")
        assert stats["period"] == "30d"
        assert stats["summary"] == {"total_bookings": 0, "total_revenue": 0.0, "average_revenue": 0}


class TestRevenueTrends:
    async def test_daily_buckets(self, db_session: AsyncSession, customer: User, hotel, make_booking):
        await make_booking(customer, hotel, status="confirmed", nights=1)
        await make_booking(customer, hotel, status="checked_in", nights=2)
        await make_booking(customer, hotel, status="cancelled", nights=1)

        trends = await analytics_service.revenue_trends(db_session, "30d", "day")
        today = bucket(utcnow(), "day")
        assert trends["group_by"] == "day"
        assert trends["revenue_data"] == [
            {"bucket": today, "total_revenue": 600.0, "total_bookings": 2, "average_amount": 300.0}
        ]
        assert trends["cancellation_data"] == [
            {"bucket": today, "cancelled_bookings": 1, "cancelled_revenue": 200.0}
        ]

    async def test_old_bookings_outside_window(self, db_session: AsyncSession, customer: User, hotel, make_booking):
        await make_booking(customer, hotel, status="confirmed", created_at=utcnow() - timedelta(days=40))
        trends = await analytics_service.revenue_trends(db_session, "30d", "month")
        assert trends["revenue_data"] == []


class TestDashboard:
    async def test_overview_counts(self, db_session: AsyncSession, customer: User, hotel, make_booking, make_hotel):
        await make_hotel(name="Featured Stay", featured=True, verified=True)
        await make_booking(customer, hotel, status="confirmed", nights=1)
        await make_booking(customer, hotel, status="draft", nights=1)
        await record_behavior(db_session, customer.id, "viewed", hotel_id=hotel.id)

        dashboard = await analytics_service.business_dashboard(db_session, "30d")
        overview = dashboard["overview"]
        assert overview["total_users"] == 1
        assert overview["total_bookings"] == 2
        assert overview["confirmed_bookings"] == 1
        assert overview["total_revenue"] == 200.0
        assert overview["conversion_rate"] == 50.0
        assert dashboard["hotels"] == {
            "total_hotels": 2,
            "active_hotels": 2,
            "featured_hotels": 1,
            "verified_hotels": 1,
        }
        assert dashboard["user_behavior"] == [{"action": "viewed", "count": 1}]


class TestBehaviorAnalytics:
    async def test_top_viewed_hotels(self, db_session: AsyncSession, customer: User, hotel):
        for _ in range(3):
            await record_behavior(db_session, customer.id, "viewed", hotel_id=hotel.id)
        await record_behavior(db_session, customer.id, "searched", search_query="goa")

        report = await analytics_service.behavior_analytics(db_session, "7d")
        assert report["summary"]["total_actions"] == 4
        assert report["summary"]["unique_users"] == 1
        assert report["action_distribution"][0] == {"action": "viewed", "count": 3}
        assert report["top_hotels"][0]["hotel_name"] == "Seaside Grand"
        assert report["top_hotels"][0]["view_count"] == 3

    async def test_action_filter(self, db_session: AsyncSession, customer: User, hotel):
        await record_behavior(db_session, customer.id, "viewed", hotel_id=hotel.id)
        await record_behavior(db_session, customer.id, "searched", search_query="goa")
        report = await analytics_service.behavior_analytics(db_session, "7d", action="searched")
        assert report["summary"]["total_actions"] == 1
        assert report["recent_activity"][0]["search_query"] == "goa"


class TestSearchAnalytics:
    async def test_queries_and_clicks(self, db_session: AsyncSession, customer: User, hotel):
        db_session.add_all(
            [
                SearchAnalytics(
                    search_query="beach",
                    filters={"location": "Goa"},
                    results_count=4,
                    clicked_results=[{"hotel_id": str(hotel.id), "position": 1, "clicked": True}],
                    user_id=customer.id,
                ),
                SearchAnalytics(search_query="beach", results_count=2, clicked_results=[]),
                SearchAnalytics(search_query="city", results_count=0, clicked_results=[]),
            ]
        )
        await db_session.flush()

        report = await analytics_service.search_analytics(db_session, "7d")
        assert report["summary"] == {"total_searches": 3, "unique_users": 1, "unique_queries": 2}
        top = report["query_distribution"][0]
        assert top["search_query"] == "beach"
        assert top["count"] == 2
        assert top["average_results"] == 3.0
        assert report["clicked_results"][0]["hotel_name"] == "Seaside Grand"
        assert report["filter_usage"]["searches_with_filters"] == 1


class TestRecommendationAnalytics:
    async def test_algorithm_and_score_breakdown(self, db_session: AsyncSession, customer: User, hotel):
        db_session.add_all(
            [
                Recommendation(user_id=customer.id, hotel_id=hotel.id, score=0.9, algorithm="hybrid", clicked=True),
                Recommendation(user_id=customer.id, hotel_id=hotel.id, score=0.85, algorithm="hybrid"),
                Recommendation(user_id=customer.id, hotel_id=hotel.id, score=0.3, algorithm="popularity"),
            ]
        )
        await db_session.flush()

        report = await analytics_service.recommendation_analytics(db_session, "7d")
        assert report["summary"]["total_recommendations"] == 3
        assert report["summary"]["total_clicks"] == 1
        hybrid = next(row for row in report["algorithm_performance"] if row["algorithm"] == "hybrid")
        assert hybrid["click_through_rate"] == 50.0
        assert [row["bucket"] for row in report["score_distribution"]] == [0.2, 0.8]
        assert report["score_distribution"][1]["count"] == 2


class TestHotelPerformance:
    async def test_summary_from_daily_metrics(self, db_session: AsyncSession, hotel):
        db_session.add_all(
            [
                HotelMetrics(hotel_id=hotel.id, total_views=100, total_bookings=5, total_revenue=Decimal("1000"), total_rooms=2),
                HotelMetrics(hotel_id=hotel.id, total_views=50, total_bookings=5, total_revenue=Decimal("500"), total_rooms=2),
            ]
        )
        await db_session.flush()

        report = await analytics_service.hotel_performance(db_session, "7d")
        row = report["performance_summary"][0]
        assert row["hotel_name"] == "Seaside Grand"
        assert row["total_views"] == 150
        assert row["total_revenue"] == 1500.0
        assert row["conversion_rate"] == pytest.approx(6.67)
        assert {r["room_type"] for r in report["room_type_performance"]} == {"deluxe", "suite"}


class TestExportRecords:
    async def test_unknown_type(self, db_session: AsyncSession):
        with pytest.raises(ValidationFailed, match="Invalid analytics type"):
            await analytics_service.export_records(db_session, "bookings")

    async def test_behavior_rows(self, db_session: AsyncSession, customer: User):
        await record_behavior(db_session, customer.id, "searched", search_query="spa")
        rows = await analytics_service.export_records(db_session, "user_behavior")
        assert len(rows) == 1
        assert rows[0]["search_query"] == "spa"

    async def test_date_window(self, db_session: AsyncSession, customer: User):
        await record_behavior(db_session, customer.id, "searched")
        now = utcnow()
        rows = await analytics_service.export_records(
            db_session, "user_behavior", now - timedelta(days=10), now - timedelta(days=5)
        )
        assert rows == []


class TestUserReports:
    async def test_user_analytics(self, db_session: AsyncSession, customer: User, hotel, make_booking):
        await make_booking(customer, hotel, status="completed", nights=2)
        await record_behavior(db_session, customer.id, "viewed", hotel_id=hotel.id)

        report = await analytics_service.user_analytics(db_session, customer.id, "30d")
        assert report["user"]["username"] == customer.username
        assert report["summary"]["total_spent"] == 400.0
        assert report["hotel_interactions"][0]["actions"] == ["viewed"]
        assert report["recent_bookings"][0]["hotel_name"] == "Seaside Grand"

    async def test_preference_insights(self, db_session: AsyncSession, customer: User, hotel):
        customer.preferences = {**customer.preferences, "favorite_hotels": [str(hotel.id), "garbage"]}
        await db_session.flush()
        await record_behavior(db_session, customer.id, "viewed", hotel_id=hotel.id)

        insights = await analytics_service.user_preference_insights(db_session, customer.id)
        assert [h["name"] for h in insights["user"]["favorite_hotels"]] == ["Seaside Grand"]
        assert insights["price_preferences"]["average_price"] == 150.0
        assert insights["location_preferences"] == [{"location": "Panaji, Goa", "visit_count": 1}]
