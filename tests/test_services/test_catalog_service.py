"""Service tests for catalog search, featured listing and lookups."""

import uuid

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.exceptions import NotFound
from stayhub.models.analytics import SearchAnalytics, UserBehavior
from stayhub.models.user import User
from stayhub.schemas.hotel import HotelFilters
from stayhub.services import catalog_service


@pytest_asyncio.fixture
async def catalog(make_hotel):
    return {
        "goa": await make_hotel(),
        "mumbai": await make_hotel(
            name="Marine Drive Business",
            location="Mumbai",
            rating=4.8,
            amenities=["wifi", "gym"],
            price_range="$$",
            category="Business Hotels",
            contact={"city": "Mumbai", "state": "Maharashtra", "country": "India"},
        ),
        "closed": await make_hotel(name="Closed Lodge", location="Goa", is_active=False),
    }


class TestSearch:
    async def test_only_active_hotels_sorted_by_rating(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.search_hotels(db_session, HotelFilters())
        assert total == 2
        assert [h.name for h in hotels] == ["Marine Drive Business", "Seaside Grand"]

    async def test_sort_ascending_by_name(self, db_session: AsyncSession, catalog):
        hotels, _ = await catalog_service.search_hotels(db_session, HotelFilters(), sort_by="name", sort_order="asc")
        assert [h.name for h in hotels] == ["Marine Drive Business", "Seaside Grand"]

    async def test_location_matches_contact_fields(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.search_hotels(db_session, HotelFilters(location="maharashtra"))
        assert total == 1
        assert hotels[0].id == catalog["mumbai"].id

    async def test_all_amenities_required(self, db_session: AsyncSession, catalog):
        _, total = await catalog_service.search_hotels(db_session, HotelFilters(amenities="wifi,pool"))
        assert total == 1
        _, total = await catalog_service.search_hotels(db_session, HotelFilters(amenities="wifi"))
        assert total == 2

    async def test_room_type_and_guests(self, db_session: AsyncSession, catalog):
        _, total = await catalog_service.search_hotels(db_session, HotelFilters(room_type="suite", guests=4))
        assert total == 2
        _, total = await catalog_service.search_hotels(db_session, HotelFilters(guests=5))
        assert total == 0

    async def test_min_rating_and_category(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.search_hotels(
            db_session, HotelFilters(rating=4.6, category="business")
        )
        assert total == 1
        assert hotels[0].name == "Marine Drive Business"

    async def test_pagination(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.search_hotels(db_session, HotelFilters(), page=2, limit=1)
        assert total == 2
        assert [h.name for h in hotels] == ["Seaside Grand"]

    async def test_filtered_search_is_recorded(self, db_session: AsyncSession, catalog, customer: User):
        await catalog_service.search_hotels(
            db_session, HotelFilters(query="grand", location="Goa"), user=customer
        )
        entry = (await db_session.execute(select(SearchAnalytics))).scalar_one()
        assert entry.search_query == "grand"
        assert entry.filters == {"location": "Goa"}
        assert entry.results_count == 1
        assert entry.user_id == customer.id

        behavior = (await db_session.execute(select(UserBehavior))).scalar_one()
        assert behavior.action == "searched"

    async def test_unfiltered_listing_not_recorded(self, db_session: AsyncSession, catalog):
        await catalog_service.search_hotels(db_session, HotelFilters())
        assert (await db_session.execute(select(SearchAnalytics))).first() is None


class TestFeatured:
    async def test_only_featured_by_rating(self, db_session: AsyncSession, make_hotel):
        await make_hotel(name="Plain", rating=5.0)
        await make_hotel(name="Good", rating=4.0, featured=True)
        await make_hotel(name="Best", rating=4.9, featured=True)
        await make_hotel(name="Hidden", rating=4.95, featured=True, is_active=False)

        hotels = await catalog_service.featured_hotels(db_session, limit=10)
        assert [h.name for h in hotels] == ["Best", "Good"]

    async def test_no_fallback_when_few_featured(self, db_session: AsyncSession, make_hotel):
        await make_hotel(name="Plain")
        assert await catalog_service.featured_hotels(db_session, limit=5) == []


class TestLookups:
    async def test_by_price_range(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.hotels_by_price_range(db_session, "$$$")
        assert total == 1
        assert hotels[0].id == catalog["goa"].id

    async def test_by_amenity(self, db_session: AsyncSession, catalog):
        _, total = await catalog_service.hotels_by_amenity(db_session, "gym")
        assert total == 1

    async def test_by_location_skips_inactive(self, db_session: AsyncSession, catalog):
        hotels, total = await catalog_service.hotels_by_location(db_session, "goa")
        assert total == 1
        assert hotels[0].id == catalog["goa"].id

    async def test_inactive_hotel_hidden(self, db_session: AsyncSession, catalog):
        with pytest.raises(NotFound):
            await catalog_service.get_public_hotel(db_session, catalog["closed"].id)

    async def test_unknown_hotel(self, db_session: AsyncSession):
        with pytest.raises(NotFound, match="Hotel not found"):
            await catalog_service.get_public_hotel(db_session, uuid.uuid4())

    async def test_signed_in_view_recorded(self, db_session: AsyncSession, catalog, customer: User):
        await catalog_service.get_public_hotel(db_session, catalog["goa"].id, viewer=customer)
        behavior = (await db_session.execute(select(UserBehavior))).scalar_one()
        assert behavior.action == "viewed"
        assert behavior.hotel_id == catalog["goa"].id
