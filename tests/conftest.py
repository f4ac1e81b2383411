"""Shared test configuration and fixtures.

Every test gets a fresh database (in-memory SQLite by default; set
``TEST_DATABASE_URL`` to run against PostgreSQL) and a session wrapped in a
transaction that always rolls back.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, timedelta
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from stayhub.auth.jwt import create_access_token
from stayhub.auth.passwords import hash_password
from stayhub.database import Base, get_db
from stayhub.main import app
from stayhub.models import Booking, Hotel, Room, User
from stayhub.models.user import default_preferences

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection keeps the in-memory database alive for the whole test.
        return create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Per-test database and transactional session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories: users, hotels and bookings inserted directly in the DB
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """Return a coroutine that creates a user with the given role."""

    async def _make(role: str = "customer", **overrides) -> User:
        unique = uuid.uuid4().hex[:8]
        fields = {
            "username": f"{role}_{unique}",
            "email": f"{role}-{unique}@test.com",
            "hashed_password": hash_password("secret1"),
            "role": role,
            "first_name": "Test",
            "last_name": role.title(),
            "preferences": default_preferences(),
            "activities": [],
            "is_active": True,
        }
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def auth_headers_for():
    """Return a function building Authorization headers for any user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(str(user.id), user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def customer(make_user) -> User:
    return await make_user("customer")


@pytest_asyncio.fixture
async def customer_headers(customer: User, auth_headers_for) -> dict[str, str]:
    return auth_headers_for(customer)


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin")


@pytest_asyncio.fixture
async def admin_headers(admin: User, auth_headers_for) -> dict[str, str]:
    return auth_headers_for(admin)


@pytest_asyncio.fixture
async def make_hotel(db_session: AsyncSession):
    """Return a coroutine that creates an active hotel with rooms 101 (deluxe) and 201 (suite)."""

    async def _make(**overrides) -> Hotel:
        fields = {
            "name": "Seaside Grand",
            "location": "Panaji, Goa",
            "description": "Beachfront resort with a rooftop pool.",
            "rating": 4.5,
            "amenities": ["wifi", "pool", "spa"],
            "price_range": "$$$",
            "base_price": Decimal("150.00"),
            "contact": {"city": "Panaji", "state": "Goa", "country": "India"},
            "business_hours": {},
            "seasonal_pricing": [],
            "images": [],
            "category": "Resort Hotels",
            "is_active": True,
        }
        fields.update(overrides)
        hotel = Hotel(**fields, rooms=[])
        hotel.rooms.append(
            Room(type="deluxe", name="Deluxe King", room_number="101", capacity=2, price=Decimal("200.00"))
        )
        hotel.rooms.append(
            Room(type="suite", name="Ocean Suite", room_number="201", capacity=4, price=Decimal("350.00"))
        )
        db_session.add(hotel)
        await db_session.flush()
        await db_session.refresh(hotel)
        return hotel

    return _make


@pytest_asyncio.fixture
async def hotel(make_hotel) -> Hotel:
    return await make_hotel()


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession):
    """Return a coroutine that inserts a booking directly, bypassing the creation rules."""

    async def _make(
        user: User,
        hotel: Hotel,
        room: Room | None = None,
        status: str = "draft",
        start_offset: int = 30,
        nights: int = 3,
        **overrides,
    ) -> Booking:
        room = room or hotel.rooms[0]
        start = date.today() + timedelta(days=start_offset)
        fields = {
            "user_id": user.id,
            "hotel_id": hotel.id,
            "room_id": room.id,
            "start_date": start,
            "end_date": start + timedelta(days=nights),
            "status": status,
            "base_price": Decimal(room.price) * nights,
            "guest_info": [{"first_name": "Ada", "last_name": "Lovelace", "email": "ada@test.com"}],
        }
        fields.update(overrides)
        booking = Booking(**fields)
        db_session.add(booking)
        await db_session.flush()
        await db_session.refresh(booking)
        return booking

    return _make
