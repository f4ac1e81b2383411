"""Seed the database with sample hotels, rooms, users and bookings.

Creates the schema if it is missing, then (re)creates:
- an admin account and a customer account
- five Indian hotels with rooms, in the shape the catalog import produced
- a spread of past, current and future bookings across the lifecycle

Run from the project root:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select, update

import stayhub.models  # noqa: F401  registers every table on Base.metadata
from stayhub.auth.passwords import hash_password
from stayhub.database import Base, async_session_factory, engine, utcnow
from stayhub.models.analytics import HotelMetrics, UserBehavior
from stayhub.models.booking import Booking
from stayhub.models.hotel import Hotel, Room
from stayhub.models.user import User, default_preferences

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "username": "admin",
    "email": "admin@stayhub.dev",
    "password": "admin1234",
    "first_name": "Asha",
    "last_name": "Menon",
    "role": "admin",
}

CUSTOMER_USER = {
    "username": "traveller",
    "email": "traveller@stayhub.dev",
    "password": "travel1234",
    "first_name": "Rohan",
    "last_name": "Iyer",
    "role": "customer",
}

HOTELS = [
    {
        "name": "Taj Lake Palace",
        "location": "Udaipur, Rajasthan",
        "description": "Marble palace floating on Lake Pichola, reachable only by boat.",
        "rating": 4.8,
        "amenities": ["wifi", "pool", "spa", "boat transfer", "restaurant"],
        "price_range": "$$$$",
        "category": "Luxury Hotels",
        "featured": True,
        "verified": True,
        "contact": {"city": "Udaipur", "state": "Rajasthan", "country": "India", "phone": ["+91 294 242 8800"]},
        "business_hours": {"check_in": "14:00", "check_out": "12:00", "front_desk": "24 hours"},
        "rooms": [
            {"type": "deluxe", "name": "Palace Room", "room_number": "101", "capacity": 2, "price": "420.00"},
            {"type": "suite", "name": "Lake View Suite", "room_number": "201", "capacity": 3, "price": "780.00"},
            {"type": "presidential", "name": "Grand Royal Suite", "room_number": "301", "capacity": 4, "price": "1600.00"},
        ],
    },
    {
        "name": "The Leela Goa",
        "location": "Cavelossim, Goa",
        "description": "Beachfront resort with lagoon-side villas and a nine-hole golf course.",
        "rating": 4.6,
        "amenities": ["wifi", "pool", "beach access", "golf", "spa"],
        "price_range": "$$$",
        "category": "Resort Hotels",
        "featured": True,
        "verified": True,
        "contact": {"city": "Cavelossim", "state": "Goa", "country": "India", "phone": ["+91 832 662 1234"]},
        "business_hours": {"check_in": "15:00", "check_out": "11:00"},
        "rooms": [
            {"type": "deluxe", "name": "Lagoon Terrace", "room_number": "L12", "capacity": 2, "price": "260.00"},
            {"type": "suite", "name": "Royal Villa", "room_number": "V04", "capacity": 4, "price": "540.00"},
        ],
    },
    {
        "name": "Trident Nariman Point",
        "location": "Mumbai, Maharashtra",
        "description": "Business hotel on Marine Drive with views over the Arabian Sea.",
        "rating": 4.4,
        "amenities": ["wifi", "gym", "business center", "restaurant"],
        "price_range": "$$$",
        "category": "Business Hotels",
        "verified": True,
        "contact": {"city": "Mumbai", "state": "Maharashtra", "country": "India"},
        "business_hours": {"check_in": "14:00", "check_out": "12:00"},
        "rooms": [
            {"type": "standard", "name": "Superior Room", "room_number": "1204", "capacity": 2, "price": "180.00"},
            {"type": "semi-deluxe", "name": "Bay View Room", "room_number": "1510", "capacity": 2, "price": "220.00"},
        ],
    },
    {
        "name": "Neemrana Fort-Palace",
        "location": "Neemrana, Rajasthan",
        "description": "Fifteenth-century hill fort turned heritage hotel with terraced gardens.",
        "rating": 4.2,
        "amenities": ["wifi", "pool", "zipline", "restaurant"],
        "price_range": "$$",
        "category": "Boutique Hotels",
        "contact": {"city": "Neemrana", "state": "Rajasthan", "country": "India"},
        "business_hours": {"check_in": "13:00", "check_out": "11:00"},
        "rooms": [
            {"type": "non-deluxe", "name": "Courtyard Room", "room_number": "C3", "capacity": 2, "price": "95.00"},
            {"type": "deluxe", "name": "Mahal Room", "room_number": "M1", "capacity": 3, "price": "150.00"},
        ],
    },
    {
        "name": "Spice Village",
        "location": "Thekkady, Kerala",
        "description": "Eco resort of thatched cottages on the edge of Periyar tiger reserve.",
        "rating": 4.5,
        "amenities": ["wifi", "ayurveda", "nature walks", "restaurant"],
        "price_range": "$$",
        "category": "Resort Hotels",
        "featured": True,
        "contact": {"city": "Thekkady", "state": "Kerala", "country": "India"},
        "business_hours": {"check_in": "14:00", "check_out": "11:00"},
        "rooms": [
            {"type": "standard", "name": "Garden Cottage", "room_number": "G7", "capacity": 2, "price": "130.00"},
            {"type": "suite", "name": "Pepper Villa", "room_number": "P1", "capacity": 4, "price": "290.00"},
        ],
    },
]

# (hotel name, room number, start offset from today, nights, status, special requests)
BOOKINGS = [
    ("Taj Lake Palace", "101", -40, 3, "completed", "Anniversary dinner on the terrace"),
    ("Taj Lake Palace", "201", 10, 2, "confirmed", None),
    ("The Leela Goa", "L12", -2, 5, "checked_in", "Early check-in if possible"),
    ("The Leela Goa", "V04", 21, 4, "pending", "Two extra beds for children"),
    ("Trident Nariman Point", "1204", -15, 2, "checked_out", None),
    ("Trident Nariman Point", "1510", 5, 1, "cancelled", None),
    ("Neemrana Fort-Palace", "M1", 30, 2, "draft", None),
    ("Spice Village", "G7", -60, 4, "completed", "Vegetarian meals only"),
]

# Statuses that stamp the matching lifecycle timestamp.
STAMPED = {
    "confirmed": ("confirmed_at",),
    "checked_in": ("confirmed_at", "checked_in_at"),
    "checked_out": ("confirmed_at", "checked_in_at", "checked_out_at"),
    "completed": ("confirmed_at", "checked_in_at", "checked_out_at"),
}


def _user(data: dict) -> User:
    return User(
        username=data["username"],
        email=data["email"],
        hashed_password=hash_password(data["password"]),
        first_name=data["first_name"],
        last_name=data["last_name"],
        role=data["role"],
        preferences=default_preferences(),
        activities=[],
        is_active=True,
        email_verified=True,
    )


def _hotel(data: dict, admin: User) -> Hotel:
    values = {key: value for key, value in data.items() if key != "rooms"}
    hotel = Hotel(**values, created_by_id=admin.id, last_updated_by_id=admin.id, rooms=[])
    for room in data["rooms"]:
        price = Decimal(room["price"])
        hotel.rooms.append(Room(**{**room, "price": price, "base_price": price}))
    return hotel


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample data.

    Idempotent: removes the seeded accounts, hotels and everything that
    references them before re-creating a clean set.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        emails = [ADMIN_USER["email"], CUSTOMER_USER["email"]]
        hotel_names = [h["name"] for h in HOTELS]

        existing_users = (await session.execute(select(User.id).where(User.email.in_(emails)))).scalars().all()
        existing_hotels = (await session.execute(select(Hotel.id).where(Hotel.name.in_(hotel_names)))).scalars().all()
        if existing_users or existing_hotels:
            print("Seed data already present. Deleting and re-seeding...")
            await session.execute(
                delete(Booking).where(Booking.user_id.in_(existing_users) | Booking.hotel_id.in_(existing_hotels))
            )
            await session.execute(delete(UserBehavior).where(UserBehavior.user_id.in_(existing_users)))
            await session.execute(delete(HotelMetrics).where(HotelMetrics.hotel_id.in_(existing_hotels)))
            await session.execute(delete(Room).where(Room.hotel_id.in_(existing_hotels)))
            await session.execute(delete(Hotel).where(Hotel.id.in_(existing_hotels)))
            await session.execute(delete(User).where(User.id.in_(existing_users)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        admin = _user(ADMIN_USER)
        customer = _user(CUSTOMER_USER)
        session.add_all([admin, customer])
        await session.flush()
        print(f"Created admin {admin.email} and customer {customer.email}")

        # ------------------------------------------------------------------
        # 2. Hotels and rooms
        # ------------------------------------------------------------------
        hotels: dict[str, Hotel] = {}
        for data in HOTELS:
            hotel = _hotel(data, admin)
            session.add(hotel)
            await session.flush()
            session.add(HotelMetrics(hotel_id=hotel.id, total_rooms=len(hotel.rooms)))
            hotels[hotel.name] = hotel
            print(f"   {hotel.name} ({hotel.location}), {len(hotel.rooms)} rooms")

        # ------------------------------------------------------------------
        # 3. Bookings, with the counters the booking service would maintain
        # ------------------------------------------------------------------
        today = date.today()
        now = utcnow()
        for hotel_name, room_number, offset, nights, status, requests in BOOKINGS:
            hotel = hotels[hotel_name]
            room = next(r for r in hotel.rooms if r.room_number == room_number)
            start = today + timedelta(days=offset)
            booking = Booking(
                user_id=customer.id,
                hotel_id=hotel.id,
                room_id=room.id,
                start_date=start,
                end_date=start + timedelta(days=nights),
                status=status,
                guest_count=min(2, room.capacity),
                guest_info=[
                    {"first_name": customer.first_name, "last_name": customer.last_name, "email": customer.email}
                ],
                base_price=room.price * nights,
                special_requests=requests,
            )
            for stamp in STAMPED.get(status, ()):
                setattr(booking, stamp, now)
            if status == "cancelled":
                booking.cancellation = {
                    "cancelled_at": now.isoformat(),
                    "cancelled_by": str(customer.id),
                    "reason": "Change of plans",
                    "refund_status": "pending",
                }
            session.add(booking)
            await session.flush()

            await session.execute(
                update(Hotel).where(Hotel.id == hotel.id).values(total_bookings=Hotel.total_bookings + 1)
            )
            await session.execute(
                update(Room).where(Room.id == room.id).values(total_bookings=Room.total_bookings + 1)
            )
            await session.execute(
                update(User).where(User.id == customer.id).values(total_bookings=User.total_bookings + 1)
            )

        await session.commit()

        print()
        print("=" * 60)
        print("Seed Summary")
        print("=" * 60)
        print(f"   Admin:     {ADMIN_USER['email']} / {ADMIN_USER['password']}")
        print(f"   Customer:  {CUSTOMER_USER['email']} / {CUSTOMER_USER['password']}")
        print(f"   Hotels:    {len(hotels)}")
        print(f"   Rooms:     {sum(len(h.rooms) for h in hotels.values())}")
        print(f"   Bookings:  {len(BOOKINGS)}")
        print("=" * 60)
        print("Done! You can now log in at /api/users/login")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
