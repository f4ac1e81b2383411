"""Account service: signup, login, profile, activity log, preferences and favorites."""

import logging
import uuid
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.auth.jwt import create_access_token
from stayhub.auth.passwords import hash_password, verify_password
from stayhub.database import utcnow
from stayhub.exceptions import AccountDisabled, DuplicateIdentity, InvalidCredentials, NotFound
from stayhub.models.analytics import UserBehavior
from stayhub.models.booking import Booking
from stayhub.models.hotel import Hotel
from stayhub.models.user import User, default_preferences
from stayhub.schemas.user import ActivityCreate, PreferencesUpdate, ProfileUpdate, SignupRequest

logger = logging.getLogger(__name__)

# Profile activity types mirrored into the behavior log under a coarser action.
ACTIVITY_TO_BEHAVIOR = {
    "viewed_hotel": "viewed",
    "viewed_room": "viewed",
    "searched": "searched",
    "draft_booking": "booked",
    "completed_booking": "booked",
    "cancelled_booking": "cancelled",
    "rated_hotel": "rated",
    "rated_room": "rated",
    "favorited_hotel": "favorited",
}


def issue_token(user: User) -> str:
    return create_access_token(str(user.id), user.email, user.role)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def ensure_unique_identity(
    db: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise ``DuplicateIdentity`` naming whichever of email/username is taken."""
    conditions = []
    if email is not None:
        conditions.append(User.email == email)
    if username is not None:
        conditions.append(User.username == username)
    if not conditions:
        return

    query = select(User).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    existing = (await db.execute(query.limit(1))).scalar_one_or_none()
    if existing is None:
        return
    if email is not None and existing.email == email:
        raise DuplicateIdentity("Email already registered")
    raise DuplicateIdentity("Username already taken")


async def signup(db: AsyncSession, body: SignupRequest) -> tuple[User, str]:
    """Create a customer account and return it with a session token."""
    await ensure_unique_identity(db, body.username, body.email)

    user = User(
        username=body.username,
        email=body.email,
        hashed_password=hash_password(body.password),
        role="customer",
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        address=body.address,
        date_of_birth=body.date_of_birth,
        preferences=default_preferences(),
        activities=[],
    )
    db.add(user)
    await db.flush()
    logger.info("New account %s (%s)", user.id, user.username)
    return user, issue_token(user)


async def login(db: AsyncSession, email: str, password: str) -> tuple[User, str]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    if not user.is_active:
        logger.warning("Login attempt on deactivated account %s", user.id)
        raise AccountDisabled()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentials()

    now = utcnow()
    user.last_login = now
    user.last_active = now
    await db.flush()
    return user, issue_token(user)


async def booking_ids_for(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(
        select(Booking.id).where(Booking.user_id == user_id).order_by(Booking.created_at)
    )
    return list(result.scalars().all())


def merge_preferences(current: dict[str, Any] | None, updates: PreferencesUpdate) -> dict[str, Any]:
    merged = {**default_preferences(), **(current or {})}
    merged.update(updates.model_dump(exclude_unset=True, mode="json"))
    return merged


async def update_profile(db: AsyncSession, user: User, body: ProfileUpdate) -> User:
    changes = body.model_dump(exclude_unset=True, exclude={"preferences"})
    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)
    if body.preferences is not None:
        user.preferences = merge_preferences(user.preferences, body.preferences)
    await db.flush()
    return user


async def update_preferences(db: AsyncSession, user: User, body: PreferencesUpdate) -> dict[str, Any]:
    user.preferences = merge_preferences(user.preferences, body)
    await db.flush()
    return user.preferences


async def record_behavior(
    db: AsyncSession,
    user_id: uuid.UUID,
    action: str,
    hotel_id: uuid.UUID | None = None,
    room_id: uuid.UUID | None = None,
    search_query: str | None = None,
    filters: dict[str, Any] | None = None,
    session_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> UserBehavior:
    behavior = UserBehavior(
        user_id=user_id,
        hotel_id=hotel_id,
        room_id=room_id,
        action=action,
        search_query=search_query,
        filters=filters,
        session_id=session_id,
        metadata_=metadata,
    )
    db.add(behavior)
    await db.flush()
    return behavior


async def add_activity(db: AsyncSession, user: User, body: ActivityCreate) -> dict[str, Any]:
    """Append an activity to the user's log and mirror it into the behavior log."""
    now = utcnow()
    entry = body.model_dump(mode="json")
    entry["timestamp"] = now.isoformat()
    user.activities = [*(user.activities or []), entry]
    user.last_active = now

    action = ACTIVITY_TO_BEHAVIOR.get(body.type)
    if action is not None:
        await record_behavior(
            db,
            user.id,
            action,
            hotel_id=body.hotel_id,
            room_id=body.room_id,
            search_query=body.search_query,
            session_id=body.session_id,
            metadata=body.metadata,
        )
    await db.flush()
    return entry


def list_activities(
    user: User,
    activity_type: str | None = None,
    hotel_id: uuid.UUID | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Newest-first view of the activity log."""
    activities = list(user.activities or [])
    if activity_type:
        activities = [a for a in activities if a.get("type") == activity_type]
    if hotel_id is not None:
        activities = [a for a in activities if a.get("hotel_id") == str(hotel_id)]
    activities.sort(key=lambda a: a.get("timestamp") or "", reverse=True)
    return activities[:limit]


async def toggle_favorite(db: AsyncSession, user: User, hotel_id: uuid.UUID) -> tuple[bool, list[str]]:
    """Add or remove a hotel from favorites. Returns ``(added, favorites)``."""
    if await db.get(Hotel, hotel_id) is None:
        raise NotFound("Hotel not found")

    preferences = {**default_preferences(), **(user.preferences or {})}
    favorites = [str(h) for h in preferences.get("favorite_hotels") or []]
    key = str(hotel_id)
    added = key not in favorites
    if added:
        favorites.append(key)
        await record_behavior(db, user.id, "favorited", hotel_id=hotel_id)
    else:
        favorites.remove(key)

    preferences["favorite_hotels"] = favorites
    user.preferences = preferences
    await db.flush()
    return added, favorites
