"""User account router: signup, login, profile, activities, preferences and favorites."""

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import get_current_user, get_db
from stayhub.models.user import User
from stayhub.schemas.booking import BookingResponse
from stayhub.schemas.user import (
    ActivityCreate,
    ActivityResponse,
    AuthResponse,
    FavoriteToggle,
    LoginRequest,
    PreferencesUpdate,
    ProfileResponse,
    ProfileUpdate,
    SignupRequest,
    UserResponse,
)
from stayhub.services import booking_service, user_service

router = APIRouter(prefix="/api/users", tags=["users"])


async def _profile(db: AsyncSession, user: User) -> ProfileResponse:
    profile = ProfileResponse.model_validate(user)
    profile.bookings = await user_service.booking_ids_for(db, user.id)
    return profile


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Create a customer account and return a session token."""
    user, token = await user_service.signup(db, body)
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    user, token = await user_service.login(db, body.email, body.password)
    return AuthResponse(message="Login successful", token=token, user=UserResponse.model_validate(user))


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    return await _profile(db, current_user)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    user = await user_service.update_profile(db, current_user, body)
    return await _profile(db, user)


@router.put("/activities", response_model=ActivityResponse, summary="Log an activity")
async def add_activity(
    body: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    return await user_service.add_activity(db, current_user, body)


@router.get("/activities", response_model=list[ActivityResponse])
async def list_activities(
    type: str | None = Query(None, description="Only activities of this type"),
    hotel_id: uuid.UUID | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
) -> list[dict[str, Any]]:
    """The caller's activity log, newest first."""
    return user_service.list_activities(current_user, type, hotel_id, limit)


@router.get("/preferences")
async def get_preferences(current_user: User = Depends(get_current_user)) -> dict[str, Any]:
    return {"preferences": current_user.preferences}


@router.put("/preferences")
async def update_preferences(
    body: PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    preferences = await user_service.update_preferences(db, current_user, body)
    return {"message": "Preferences updated successfully", "preferences": preferences}


@router.post("/favorites", summary="Add or remove a favorite hotel")
async def toggle_favorite(
    body: FavoriteToggle,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    added, favorites = await user_service.toggle_favorite(db, current_user, body.hotel_id)
    return {
        "message": "Hotel added to favorites" if added else "Hotel removed from favorites",
        "is_favorite": added,
        "favorite_hotels": favorites,
    }


@router.get("/bookings", response_model=list[BookingResponse])
async def my_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await booking_service.list_user_bookings(db, current_user.id)
