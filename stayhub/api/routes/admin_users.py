"""Admin user management router."""

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import PageParams, admin_only, get_db
from stayhub.models.user import User
from stayhub.schemas.admin import (
    ActiveToggle,
    AdminUserCreate,
    AdminUserUpdate,
    BulkResult,
    BulkUserOperation,
    PasswordReset,
    RoleUpdate,
    UserEnvelope,
    UserListResponse,
)
from stayhub.schemas.common import MessageResponse, Pagination
from stayhub.schemas.user import UserResponse
from stayhub.services import analytics_service, exports, user_admin_service
from stayhub.services.periods import DEFAULT_PERIOD
from stayhub.services.user_service import get_user

router = APIRouter(prefix="/api/admin/users", tags=["admin: users"])


def _user(message: str, user: User) -> UserEnvelope:
    return UserEnvelope(message=message, user=UserResponse.model_validate(user))


@router.get("", response_model=UserListResponse)
async def list_users(
    pages: PageParams = Depends(),
    role: str | None = Query(None),
    is_active: bool | None = Query(None, alias="status"),
    search: str | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> UserListResponse:
    users, total = await user_admin_service.list_users(
        db,
        pages.page,
        pages.limit,
        sort_by,
        sort_order,
        role=role,
        is_active=is_active,
        search=search,
    )
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(pages.page, pages.limit, total),
    )


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> UserEnvelope:
    user = await user_admin_service.create_user(db, body)
    return _user("User created successfully", user)


@router.post("/bulk", response_model=BulkResult)
async def bulk_operation(
    body: BulkUserOperation,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> BulkResult:
    """``activate``, ``deactivate``, ``changeRole`` or ``updatePermissions`` on many users."""
    message, updated = await user_admin_service.bulk_operation(db, body)
    return BulkResult(message=message, updated_count=updated, total_requested=len(body.user_ids))


@router.get("/export")
async def export_users(
    format: str = Query("json", pattern="^(json|csv)$"),
    role: str | None = Query(None),
    is_active: bool | None = Query(None, alias="status"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    users, _total = await user_admin_service.list_users(
        db,
        page=1,
        limit=10_000,
        role=role,
        is_active=is_active,
        created_from=start_date,
        created_to=end_date,
    )
    if format == "csv":
        return exports.csv_response([exports.user_row(u) for u in users], "users", exports.USER_COLUMNS)
    return exports.json_export(
        "Users exported successfully", "users", [UserResponse.model_validate(u) for u in users]
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_detail(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    return await get_user(db, user_id)


@router.put("/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> UserEnvelope:
    user = await user_admin_service.update_user(db, user_id, body)
    return _user("User updated successfully", user)


@router.put("/{user_id}/password", response_model=MessageResponse)
async def reset_password(
    user_id: uuid.UUID,
    body: PasswordReset,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> MessageResponse:
    await user_admin_service.reset_password(db, user_id, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> MessageResponse:
    """Soft delete; refused while the user holds active bookings."""
    await user_admin_service.deactivate_user(db, user_id)
    return MessageResponse(message="User deactivated successfully")


@router.put("/{user_id}/status", response_model=UserEnvelope)
async def set_active(
    user_id: uuid.UUID,
    body: ActiveToggle,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> UserEnvelope:
    user = await user_admin_service.set_active(db, user_id, body.is_active)
    return _user(f"User {'activated' if body.is_active else 'deactivated'} successfully", user)


@router.put("/{user_id}/role", response_model=UserEnvelope)
async def update_role(
    user_id: uuid.UUID,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> UserEnvelope:
    user = await user_admin_service.update_role(db, user_id, body.role, body.admin_permissions)
    return _user("User role updated successfully", user)


@router.get("/{user_id}/analytics")
async def user_analytics(
    user_id: uuid.UUID,
    period: str = Query(DEFAULT_PERIOD),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.user_analytics(db, user_id, period)


@router.get("/{user_id}/preferences")
async def user_preferences(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.user_preference_insights(db, user_id)
