"""Privileged user management."""

import logging
import uuid
from datetime import date, datetime, time
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.auth.passwords import hash_password
from stayhub.exceptions import ConflictError
from stayhub.models.booking import ACTIVE_BOOKING_STATUSES, Booking
from stayhub.models.user import User, default_preferences, permissions_for_role
from stayhub.schemas.admin import AdminPermissions, AdminUserCreate, AdminUserUpdate, BulkUserOperation
from stayhub.services.user_service import ensure_unique_identity, get_user

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = {
    "created_at": User.created_at,
    "username": User.username,
    "email": User.email,
    "last_login": User.last_login,
    "last_active": User.last_active,
    "total_bookings": User.total_bookings,
}


def filtered_users_query(
    role: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    created_from: date | None = None,
    created_to: date | None = None,
):
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active.is_(is_active))
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                User.username.ilike(pattern),
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )
    if created_from is not None and created_to is not None:
        query = query.where(
            User.created_at >= datetime.combine(created_from, time.min),
            User.created_at <= datetime.combine(created_to, time.max),
        )
    return query


async def list_users(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    **filters: Any,
) -> tuple[list[User], int]:
    query = filtered_users_query(**filters)
    column = USER_SORT_FIELDS.get(sort_by, User.created_at)
    order_by = column.asc() if sort_order == "asc" else column.desc()
    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    result = await db.execute(query.order_by(order_by, User.id).offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


async def create_user(db: AsyncSession, body: AdminUserCreate) -> User:
    await ensure_unique_identity(db, body.username, body.email)
    user = User(
        username=body.username,
        email=body.email,
        hashed_password=hash_password(body.password),
        role=body.role,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        address=body.address,
        date_of_birth=body.date_of_birth,
        preferences=default_preferences(),
        activities=[],
        is_active=True,
        email_verified=False,
    )
    db.add(user)
    await db.flush()
    logger.info("Admin created user %s with role %s", user.id, user.role)
    return user


async def update_user(db: AsyncSession, user_id: uuid.UUID, body: AdminUserUpdate) -> User:
    user = await get_user(db, user_id)
    changes = body.model_dump(exclude_unset=True)
    if "username" in changes or "email" in changes:
        await ensure_unique_identity(db, changes.get("username"), changes.get("email"), exclude_id=user.id)
    for field, value in changes.items():
        setattr(user, field, value)
    await db.flush()
    return user


async def reset_password(db: AsyncSession, user_id: uuid.UUID, new_password: str) -> None:
    user = await get_user(db, user_id)
    user.hashed_password = hash_password(new_password)
    await db.flush()
    logger.info("Password reset for user %s", user.id)


async def count_active_bookings(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(Booking.user_id == user_id, Booking.status.in_(ACTIVE_BOOKING_STATUSES))
    )
    return result.scalar_one()


async def deactivate_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """Soft-delete a user; refused while they hold pending, confirmed or checked-in bookings."""
    user = await get_user(db, user_id)
    if await count_active_bookings(db, user.id) > 0:
        logger.warning("Refusing to deactivate user %s with active bookings", user.id)
        raise ConflictError("Cannot delete user with active bookings")
    user.is_active = False
    await db.flush()
    logger.info("User %s deactivated", user.id)
    return user


async def set_active(db: AsyncSession, user_id: uuid.UUID, is_active: bool) -> User:
    user = await get_user(db, user_id)
    user.is_active = is_active
    await db.flush()
    logger.info("User %s is_active=%s", user.id, is_active)
    return user


def resolve_permissions(role: str, overrides: AdminPermissions | None) -> dict[str, bool]:
    """Role defaults, with explicit overrides honoured only for admins."""
    permissions = permissions_for_role(role)
    if overrides is not None and role == "admin":
        permissions.update(overrides.overrides())
    return permissions


async def update_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    role: str,
    overrides: AdminPermissions | None = None,
) -> User:
    user = await get_user(db, user_id)
    user.role = role
    user.admin_permissions = resolve_permissions(role, overrides)
    await db.flush()
    logger.info("User %s role set to %s", user.id, role)
    return user


async def bulk_operation(db: AsyncSession, body: BulkUserOperation) -> tuple[str, int]:
    """Apply one bulk operation to many users. Returns ``(message, updated_count)``."""
    if body.operation in ("activate", "deactivate"):
        values: dict[str, Any] = {"is_active": body.operation == "activate"}
        message = f"Users {body.operation}d successfully"
    elif body.operation == "changeRole":
        values = {"role": body.role, "admin_permissions": permissions_for_role(body.role)}
        message = "User roles updated successfully"
    else:
        values = {"admin_permissions": resolve_permissions("admin", body.admin_permissions)}
        message = "User permissions updated successfully"

    result = await db.execute(
        update(User)
        .where(User.id.in_(body.user_ids))
        .values(**values)
        .execution_options(synchronize_session="fetch")
    )
    logger.info("Bulk %s applied to %d users", body.operation, result.rowcount)
    return message, result.rowcount
