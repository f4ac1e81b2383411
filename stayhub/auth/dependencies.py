"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.auth.jwt import decode_token
from stayhub.database import get_db
from stayhub.exceptions import Forbidden, Unauthenticated
from stayhub.models.user import User

# Missing credentials are reported by us as 401, not by FastAPI as 403.
_bearer_scheme = HTTPBearer(auto_error=False)

_INVALID_TOKEN = "Invalid or expired token"


def _user_id_from_token(token: str) -> uuid.UUID | None:
    """Subject of a valid access token, or ``None`` for anything else."""
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Return the active user behind the Bearer token.

    Raises:
        Unauthenticated: If the token is missing, invalid or expired, or its
            user no longer exists or has been deactivated.
    """
    if credentials is None:
        raise Unauthenticated()

    user_id = _user_id_from_token(credentials.credentials)
    if user_id is None:
        raise Unauthenticated(_INVALID_TOKEN)

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated(_INVALID_TOKEN)
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_user`` but returns ``None`` instead of raising.

    Used by public catalog reads that record behavior for signed-in viewers.
    """
    if credentials is None:
        return None
    user_id = _user_id_from_token(credentials.credentials)
    if user_id is None:
        return None
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: str):
    """Dependency factory admitting only users whose role is in ``roles``."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden()
        return user

    return _check


admin_only = require_roles("admin")
customer_or_admin = require_roles("customer", "admin")
