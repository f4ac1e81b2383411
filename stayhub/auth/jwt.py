"""Session token creation and verification."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from stayhub.config import Settings, get_settings


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
    config: Settings | None = None,
) -> str:
    """Create a signed, time-limited session token.

    Args:
        user_id: The user's UUID as a string; stored in the ``sub`` claim.
        email: The user's email address.
        role: ``customer`` or ``admin``.
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_expire_hours`` hours.
        config: Settings to sign with; the process settings by default.

    Returns:
        Encoded JWT string.
    """
    config = config or get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=config.jwt_expire_hours))
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, config.jwt_secret_key, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: Settings | None = None) -> dict:
    """Decode and verify a session token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    config = config or get_settings()
    return jwt.decode(token, config.jwt_secret_key, algorithms=[config.jwt_algorithm])
