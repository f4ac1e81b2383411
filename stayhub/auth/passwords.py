"""Password hashing and verification using bcrypt directly."""

import bcrypt


def hash_password(password: str) -> str:
    """Hash a plain-text password with a fresh bcrypt salt.

    Args:
        password: The plain-text password to hash.

    Returns:
        The bcrypt hash string.
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain-text password against a stored bcrypt hash.

    Returns ``False`` for malformed hashes instead of raising, so a corrupted
    credential simply fails the login.
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        return False
