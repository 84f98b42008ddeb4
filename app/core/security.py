"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from email_validator import EmailNotValidError, validate_email

from app.core.config import settings

# Min/max lengths for name and password validation.
NAME_MIN_LEN = 2
NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# Characters that satisfy the "special character" password rule.
PASSWORD_SPECIAL_CHARS = "@$!%*?&"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (bcrypt compares in constant time)."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def _dummy_hash() -> str:
    return hash_password("not-a-real-password-Aa1!")


def burn_password_check(plain_password: str) -> None:
    """Spend the same bcrypt work as a real check, for logins against unknown emails."""
    verify_password(plain_password, _dummy_hash())


def check_password_strength(password: str) -> str | None:
    """Return an error message if password is too weak, else None."""
    if len(password) < PASSWORD_MIN_LEN:
        return f"Password must be at least {PASSWORD_MIN_LEN} characters long."
    if len(password) > PASSWORD_MAX_LEN:
        return f"Password must be at most {PASSWORD_MAX_LEN} characters long."
    if not (
        any(c.islower() for c in password)
        and any(c.isupper() for c in password)
        and any(c.isdigit() for c in password)
        and any(c in PASSWORD_SPECIAL_CHARS for c in password)
    ):
        return (
            "Password must contain at least one lowercase letter, one uppercase letter, "
            "one number, and one special character."
        )
    return None


def create_access_token(
    sub: int,
    email: str,
    roles: list[str],
    now: datetime | None = None,
) -> str:
    """Create a JWT access token with id (and sub) = user id, email, role names snapshot, and exp."""
    now = now or datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "id": int(sub),
        "sub": str(sub),
        "email": email,
        "roles": list(roles),
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (id, sub, email, roles, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )


def normalize_email(email: str, strict: bool = False) -> str:
    """
    Canonical form of an address, as stored: the same normalization pydantic's
    EmailStr applies on create/update (domain lowercased, local part kept).

    Unparseable input comes back stripped but otherwise unchanged, unless strict,
    in which case EmailNotValidError (a ValueError) is raised.
    """
    email = email.strip()
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        if strict:
            raise
        return email
