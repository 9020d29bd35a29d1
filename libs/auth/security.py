"""Password hashing and access token helpers."""

from datetime import timedelta
from typing import Any, Optional

from jose import JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(
    *,
    user_id: str,
    email: Optional[str],
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a signed bearer token carrying the user's id, email and role."""
    settings = get_settings()
    expire = utc_now() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def bearer_subject(authorization: Optional[str]) -> Optional[str]:
    """User id from an ``Authorization: Bearer`` header, or None if absent or invalid."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    try:
        return decode_access_token(authorization[7:].strip()).get("sub")
    except JWTError:
        return None
