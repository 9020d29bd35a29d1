from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError as PydanticValidationError

from libs.auth.models import AuthUser
from libs.auth.security import decode_access_token
from libs.common.errors import AuthenticationError, PermissionDeniedError

security = HTTPBearer(auto_error=False)


def _user_from_credentials(credentials: HTTPAuthorizationCredentials) -> AuthUser:
    try:
        payload = decode_access_token(credentials.credentials)
        return AuthUser(**payload)
    except (JWTError, PydanticValidationError):
        raise AuthenticationError("Could not validate credentials")


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated user.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return _user_from_credentials(credentials)


async def get_optional_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthUser]:
    """
    Like get_current_user, but anonymous callers (guest checkout, public
    vendor applications) get None. A malformed token is still rejected.
    """
    if credentials is None:
        return None
    return _user_from_credentials(credentials)


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """Ensure the caller carries the 'admin' role."""
    if not current_user.is_admin:
        raise PermissionDeniedError("Admin privileges required")
    return current_user


async def require_vendor(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """Vendors manage their own catalog; admins may act for any vendor."""
    if not (current_user.is_vendor or current_user.is_admin):
        raise PermissionDeniedError("Vendor privileges required")
    return current_user
