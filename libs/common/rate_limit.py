"""Rate limiting for the marketplace API (slowapi).

Signed-in callers are limited per user id, anonymous callers per client IP.
Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// to share counters across workers.
"""

from functools import lru_cache

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings

AUTH_LIMIT = "5/minute"
APPLICATION_LIMIT = "5/minute"
CHECKOUT_LIMIT = "10/minute"


def client_ip(request: Request) -> str:
    # First hop of X-Forwarded-For when behind the load balancer
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def rate_limit_key(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=rate_limit_key,
        default_limits=["100/minute"],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """JSON 429 in the same shape as the other API errors."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many requests ({exc.detail}). Please slow down.",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": "60"},
    )
