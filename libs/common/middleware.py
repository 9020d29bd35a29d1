"""Request logging middleware for the marketplace API.

Every request gets an X-Request-ID (propagated from the caller when present)
and one completion log line with status and duration. For signed-in callers
the user id from the bearer token is bound to the log context and left on
``request.state`` so the rate limiter can key on it.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.auth.security import bearer_subject
from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

# Liveness probes hit these every few seconds
_UNLOGGED_PATHS = frozenset({"/health", "/api/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        user_id = bearer_subject(request.headers.get("Authorization"))
        request.state.user_id = user_id
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
            user_id=user_id,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
            if request.url.path not in _UNLOGGED_PATHS:
                duration_ms = _elapsed_ms(started)
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "%s %s -> %d (%.1fms)",
                    request.method,
                    request.url.path,
                    response.status_code,
                    duration_ms,
                    extra={
                        "extra_fields": {
                            "status_code": response.status_code,
                            "duration_ms": duration_ms,
                        }
                    },
                )
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception:
            logger.exception(
                "Unhandled error on %s %s",
                request.method,
                request.url.path,
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            raise
        finally:
            clear_request_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def add_observability_middleware(app: FastAPI) -> None:
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
