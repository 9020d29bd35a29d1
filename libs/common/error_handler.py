"""Global exception handlers for consistent error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from libs.common.errors import MarketplaceError
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


async def marketplace_error_handler(
    request: Request, exc: MarketplaceError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    content = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        content["issues"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Database error",
            "code": "PERSISTENCE_ERROR",
            "request_id": get_request_id(),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal Server Error",
            "code": "INTERNAL_ERROR",
            "request_id": get_request_id(),
        },
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the marketplace exception handlers on an app."""
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
