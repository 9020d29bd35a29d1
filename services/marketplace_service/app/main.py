"""FastAPI application for the Marketplace Service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from libs.db.config import engine
from services.marketplace_service.routers import (
    admin_router,
    auth_router,
    catalog_router,
    orders_router,
    site_router,
    vendors_router,
)
from slowapi.errors import RateLimitExceeded

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Marketplace service starting")
    yield
    await engine.dispose()
    logger.info("Marketplace service stopped")


def create_app() -> FastAPI:
    """Create and configure the Marketplace Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        version="0.1.0",
        description="Multi-vendor marketplace - catalog, vendors, checkout, admin.",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/api/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(vendors_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(site_router, prefix="/api")

    return app


app = create_app()
