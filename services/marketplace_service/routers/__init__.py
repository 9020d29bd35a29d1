"""Marketplace service routers package."""

from services.marketplace_service.routers.admin import router as admin_router
from services.marketplace_service.routers.auth import router as auth_router
from services.marketplace_service.routers.catalog import router as catalog_router
from services.marketplace_service.routers.orders import router as orders_router
from services.marketplace_service.routers.site import router as site_router
from services.marketplace_service.routers.vendors import router as vendors_router

__all__ = [
    "admin_router",
    "auth_router",
    "catalog_router",
    "orders_router",
    "site_router",
    "vendors_router",
]
