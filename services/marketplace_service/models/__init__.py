"""Marketplace service models package."""

from services.marketplace_service.models.accounts import User, Vendor, VendorApplication
from services.marketplace_service.models.catalog import Category, Product
from services.marketplace_service.models.commerce import Order, OrderItem
from services.marketplace_service.models.enums import (
    ApplicationStatus,
    OrderStatus,
    PaymentMethod,
    UserRole,
    VendorStatus,
)

__all__ = [
    "ApplicationStatus",
    "Category",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "Product",
    "User",
    "UserRole",
    "Vendor",
    "VendorApplication",
    "VendorStatus",
]
