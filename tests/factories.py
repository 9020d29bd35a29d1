"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    vendor = VendorFactory.create(user_id=user.id, is_approved=True)
    db_session.add(vendor)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from libs.auth.security import hash_password

DEFAULT_PASSWORD = "correct-horse-battery"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import User, UserRole

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "password_hash": hash_password(DEFAULT_PASSWORD),
            "first_name": "Test",
            "last_name": "User",
            "role": UserRole.CUSTOMER,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class VendorFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import Vendor

        defaults = {
            "id": _uuid(),
            "store_name": f"Store {uuid.uuid4().hex[:6]}",
            "description": "A test store",
            "email": _unique_email(),
            "phone": "+23270000000",
            "address": "1 Siaka Stevens St, Freetown",
            "is_approved": False,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Vendor(**defaults)


class VendorApplicationFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import (
            ApplicationStatus,
            VendorApplication,
        )

        defaults = {
            "id": _uuid(),
            "store_name": "Freetown Crafts",
            "email": _unique_email(),
            "phone": "+23276000000",
            "address": "Lumley Beach Rd",
            "description": "Handmade goods",
            "status": ApplicationStatus.PENDING,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return VendorApplication(**defaults)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CategoryFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import Category

        defaults = {
            "id": _uuid(),
            "name": f"Category {uuid.uuid4().hex[:6]}",
            "description": "Test category",
            "icon": "electronics",
        }
        defaults.update(overrides)
        return Category(**defaults)


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.marketplace_service.models import Product

        defaults = {
            "id": _uuid(),
            "name": f"Product {uuid.uuid4().hex[:6]}",
            "description": "A test product",
            "price": Decimal("100.00"),
            "stock": 10,
            "image_url": "https://img.test/p.png",
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Scenario helpers
# ---------------------------------------------------------------------------


async def seed_vendor_with_products(db, *, prices=("100.00",), approved=True):
    """Insert a vendor-role user, their vendor row, a category and products."""
    from services.marketplace_service.models import UserRole

    user = UserFactory.create(role=UserRole.VENDOR if approved else UserRole.CUSTOMER)
    vendor = VendorFactory.create(user_id=user.id, is_approved=approved)
    category = CategoryFactory.create()
    db.add_all([user, vendor, category])
    await db.flush()

    products = [
        ProductFactory.create(
            vendor_id=vendor.id, category_id=category.id, price=Decimal(price)
        )
        for price in prices
    ]
    db.add_all(products)
    await db.commit()
    return user, vendor, category, products
