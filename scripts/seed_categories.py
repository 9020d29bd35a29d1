"""Seed the default product categories.

Safe to re-run: categories that already exist (by name) are skipped.

Usage:
    python -m scripts.seed_categories
"""

import asyncio
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from libs.db.session import session_scope
from services.marketplace_service.models import Category

DEFAULT_CATEGORIES = [
    ("Electronics", "Phones, laptops, accessories and gadgets", "electronics"),
    ("Fashion", "Clothing, shoes and accessories", "shirt"),
    ("Home & Living", "Furniture, kitchenware and decor", "home"),
    ("Beauty & Health", "Cosmetics, skincare and wellness", "heart"),
    ("Groceries", "Food, drinks and household essentials", "shopping-basket"),
    ("Books & Stationery", "Books, school and office supplies", "book"),
    ("Sports & Outdoors", "Fitness gear and outdoor equipment", "dumbbell"),
    ("Crafts & Local Goods", "Handmade and locally produced items", "palette"),
]


async def seed_categories(factory: Optional[async_sessionmaker] = None) -> int:
    async with session_scope(factory) as db:
        result = await db.execute(select(Category.name))
        existing = {name for (name,) in result.all()}

        created = 0
        for name, description, icon in DEFAULT_CATEGORIES:
            if name in existing:
                print(f"  - {name} already exists, skipping")
                continue
            db.add(Category(name=name, description=description, icon=icon))
            created += 1
            print(f"  + {name}")

        return created


if __name__ == "__main__":
    print("Seeding categories...")
    count = asyncio.run(seed_categories())
    print(f"Done. {count} categories created.")
