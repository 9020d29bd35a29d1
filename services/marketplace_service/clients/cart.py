"""Client-held shopping cart.

The server never stores carts. A storefront (or script) keeps one of these,
persists it locally after every change and turns it into checkout lines at
the end. Prices are snapshots taken when the product was added.
"""

import json
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Protocol

from libs.common.currency import quantize_money, to_decimal
from libs.common.datetime_utils import utc_now
from pydantic import BaseModel, Field, PrivateAttr

STORAGE_KEY = "cart-storage-v2"


class CartLine(BaseModel):
    id: str
    product_id: uuid.UUID
    name: str = ""
    image_url: Optional[str] = None
    price_each: Decimal
    quantity: int = Field(..., ge=1)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def line_total(self) -> Decimal:
        return self.price_each * self.quantity


class CartStorage(Protocol):
    def load(self) -> Optional[dict]: ...

    def save(self, state: dict) -> None: ...


class JsonFileCartStorage:
    """Keeps cart state in a JSON file under a versioned key.

    Other keys in the file are left alone. Unknown or older shapes under the
    key are ignored rather than migrated.
    """

    def __init__(self, path: Path | str, key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Optional[dict]:
        state = self._read_all().get(self.key)
        return state if isinstance(state, dict) else None

    def save(self, state: dict) -> None:
        data = self._read_all()
        data[self.key] = state
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class Cart(BaseModel):
    """Cart aggregate: one line per product, quantities >= 1."""

    items: list[CartLine] = Field(default_factory=list)
    _storage: Optional[CartStorage] = PrivateAttr(default=None)

    @classmethod
    def load(cls, storage: CartStorage) -> "Cart":
        state = storage.load()
        try:
            cart = cls.model_validate(state) if state else cls()
        except ValueError:
            cart = cls()
        cart._storage = storage
        return cart

    def _persist(self) -> None:
        if self._storage is not None:
            self._storage.save(self.model_dump(mode="json"))

    def _line(self, line_id: str) -> Optional[CartLine]:
        return next((line for line in self.items if line.id == line_id), None)

    def add(
        self,
        product_id: uuid.UUID | str,
        price: Any,
        quantity: int = 1,
        *,
        name: str = "",
        image_url: Optional[str] = None,
    ) -> CartLine:
        """Add a product. An existing line for the product is incremented."""
        product_id = uuid.UUID(str(product_id))
        quantity = max(1, int(quantity))

        line = next((i for i in self.items if i.product_id == product_id), None)
        if line is not None:
            line.quantity += quantity
        else:
            line = CartLine(
                id=f"line-{uuid.uuid4().hex[:12]}",
                product_id=product_id,
                name=name,
                image_url=image_url,
                price_each=quantize_money(to_decimal(price)),
                quantity=quantity,
            )
            self.items.append(line)
        self._persist()
        return line

    def remove(self, line_id: str) -> None:
        self.items = [line for line in self.items if line.id != line_id]
        self._persist()

    def update_quantity(self, line_id: str, quantity: int) -> None:
        """Set a line's quantity. Zero or less removes the line."""
        quantity = int(quantity)
        if quantity <= 0:
            self.remove(line_id)
            return
        line = self._line(line_id)
        if line is not None:
            line.quantity = quantity
            self._persist()

    def clear(self) -> None:
        self.items = []
        self._persist()

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items)

    @property
    def total_price(self) -> Decimal:
        return quantize_money(sum((line.line_total for line in self.items), Decimal("0")))

    def to_checkout_items(self) -> list[dict]:
        """Lines in the shape ``POST /api/orders`` expects."""
        return [
            {"productId": str(line.product_id), "quantity": line.quantity}
            for line in self.items
        ]
