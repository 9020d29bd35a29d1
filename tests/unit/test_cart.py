"""Unit tests for the client-held cart."""

import json
import uuid
from decimal import Decimal

import pytest
from services.marketplace_service.clients.cart import (
    STORAGE_KEY,
    Cart,
    JsonFileCartStorage,
)


@pytest.fixture
def storage(tmp_path):
    return JsonFileCartStorage(tmp_path / "cart.json")


@pytest.mark.unit
def test_adding_same_product_merges_lines(storage):
    cart = Cart.load(storage)
    product_id = uuid.uuid4()

    first = cart.add(product_id, "100", name="Gara cloth")
    second = cart.add(str(product_id), Decimal("100.00"), quantity=2)

    assert first.id == second.id
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.total_items == 3
    assert cart.total_price == Decimal("300.00")


@pytest.mark.unit
def test_quantity_is_floored_at_one(storage):
    cart = Cart.load(storage)

    line = cart.add(uuid.uuid4(), "5.50", quantity=0)

    assert line.quantity == 1


@pytest.mark.unit
def test_update_quantity_to_zero_removes_line(storage):
    cart = Cart.load(storage)
    keep = cart.add(uuid.uuid4(), "10")
    drop = cart.add(uuid.uuid4(), "20")

    cart.update_quantity(keep.id, 4)
    cart.update_quantity(drop.id, 0)

    assert [line.id for line in cart.items] == [keep.id]
    assert cart.total_price == Decimal("40.00")


@pytest.mark.unit
def test_every_change_is_persisted_under_versioned_key(storage):
    cart = Cart.load(storage)
    line = cart.add(uuid.uuid4(), "49.99", quantity=2, name="Radio")

    reloaded = Cart.load(storage)
    assert [(entry.id, entry.quantity, entry.price_each) for entry in reloaded.items] == [
        (line.id, 2, Decimal("49.99"))
    ]

    reloaded.clear()
    assert Cart.load(storage).items == []
    assert STORAGE_KEY in json.loads(storage.path.read_text())


@pytest.mark.unit
def test_corrupt_or_foreign_state_loads_empty(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text("{not json")
    assert Cart.load(JsonFileCartStorage(path)).items == []

    path.write_text(json.dumps({STORAGE_KEY: {"items": [{"quantity": -1}]}}))
    assert Cart.load(JsonFileCartStorage(path)).items == []


@pytest.mark.unit
def test_other_keys_survive_saves(tmp_path):
    path = tmp_path / "cart.json"
    path.write_text(json.dumps({"cart-storage-v1": {"legacy": True}}))

    Cart.load(JsonFileCartStorage(path)).add(uuid.uuid4(), "1")

    data = json.loads(path.read_text())
    assert data["cart-storage-v1"] == {"legacy": True}
    assert len(data[STORAGE_KEY]["items"]) == 1


@pytest.mark.unit
def test_checkout_items_use_api_field_names(storage):
    cart = Cart.load(storage)
    product_id = uuid.uuid4()
    cart.add(product_id, "100", quantity=2)

    assert cart.to_checkout_items() == [
        {"productId": str(product_id), "quantity": 2}
    ]
