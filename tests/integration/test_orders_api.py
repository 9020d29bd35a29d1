"""Integration tests for checkout and order endpoints."""

import uuid
from decimal import Decimal

import pytest
from tests.factories import UserFactory, seed_vendor_with_products


def _checkout_body(items, **overrides):
    body = {
        "customerName": "Abu Koroma",
        "customerEmail": "abu@example.com",
        "customerPhone": "+23279000222",
        "shippingAddress": {
            "line1": "22 Circular Rd",
            "city": "Freetown",
            "country": "Sierra Leone",
        },
        "paymentMethod": "cash_on_delivery",
        "items": items,
    }
    body.update(overrides)
    return body


async def _place(client, product, quantity=1, headers=None, **overrides):
    response = await client.post(
        "/api/orders",
        json=_checkout_body(
            [{"productId": str(product.id), "quantity": quantity}], **overrides
        ),
        headers=headers or {},
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_checkout(client, db_session):
    _, vendor, _, (product,) = await seed_vendor_with_products(
        db_session, prices=("49.99",)
    )

    data = await _place(client, product, quantity=3)

    assert data["ok"] is True
    order = data["orders"][0]
    assert data["orderId"] == order["id"]
    assert order["vendorId"] == str(vendor.id)
    assert order["customerId"] is None
    assert order["status"] == "pending"
    assert order["reference"] == order["id"][:8]
    assert Decimal(order["total"]) == Decimal("149.97")
    assert order["items"][0]["quantity"] == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_alias_in_usd(client, db_session):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)

    response = await client.post(
        "/api/checkout",
        json=_checkout_body(
            [{"productId": str(product.id), "quantity": 2}],
            currency="USD",
            rate="25",
            paymentMethod="usd_card",
        ),
    )

    assert response.status_code == 201, response.text
    order = response.json()["orders"][0]
    assert order["currency"] == "USD"
    assert Decimal(order["total"]) == Decimal("8.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_signed_in_checkout_records_customer(client, db_session, make_headers):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)
    customer = UserFactory.create()
    db_session.add(customer)
    await db_session.commit()

    data = await _place(client, product, headers=make_headers(customer))

    assert data["orders"][0]["customerId"] == str(customer.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_product_is_404(client):
    response = await client.post(
        "/api/orders",
        json=_checkout_body([{"productId": str(uuid.uuid4()), "quantity": 1}]),
    )

    assert response.status_code == 404
    assert response.json()["code"] == "PRODUCT_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "overrides",
    [
        {"items": []},
        {"customerEmail": "not-an-email"},
        {"paymentMethod": "barter"},
        {"shippingAddress": {"line1": "x"}},
        {"customerName": "   "},
        {"shippingAddress": {"line1": " ", "city": "Freetown", "country": "SL"}},
        {"shippingAddress": {"line1": "12 Siaka Stevens St", "city": " ", "country": " "}},
    ],
)
async def test_invalid_checkout_bodies(client, overrides):
    items = [{"productId": str(uuid.uuid4()), "quantity": 1}]
    response = await client.post("/api/orders", json=_checkout_body(items, **overrides))

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_zero_quantity_is_rejected(client, db_session):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)

    response = await client.post(
        "/api/orders",
        json=_checkout_body([{"productId": str(product.id), "quantity": 0}]),
    )

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Listings and permissions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_sees_own_orders_only(client, db_session, make_headers):
    seller, vendor, _, (product,) = await seed_vendor_with_products(db_session)
    _, other_vendor, _, (other_product,) = await seed_vendor_with_products(
        db_session
    )
    mine = await _place(client, product)
    await _place(client, other_product)

    own = await client.get(
        f"/api/orders/vendor/{vendor.id}", headers=make_headers(seller)
    )
    forbidden = await client.get(
        f"/api/orders/vendor/{other_vendor.id}", headers=make_headers(seller)
    )

    assert [o["id"] for o in own.json()] == [mine["orderId"]]
    assert forbidden.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_order_history(client, db_session, make_headers):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)
    customer = UserFactory.create()
    stranger = UserFactory.create()
    db_session.add_all([customer, stranger])
    await db_session.commit()
    placed = await _place(client, product, headers=make_headers(customer))

    history = await client.get(
        f"/api/orders/customer/{customer.id}", headers=make_headers(customer)
    )
    single = await client.get(
        f"/api/orders/{placed['orderId']}", headers=make_headers(customer)
    )
    snooping = await client.get(
        f"/api/orders/{placed['orderId']}", headers=make_headers(stranger)
    )
    other_history = await client.get(
        f"/api/orders/customer/{customer.id}", headers=make_headers(stranger)
    )

    assert [o["id"] for o in history.json()] == [placed["orderId"]]
    assert single.status_code == 200
    assert snooping.status_code == 403
    assert other_history.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_all_orders(client, db_session, admin_headers):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)
    await _place(client, product)
    await _place(client, product)

    response = await client.get("/api/orders", headers=admin_headers)

    assert response.status_code == 200
    assert len(response.json()) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_listing_needs_admin(client, db_session, make_headers):
    customer = UserFactory.create()
    db_session.add(customer)
    await db_session.commit()

    response = await client.get("/api/orders", headers=make_headers(customer))

    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_vendor_updates_status_and_notes(client, db_session, make_headers):
    seller, _, _, (product,) = await seed_vendor_with_products(db_session)
    placed = await _place(client, product)
    headers = make_headers(seller)

    paid = await client.put(
        f"/api/orders/{placed['orderId']}/status",
        json={"status": "paid"},
        headers=headers,
    )
    noted = await client.patch(
        f"/api/orders/{placed['orderId']}/notes",
        json={"notes": "Deliver after 5pm"},
        headers=headers,
    )

    assert paid.status_code == 200, paid.text
    assert paid.json()["status"] == "paid"
    assert noted.json()["notes"] == "Deliver after 5pm"
    assert Decimal(noted.json()["total"]) == Decimal(placed["orders"][0]["total"])


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_change_status(client, db_session, make_headers):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)
    customer = UserFactory.create()
    db_session.add(customer)
    await db_session.commit()
    placed = await _place(client, product, headers=make_headers(customer))

    response = await client.put(
        f"/api/orders/{placed['orderId']}/status",
        json={"status": "delivered"},
        headers=make_headers(customer),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_status_is_rejected(client, db_session, admin_headers):
    _, _, _, (product,) = await seed_vendor_with_products(db_session)
    placed = await _place(client, product)

    response = await client.put(
        f"/api/orders/{placed['orderId']}/status",
        json={"status": "teleported"},
        headers=admin_headers,
    )

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# Site configuration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_currency_config(client):
    response = await client.get("/api/currency")

    data = response.json()
    assert data["defaultCurrency"] == "NLE"
    assert Decimal(data["rate"]) == Decimal("20")
    assert data["currencies"] == ["NLE", "USD"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_support_info(client, monkeypatch):
    from libs.common.config import get_settings

    monkeypatch.setattr(get_settings(), "SUPPORT_PHONE", "+232 72 146 015")

    response = await client.get("/api/support")

    data = response.json()
    assert data["whatsappUrl"] == "https://wa.me/23272146015"
    assert data["mailto"] == f"mailto:{data['email']}"
