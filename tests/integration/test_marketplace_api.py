"""Integration tests for the Marketplace API via TestClient."""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import (
    order_router,
    product_router,
    register_exception_handlers,
    supplier_router,
    vendor_router,
)
from marketplace.order import placement
from protean.exceptions import ExpectedVersionError


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(vendor_router)
    app.include_router(supplier_router)
    app.include_router(product_router)
    app.include_router(order_router)
    register_exception_handlers(app)
    return TestClient(app)


def _phone():
    return f"+91 9{uuid4().int % 10**9:09d}"


def _as(actor_id, role):
    return {"X-Actor-Id": actor_id, "X-Actor-Role": role}


def _register_vendor(client):
    response = client.post("/vendors", json={"name": "Lakshmi", "phone": _phone(), "vendor_type": "Dosa"})
    assert response.status_code == 201
    return response.json()["vendor_id"]


def _register_supplier(client, **overrides):
    body = {"name": "Ravi", "phone": _phone(), "business_name": f"Ravi Veg {uuid4().hex[:6]}"}
    body.update(overrides)
    response = client.post("/suppliers", json=body)
    assert response.status_code == 201
    return response.json()["supplier_id"]


def _list(client, supplier_id, name, price_per_kg=30.0, stock=10.0, pickup_slots=("7-9 AM",)):
    response = client.post(
        "/products",
        json={
            "name": name,
            "category": "Vegetables",
            "price_per_kg": price_per_kg,
            "stock": stock,
            "pickup_slots": list(pickup_slots),
        },
        headers=_as(supplier_id, "supplier"),
    )
    assert response.status_code == 201
    return response.json()["product_id"]


def _cart(product_id, supplier_id, quantity, pickup_slot="7-9 AM"):
    return {
        "items": [{"product_id": product_id, "supplier_id": supplier_id, "quantity": quantity}],
        "pickup_slot": pickup_slot,
        "pickup_date": "2025-01-15",
        "payment_method": "UPI",
    }


@pytest.fixture()
def market(client):
    vendor_id = _register_vendor(client)
    supplier_x = _register_supplier(client)
    supplier_y = _register_supplier(client)
    name = f"Onion-{uuid4().hex[:8]}"
    product_id = _list(client, supplier_x, name, price_per_kg=30.0, stock=10.0)
    _list(client, supplier_y, name, price_per_kg=25.0, stock=1.0, pickup_slots=["9-11 AM"])
    return {"vendor_id": vendor_id, "supplier_x": supplier_x, "supplier_y": supplier_y, "product_id": product_id}


def _place(client, market, quantity=2):
    response = client.post(
        "/orders",
        json=_cart(market["product_id"], market["supplier_x"], quantity),
        headers=_as(market["vendor_id"], "vendor"),
    )
    assert response.status_code == 201
    return response.json()["orders"][0]


class TestAuthentication:
    def test_missing_headers_rejected(self, client):
        response = client.get("/orders")
        assert response.status_code == 401

    def test_unknown_role_rejected(self, client):
        response = client.get("/orders", headers=_as("someone", "admin"))
        assert response.status_code == 401

    def test_supplier_cannot_place_orders(self, client, market):
        response = client.post(
            "/orders",
            json=_cart(market["product_id"], market["supplier_x"], 1),
            headers=_as(market["supplier_x"], "supplier"),
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_vendor_cannot_list_products(self, client, market):
        response = client.post(
            "/products",
            json={"name": "Garlic", "category": "Vegetables", "price_per_kg": 10},
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 403


class TestPlaceOrderAPI:
    def test_place_returns_201_with_display_fields(self, client, market):
        order = _place(client, market)
        assert order["status"] == "Pending"
        assert order["total_amount"] == 60.0
        assert order["supplier"]["supplier_id"] == market["supplier_x"]
        assert order["lines"][0]["product_name"].startswith("Onion-")
        assert order["order_number"].startswith("VY")

        compare = client.get(f"/products/{market['product_id']}/compare", headers=_as(market["vendor_id"], "vendor"))
        stocks = {o["supplier_id"]: o["stock"] for o in compare.json()["offers"]}
        assert stocks[market["supplier_x"]] == 8

    def test_insufficient_stock_is_400(self, client, market):
        response = client.post(
            "/orders",
            json=_cart(market["product_id"], market["supplier_y"], 2, pickup_slot="9-11 AM"),
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InsufficientStock"
        assert "Insufficient stock" in body["message"]

    def test_slot_unavailable_is_400(self, client, market):
        response = client.post(
            "/orders",
            json=_cart(market["product_id"], market["supplier_x"], 1, pickup_slot="9-11 AM"),
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PickupSlotUnavailable"

    def test_unknown_product_is_404(self, client, market):
        response = client.post(
            "/orders",
            json=_cart("no-such-product", market["supplier_x"], 1),
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_version_conflict_is_409(self, client, market, monkeypatch):
        def always_conflict(*args, **kwargs):
            raise ExpectedVersionError("Product changed since it was read")

        monkeypatch.setattr(placement, "generate_order_number", always_conflict)

        vendor = _as(market["vendor_id"], "vendor")
        response = client.post("/orders", json=_cart(market["product_id"], market["supplier_x"], 2), headers=vendor)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "ConcurrentModification"
        assert body["message"]

        compare = client.get(f"/products/{market['product_id']}/compare", headers=vendor).json()
        stocks = {o["supplier_id"]: o["stock"] for o in compare["offers"]}
        assert stocks[market["supplier_x"]] == 10

    def test_malformed_request_lists_every_field(self, client, market):
        response = client.post(
            "/orders",
            json={"items": [], "pickup_slot": "midnight", "payment_method": "Cheque"},
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert {"items", "pickup_slot", "pickup_date", "payment_method"} <= set(body["errors"])


class TestOrderLifecycleAPI:
    def test_supplier_moves_order_to_completion(self, client, market):
        order = _place(client, market)
        supplier = _as(market["supplier_x"], "supplier")
        for status in ("Confirmed", "Ready", "Completed"):
            response = client.patch(f"/orders/{order['order_id']}/status", json={"status": status}, headers=supplier)
            assert response.status_code == 200
            assert response.json()["status"] == status

    def test_invalid_transition_is_400(self, client, market):
        order = _place(client, market)
        response = client.patch(
            f"/orders/{order['order_id']}/status",
            json={"status": "Ready"},
            headers=_as(market["supplier_x"], "supplier"),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidStatusTransition"

    def test_vendor_cancel_restores_stock(self, client, market):
        order = _place(client, market, quantity=3)
        vendor = _as(market["vendor_id"], "vendor")

        response = client.patch(f"/orders/{order['order_id']}/cancel", headers=vendor)
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"

        compare = client.get(f"/products/{market['product_id']}/compare", headers=vendor).json()
        stocks = {o["supplier_id"]: o["stock"] for o in compare["offers"]}
        assert stocks[market["supplier_x"]] == 10

    def test_other_supplier_forbidden(self, client, market):
        order = _place(client, market)
        response = client.patch(
            f"/orders/{order['order_id']}/status",
            json={"status": "Confirmed"},
            headers=_as(market["supplier_y"], "supplier"),
        )
        assert response.status_code == 403

    def test_list_and_get_orders(self, client, market):
        order = _place(client, market)
        vendor = _as(market["vendor_id"], "vendor")

        listing = client.get("/orders", headers=vendor).json()
        assert listing["total"] == 1
        assert listing["orders"][0]["order_id"] == order["order_id"]

        detail = client.get(f"/orders/{order['order_id']}", headers=vendor)
        assert detail.status_code == 200
        assert detail.json()["order_number"] == order["order_number"]

    def test_supplier_sees_vendor_details(self, client, market):
        order = _place(client, market)
        detail = client.get(f"/orders/{order['order_id']}", headers=_as(market["supplier_x"], "supplier")).json()
        assert detail["vendor"]["vendor_id"] == market["vendor_id"]
        assert detail["vendor"]["name"] == "Lakshmi"

    def test_unknown_order_is_404(self, client, market):
        response = client.get("/orders/no-such-order", headers=_as(market["vendor_id"], "vendor"))
        assert response.status_code == 404

    def test_analytics(self, client, market):
        _place(client, market)
        response = client.get("/orders/analytics/summary", headers=_as(market["supplier_x"], "supplier"))
        assert response.status_code == 200
        assert response.json()["total_orders"] == 1
        assert response.json()["pending_orders"] == 1


class TestRatingAPI:
    def test_rate_completed_order_once(self, client, market):
        order = _place(client, market)
        supplier = _as(market["supplier_x"], "supplier")
        for status in ("Confirmed", "Ready", "Completed"):
            client.patch(f"/orders/{order['order_id']}/status", json={"status": status}, headers=supplier)

        vendor = _as(market["vendor_id"], "vendor")
        response = client.post(f"/orders/{order['order_id']}/rating", json={"rating": 4, "review": "Fresh"}, headers=vendor)
        assert response.status_code == 200

        card = client.get(f"/suppliers/{market['supplier_x']}", headers=vendor).json()
        assert card["average_rating"] == 4.0
        assert card["total_ratings"] == 1
        assert card["recent_reviews"][0]["review"] == "Fresh"

        again = client.post(f"/orders/{order['order_id']}/rating", json={"rating": 5}, headers=vendor)
        assert again.status_code == 400
        assert again.json()["error"] == "OrderNotRatable"

    def test_rating_out_of_range_is_400(self, client, market):
        order = _place(client, market)
        response = client.post(
            f"/orders/{order['order_id']}/rating",
            json={"rating": 9},
            headers=_as(market["vendor_id"], "vendor"),
        )
        assert response.status_code == 400
        assert "rating" in response.json()["errors"]


class TestCatalogueAPI:
    def test_update_and_withdraw_offer(self, client, market):
        supplier = _as(market["supplier_x"], "supplier")
        response = client.put(
            f"/products/{market['product_id']}/offer",
            json={"price_per_kg": 35, "pickup_slots": ["7-9 AM", "5-7 PM"]},
            headers=supplier,
        )
        assert response.status_code == 200

        compare = client.get(f"/products/{market['product_id']}/compare", headers=supplier).json()
        assert compare["max_price"] == 35.0

        response = client.delete(f"/products/{market['product_id']}/offer", headers=supplier)
        assert response.status_code == 200
        compare = client.get(f"/products/{market['product_id']}/compare", headers=supplier).json()
        assert [o["supplier_id"] for o in compare["offers"]] == [market["supplier_y"]]

    def test_listing_validation_reports_all_fields(self, client, market):
        response = client.post(
            "/products",
            json={"category": "Vegetables", "price_per_kg": -1, "pickup_slots": ["dawn"]},
            headers=_as(market["supplier_x"], "supplier"),
        )
        assert response.status_code == 400
        assert {"name", "price_per_kg"} <= set(response.json()["errors"])

    def test_saved_kit(self, client, market):
        vendor = _as(market["vendor_id"], "vendor")
        response = client.post("/vendors/me/kit", json={"product_id": market["product_id"]}, headers=vendor)
        assert response.status_code == 200
        assert response.json()["saved_kit"] == [market["product_id"]]

        response = client.delete(f"/vendors/me/kit/{market['product_id']}", headers=vendor)
        assert response.json()["saved_kit"] == []

    def test_duplicate_registration_is_400(self, client):
        phone = _phone()
        client.post("/vendors", json={"name": "A", "phone": phone})
        response = client.post("/vendors", json={"name": "B", "phone": phone})
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_saved_kit_read(self, client, market):
        vendor = _as(market["vendor_id"], "vendor")
        client.post("/vendors/me/kit", json={"product_id": market["product_id"]}, headers=vendor)

        response = client.get("/vendors/me/kit", headers=vendor)
        assert response.status_code == 200
        body = response.json()
        assert body["saved_kit"] == [market["product_id"]]
        assert body["products"][0]["product_id"] == market["product_id"]

        assert client.get("/vendors/me/kit", headers=_as(market["supplier_x"], "supplier")).status_code == 403

    def test_supplier_own_products(self, client, market):
        supplier = _as(market["supplier_x"], "supplier")
        response = client.get("/suppliers/me/products", headers=supplier)
        assert response.status_code == 200
        products = response.json()["products"]
        assert [p["product_id"] for p in products] == [market["product_id"]]
        assert products[0]["offer"]["price_per_kg"] == 30.0

        assert client.get("/suppliers/me/products", headers=_as(market["vendor_id"], "vendor")).status_code == 403
