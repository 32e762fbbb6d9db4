"""Integration tests for the order endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

from storefront.api.cart import cart_router
from storefront.api.errors import register_exception_handlers
from storefront.api.orders import order_router
from storefront.catalogue.product import Product

SHOPPER = {"X-User-Id": "cust-1"}
OTHER_SHOPPER = {"X-User-Id": "cust-2"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    register_exception_handlers(app)
    return TestClient(app)


def _order(client, product_id, quantity=1, headers=SHOPPER, **overrides):
    payload = {
        "items": [{"productId": product_id, "size": "M", "quantity": quantity}],
        "deliveryMethod": "desk",
        "wilaya": "Oran",
        "subtotal": 100.0 * quantity,
        "total": 100.0 * quantity + 700.0,
    }
    payload.update(overrides)
    return client.post("/orders", json=payload, headers=headers)


class TestPlaceOrderEndpoint:
    def test_place_order(self, client, make_product):
        product_id = make_product(price=100.0)
        response = _order(client, product_id, quantity=2)

        assert response.status_code == 201
        body = response.json()
        assert body["order"]["status"] == "pending"
        assert body["order"]["total"] == 900.0
        assert body["stock_updates"] == [{"product_id": product_id, "size": "M", "new_quantity": 1}]

    def test_requires_identity(self, client):
        response = client.post("/orders", json={})
        assert response.status_code == 401

    def test_insufficient_stock(self, client, make_product):
        product_id = make_product(price=100.0)
        response = _order(client, product_id, quantity=5)

        assert response.status_code == 400
        body = response.json()
        assert body["product_id"] == product_id
        assert body["available"] == 3
        assert current_domain.repository_for(Product).get(product_id).available("M") == 3

    def test_mismatched_total(self, client, make_product):
        product_id = make_product(price=100.0)
        response = _order(client, product_id, total=100.0)
        assert response.status_code == 400
        assert "total" in response.json()["error"]

    def test_missing_items_field(self, client):
        response = client.post(
            "/orders",
            json={"deliveryMethod": "desk", "wilaya": "Oran", "subtotal": 0, "total": 700},
            headers=SHOPPER,
        )
        assert response.status_code == 400
        assert "items" in response.json()["error"]

    def test_checkout(self, client, make_product):
        product_id = make_product(price=100.0)
        client.post("/cart/add", json={"productId": product_id, "size": "M", "quantity": 1}, headers=SHOPPER)

        response = client.post(
            "/orders/checkout",
            json={"deliveryMethod": "desk", "wilaya": "Oran", "subtotal": 100.0, "total": 800.0},
            headers=SHOPPER,
        )
        assert response.status_code == 201
        assert client.get("/cart", headers=SHOPPER).json()["items"] == []


class TestOrderQueryEndpoints:
    def test_list_my_orders(self, client, make_product):
        product_id = make_product(price=100.0)
        _order(client, product_id)
        _order(client, product_id, headers=OTHER_SHOPPER)

        response = client.get("/orders", headers=SHOPPER)
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_get_someone_elses_order_is_403(self, client, make_product):
        order_id = _order(client, make_product(price=100.0)).json()["order"]["order_id"]
        response = client.get(f"/orders/{order_id}", headers=OTHER_SHOPPER)
        assert response.status_code == 403

    def test_admin_lists_all_orders(self, client, make_product):
        product_id = make_product(price=100.0)
        _order(client, product_id)
        _order(client, product_id, headers=OTHER_SHOPPER)

        response = client.get("/orders/admin", params={"status": "pending"}, headers=ADMIN)
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_customer_cannot_list_all_orders(self, client):
        assert client.get("/orders/admin", headers=SHOPPER).status_code == 403


class TestOrderStatusEndpoint:
    def test_admin_accepts_order(self, client, make_product):
        order_id = _order(client, make_product(price=100.0)).json()["order"]["order_id"]
        response = client.put(f"/orders/{order_id}", json={"status": "processing"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["status"] == "processing"

    def test_illegal_transition_is_400(self, client, make_product):
        order_id = _order(client, make_product(price=100.0)).json()["order"]["order_id"]
        response = client.put(f"/orders/{order_id}", json={"status": "completed"}, headers=ADMIN)
        assert response.status_code == 400

    def test_customer_cannot_change_status(self, client, make_product):
        order_id = _order(client, make_product(price=100.0)).json()["order"]["order_id"]
        response = client.put(f"/orders/{order_id}", json={"status": "cancelled"}, headers=SHOPPER)
        assert response.status_code == 403
