"""Integration tests for the order API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from protean.integrations.fastapi import register_exception_handlers

from storefront.api import routes
from storefront.api.routes import order_router, product_orders_router
from storefront.order.order import Order, PaymentStatus


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(product_orders_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def payload(catalogue):
    return {
        "last_name": "Doe",
        "first_name": "Jane",
        "email": "jane@x.com",
        "phone": "77123456",
        "platform_id": catalogue["platform_id"],
        "account_name": "Jane Doe",
        "account_number": "AB12345",
        "product_id": catalogue["product_id"],
        "expected_fee": 5000,
    }


def _place(client, payload, **overrides):
    return client.post("/orders", json={**payload, **overrides})


class TestPlaceOrderEndpoint:
    def test_created(self, client, payload):
        response = _place(client, payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["code"] == "ORDER_CREATED"
        assert body["orderDetails"]["amount"] == 5000
        assert body["orderDetails"]["status"] == "unpaid"
        assert current_domain.repository_for(Order).get(body["orderId"]).price == 5000

    def test_english_messages(self, client, payload):
        response = client.post("/orders", json=payload, headers={"Accept-Language": "en-US,en;q=0.8"})
        assert response.json()["message"] == "Your order has been placed successfully."

    def test_validation_failure(self, client, payload):
        response = _place(client, payload, email="nope")
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_FAILED"
        assert "email" in body["errors"]

    def test_price_mismatch(self, client, payload):
        response = _place(client, payload, expected_fee=4999)
        assert response.status_code == 422
        assert response.json()["code"] == "PRICE_MISMATCH"

    def test_unknown_product(self, client, payload):
        response = _place(client, payload, product_id="1c9d4f3a-2b7e-4c6d-8e5f-9a0b1c2d3e4f")
        assert response.status_code == 404
        assert response.json()["code"] == "APPLICATION_NOT_FOUND"

    def test_duplicate(self, client, payload):
        _place(client, payload)
        response = _place(client, payload)
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ORDER"
        assert int(response.headers["Retry-After"]) == response.json()["retryAfter"]

    def test_rate_limited(self, client, payload):
        for _ in range(3):
            _place(client, payload, email="nope")
        response = _place(client, payload, email="nope")
        assert response.status_code == 429
        assert "Retry-After" in response.headers

    def test_form_submission(self, client, payload, checkout_form, catalogue):
        form = {
            **checkout_form,
            "paymentMethod": catalogue["platform_id"],
            "applicationId": catalogue["product_id"],
            "applicationFee": "5000",
        }
        response = client.post("/orders/form", data=form)
        assert response.status_code == 201
        assert response.json()["orderDetails"]["productName"] == "Invoice Builder"


class TestOrderViews:
    def test_get_order(self, client, payload):
        order_id = _place(client, payload).json()["orderId"]
        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        assert response.json()["customer"]["email"] == "jane@x.com"

    def test_get_unknown_order(self, client):
        response = client.get("/orders/9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d")
        assert response.status_code == 404

    def test_list_orders(self, client, payload):
        order_id = _place(client, payload).json()["orderId"]
        response = client.get("/orders")
        assert response.status_code == 200
        assert order_id in [order["id"] for order in response.json()["orders"]]

    def test_product_summary(self, client, payload, catalogue):
        _place(client, payload)
        response = client.get(f"/products/{catalogue['product_id']}/orders")
        assert response.status_code == 200
        body = response.json()
        assert body["order_count"] == 1
        assert body["by_status"]["unpaid"] == {"count": 1, "amount": 5000}


class TestSettlementEndpoints:
    def test_mark_paid_refreshes_summary(self, client, payload, catalogue):
        order_id = _place(client, payload).json()["orderId"]
        client.get(f"/products/{catalogue['product_id']}/orders")

        response = client.put(f"/orders/{order_id}/payment-status", json={"status": "paid"})

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        summary = client.get(f"/products/{catalogue['product_id']}/orders").json()
        assert summary["revenue"] == 5000

    def test_invalid_transition(self, client, payload):
        order_id = _place(client, payload).json()["orderId"]
        response = client.put(f"/orders/{order_id}/payment-status", json={"status": "refunded"})
        assert response.status_code == 400

    def test_cancel(self, client, payload):
        order_id = _place(client, payload).json()["orderId"]
        response = client.put(f"/orders/{order_id}/cancel", json={"reason": "Changed my mind"})
        assert response.status_code == 200
        order = current_domain.repository_for(Order).get(order_id)
        assert order.payment_status == PaymentStatus.FAILED.value

    def test_cancel_requires_reason(self, client, payload):
        order_id = _place(client, payload).json()["orderId"]
        response = client.put(f"/orders/{order_id}/cancel", json={"reason": ""})
        assert response.status_code == 422


class TestClientAddress:
    @pytest.fixture()
    def seen_meta(self, monkeypatch):
        seen = []
        real_create_order = routes.create_order

        def recording_create_order(*args, request_meta=None, **kwargs):
            seen.append(request_meta)
            return real_create_order(*args, request_meta=request_meta, **kwargs)

        monkeypatch.setattr(routes, "create_order", recording_create_order)
        return seen

    def test_forwarded_header_is_ignored_without_trusted_proxy(self, client, payload, seen_meta, monkeypatch):
        monkeypatch.delenv("ORDER_TRUSTED_PROXIES", raising=False)
        _place(client, payload, email="a@x.com")
        client.post("/orders", json={**payload, "email": "b@x.com"}, headers={"X-Forwarded-For": "203.0.113.9"})

        assert [meta.ip for meta in seen_meta] == ["testclient", "testclient"]

    def test_forwarded_header_is_used_behind_trusted_proxy(self, client, payload, seen_meta, monkeypatch):
        monkeypatch.setenv("ORDER_TRUSTED_PROXIES", "testclient")
        client.post("/orders", json=payload, headers={"X-Forwarded-For": "198.51.100.7, 203.0.113.9"})

        assert seen_meta[0].ip == "203.0.113.9"
