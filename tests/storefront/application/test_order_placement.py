"""Application tests for the order placement pipeline, happy path and client errors."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.cache import ORDER_LIST_KEY, ORDERS_TAG, product_orders_key
from storefront.placement import ORDER_CREATED, OrderErrorCode, RequestMeta
from storefront.placement import pipeline
from storefront.placement.rules import RuleCheck

PRODUCT_ID = "0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21"
PLATFORM_ID = "5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11"
UNKNOWN_ID = "1c9d4f3a-2b7e-4c6d-8e5f-9a0b1c2d3e4f"


class TestSuccessfulPlacement:
    def test_order_is_created(self, place, storage, clock):
        result = place()

        assert result.success is True
        assert result.code == ORDER_CREATED
        assert result.error_code is None
        assert result.order_id in storage.orders
        assert storage.committed_writes == 1

        details = result.order_details
        assert details.id == result.order_id
        assert details.status == "unpaid"
        assert details.created_at == clock.now
        assert details.product_name == "Invoice Builder"
        assert details.platform_name == "Wave"
        assert details.amount == 5000

    def test_stored_row(self, place, storage):
        result = place()
        record = storage.orders[result.order_id]
        assert tuple(record.customer) == ("Doe", "Jane", "jane@x.com", "77123456")
        assert record.platform_id == PLATFORM_ID
        assert record.payee_name == "Jane Doe"
        assert record.payee_account_number == "AB12345"
        assert record.product_id == PRODUCT_ID
        assert record.price == 5000
        assert record.status == "unpaid"

    def test_input_is_normalized_before_storage(self, place, storage):
        result = place(lastName="  doe ", email="Jane@X.com", phone="77 12 34 56")
        record = storage.orders[result.order_id]
        assert record.customer.last_name == "Doe"
        assert record.customer.email == "jane@x.com"
        assert record.customer.phone == "77123456"

    def test_fee_as_form_string(self, place):
        assert place(fee="5000").success is True

    def test_fee_within_tolerance(self, place, storage):
        storage.add_product(PRODUCT_ID, "Invoice Builder", Decimal("5000.01"))
        assert place(fee=Decimal("5000")).success is True

    def test_message_defaults_to_french(self, place):
        assert place().message == "Votre commande a été enregistrée avec succès."

    def test_message_follows_request_locale(self, place):
        result = place(meta=RequestMeta(ip="10.0.0.1", locale="en-US,en;q=0.9"))
        assert result.message == "Your order has been placed successfully."

    def test_cached_views_are_evicted(self, place, read_cache):
        read_cache.set(ORDERS_TAG, product_orders_key(PRODUCT_ID), {"order_count": 0})
        read_cache.set(ORDERS_TAG, ORDER_LIST_KEY, [])
        read_cache.set(ORDERS_TAG, product_orders_key(UNKNOWN_ID), {"order_count": 3})

        place()

        assert read_cache.get(ORDERS_TAG, product_orders_key(PRODUCT_ID)) is None
        assert read_cache.get(ORDERS_TAG, ORDER_LIST_KEY) is None
        assert read_cache.get(ORDERS_TAG, product_orders_key(UNKNOWN_ID)) == {"order_count": 3}

    def test_connection_is_released(self, place, storage):
        place()
        assert storage.connections_opened == 1
        assert storage.open_connections == 0

    def test_object_submission_matches_form_submission(self, service, storage, product_fee):
        submission = SimpleNamespace(
            last_name="Doe",
            first_name="Jane",
            email="jane@x.com",
            phone="77123456",
            platform_id=PLATFORM_ID,
            account_name="Jane Doe",
            account_number="AB12345",
        )
        result = service.create_order(submission, product_id=PRODUCT_ID, expected_fee=product_fee)
        assert result.success is True
        assert tuple(storage.orders[result.order_id].customer) == ("Doe", "Jane", "jane@x.com", "77123456")

    def test_result_payload(self, place):
        payload = place().as_dict()
        assert payload["success"] is True
        assert payload["code"] == ORDER_CREATED
        assert payload["orderDetails"]["amount"] == 5000
        assert payload["orderDetails"]["createdAt"] == "2025-03-14T09:30:00+00:00"
        assert "errors" not in payload


class TestRejectedBeforeStorage:
    def test_sanitization_failure(self, place, storage):
        result = place(lastName="<script>alert(1)</script>")
        assert result.success is False
        assert result.error_code is OrderErrorCode.SANITIZATION_FAILED
        assert set(result.errors) == {"last_name"}
        assert storage.connections_opened == 0

    def test_validation_failure(self, place, storage):
        result = place(email="nope", phone="12")
        assert result.error_code is OrderErrorCode.VALIDATION_FAILED
        assert set(result.errors) == {"email", "phone"}
        assert storage.insert_attempts == 0
        assert storage.connections_opened == 0

    def test_missing_fee(self, place):
        result = place(fee="")
        assert result.error_code is OrderErrorCode.VALIDATION_FAILED
        assert "expected_fee" in result.errors

    def test_business_rule_failure(self, place, storage, telemetry):
        result = place(accountName="Test")
        assert result.error_code is OrderErrorCode.BUSINESS_RULES_FAILED
        assert set(result.errors) == {"account_name"}
        assert storage.connections_opened == 0
        rejected = telemetry.messages_at("info")
        assert rejected[0]["context"]["violations"] == ["placeholder_account_name"]

    def test_safety_check_failure(self, place, storage, telemetry, monkeypatch):
        unsafe = RuleCheck(passed=False, violations=["account_name"])
        monkeypatch.setattr(pipeline, "check_safety", lambda order: unsafe)
        result = place()
        assert result.error_code is OrderErrorCode.SAFETY_CHECK_FAILED
        assert storage.connections_opened == 0
        alert = telemetry.messages_at("error")[0]
        assert alert["context"]["unsafe_fields"] == ["account_name"]

    def test_suspicious_words_are_reported_but_accepted(self, place, telemetry):
        result = place(accountName="Root Admin")
        assert result.success is True
        warning = telemetry.messages_at("warning")[0]
        assert warning["message"] == "Suspicious content in order submission"

    def test_errors_are_localized(self, place):
        result = place(email=None, meta=RequestMeta(ip="10.0.0.1", locale="en"))
        assert result.errors == {"email": "This field is required."}


class TestLookupFailures:
    def test_price_mismatch(self, place, storage):
        result = place(fee=Decimal("4999"))
        assert result.error_code is OrderErrorCode.PRICE_MISMATCH
        assert result.message == "Le prix de l'application a changé. Veuillez actualiser la page."
        assert storage.orders == {}
        assert storage.insert_attempts == 0
        assert storage.rollbacks == 1
        assert storage.open_connections == 0

    def test_unknown_product(self, place, storage):
        result = place(product_id=UNKNOWN_ID)
        assert result.error_code is OrderErrorCode.APPLICATION_NOT_FOUND
        assert storage.orders == {}

    def test_inactive_product(self, place, storage):
        storage.add_product(PRODUCT_ID, "Invoice Builder", Decimal("5000"), is_active=False)
        assert place().error_code is OrderErrorCode.APPLICATION_NOT_FOUND

    def test_unknown_platform(self, place):
        assert place(paymentMethod=UNKNOWN_ID).error_code is OrderErrorCode.PLATFORM_NOT_FOUND

    def test_inactive_platform(self, place, storage):
        storage.add_platform(PLATFORM_ID, "Wave", is_active=False)
        assert place().error_code is OrderErrorCode.PLATFORM_NOT_FOUND

    def test_lookup_failures_are_reported_as_warnings(self, place, telemetry):
        place(fee=Decimal("4999"))
        warning = telemetry.messages_at("warning")[0]
        assert warning["context"]["code"] == "PRICE_MISMATCH"
        assert warning["context"]["canonical_fee"] == "5000"

