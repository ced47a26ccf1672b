"""Shared BDD fixtures and step definitions for order placement."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then, when

from storefront.cache.memory_adapter import MemoryReadCache
from storefront.config import PlacementSettings
from storefront.placement import ORDER_CREATED, OrderErrorCode, RequestMeta
from storefront.placement.pipeline import OrderPlacementService
from storefront.ratelimit.memory_adapter import SlidingWindowRateLimiter
from storefront.storage.fake_adapter import InMemoryStorage
from storefront.storage.port import StorageError
from storefront.telemetry.fake_adapter import RecordingTelemetry

PRODUCT_ID = "0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21"
PLATFORM_ID = "5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11"


@pytest.fixture()
def storage(clock):
    return InMemoryStorage(clock=clock)


@pytest.fixture()
def service(storage, clock):
    return OrderPlacementService(
        storage=storage,
        cache=MemoryReadCache(),
        rate_limiter=SlidingWindowRateLimiter(),
        telemetry=RecordingTelemetry(),
        settings=PlacementSettings(),
        clock=clock,
    )


@pytest.fixture()
def submit(service, checkout_form):
    def _submit(fee=Decimal("5000"), **overrides):
        return service.create_order(
            {**checkout_form, **overrides},
            product_id=PRODUCT_ID,
            expected_fee=fee,
            request_meta=RequestMeta(ip="10.0.0.1"),
        )

    return _submit


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the application "{name}" is on sale for {fee:d}'))
def _(storage, name, fee):
    storage.add_product(PRODUCT_ID, name, Decimal(fee))


@given(parsers.cfparse('the payment platform "{name}" is available'))
def _(storage, name):
    storage.add_platform(PLATFORM_ID, name)


@given("the customer has already ordered the application", target_fixture="previous_order")
def _(submit):
    result = submit()
    assert result.success is True
    return result


@given("that order failed")
def _(storage, previous_order):
    storage.set_order_status(previous_order.order_id, "failed")


@given(parsers.cfparse("{minutes:d} minutes have passed"))
def _(clock, minutes):
    clock.advance(minutes * 60)


@given("the database fails on insert")
def _(storage):
    storage.fail("insert_order", StorageError("disk full"))


@given(parsers.cfparse("the customer has made {count:d} invalid attempts"))
def _(submit, count):
    for _ in range(count):
        assert submit(phone="12").code == OrderErrorCode.VALIDATION_FAILED.value


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the customer submits the checkout form expecting a fee of {fee:d}"), target_fixture="result")
def _(submit, fee):
    return submit(fee=Decimal(fee))


@when(
    parsers.cfparse('the customer submits the checkout form with {field_name} "{value}"'),
    target_fixture="result",
)
def _(submit, field_name, value):
    return submit(**{field_name: value})


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is created")
def _(result):
    assert result.success is True
    assert result.code == ORDER_CREATED


@then(parsers.cfparse('the order is rejected with "{code}"'))
def _(result, code):
    assert result.success is False
    assert result.code == code


@then(parsers.cfparse("the order amount is {amount:d}"))
def _(result, amount):
    assert result.order_details.amount == amount


@then(parsers.cfparse('the order status is "{status}"'))
def _(result, status):
    assert result.order_details.status == status


@then(parsers.cfparse("{count:d} order is stored"))
@then(parsers.cfparse("{count:d} orders are stored"))
def _(storage, count):
    assert len(storage.orders) == count


@then(parsers.cfparse("the customer may retry after {seconds:d} seconds"))
def _(result, seconds):
    assert result.retry_after == seconds


@then(parsers.cfparse('the field "{field_name}" has an error'))
def _(result, field_name):
    assert field_name in result.errors


@then("the connection was released")
def _(storage):
    assert storage.open_connections == 0
