from decimal import Decimal

import pytest

from storefront.cache.memory_adapter import MemoryReadCache
from storefront.config import PlacementSettings
from storefront.placement.pipeline import OrderPlacementService
from storefront.placement.request import RequestMeta
from storefront.ratelimit.memory_adapter import SlidingWindowRateLimiter
from storefront.storage.fake_adapter import InMemoryStorage
from storefront.telemetry.fake_adapter import RecordingTelemetry

PRODUCT_ID = "0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21"
PLATFORM_ID = "5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11"


@pytest.fixture()
def storage(clock):
    storage = InMemoryStorage(clock=clock)
    storage.add_product(PRODUCT_ID, "Invoice Builder", Decimal("5000"))
    storage.add_platform(PLATFORM_ID, "Wave")
    return storage


@pytest.fixture()
def read_cache():
    return MemoryReadCache()


@pytest.fixture()
def rate_limiter():
    return SlidingWindowRateLimiter(max_attempts=3, window_seconds=300)


@pytest.fixture()
def telemetry():
    return RecordingTelemetry()


@pytest.fixture()
def settings():
    return PlacementSettings(environment="test")


@pytest.fixture()
def service(storage, read_cache, rate_limiter, telemetry, settings, clock):
    return OrderPlacementService(
        storage=storage,
        cache=read_cache,
        rate_limiter=rate_limiter,
        telemetry=telemetry,
        settings=settings,
        clock=clock,
    )


@pytest.fixture()
def place(service, checkout_form, product_fee):
    """Submit the checkout form, optionally overriding fields, fee or request metadata."""

    def _place(fee=None, meta=None, product_id=PRODUCT_ID, **form_overrides):
        form = {**checkout_form, **form_overrides}
        return service.create_order(
            form,
            product_id=product_id,
            expected_fee=product_fee if fee is None else fee,
            request_meta=meta or RequestMeta(ip="10.0.0.1"),
        )

    return _place
