from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from protean.integrations.pytest import DomainFixture

from storefront.cache import reset_cache
from storefront.ratelimit import reset_rate_limiter
from storefront.storage import reset_storage
from storefront.telemetry import reset_telemetry

PRODUCT_ID = "0b8f2f6e-3c1d-4d2a-a0f4-6c5e9d7b8a21"
PLATFORM_ID = "5f0c6c1e-8a52-4b8e-9d53-2f1f3e0b7a11"


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_adapters():
    yield
    reset_storage()
    reset_cache()
    reset_rate_limiter()
    reset_telemetry()


class FrozenClock:
    """Settable UTC clock shared by the service and the in-memory storage."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 3, 14, 9, 30, tzinfo=UTC)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture()
def clock():
    return FrozenClock()


@pytest.fixture()
def checkout_form():
    """A checkout form as the storefront page posts it."""
    return {
        "lastName": "Doe",
        "firstName": "Jane",
        "email": "jane@x.com",
        "phone": "77123456",
        "paymentMethod": PLATFORM_ID,
        "accountName": "Jane Doe",
        "accountNumber": "AB12345",
    }


@pytest.fixture()
def product_fee():
    return Decimal("5000")
