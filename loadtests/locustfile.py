"""Storefront Load Testing: Locust entry point.

The target database must hold the product and payment platform named by
LOADTEST_PRODUCT_ID and LOADTEST_PLATFORM_ID (see ``manage.py seed-product``
and ``manage.py seed-platform``).

Usage:
    # Web UI:
    locust -f loadtests/locustfile.py

    # Headless (CI mode):
    locust -f loadtests/locustfile.py OrderPlacementUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.placement import OrderPlacementUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Shows the pipeline's code and field errors, e.g.
    "VALIDATION_FAILED: email: Invalid email address." instead of just "422".
    Expected rejections (duplicates, rate limiting) are logged too.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print order placement outcome counts when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    stats = environment.stats.get("POST /orders", "POST")
    print(f"[LOADTEST] Orders submitted: {stats.num_requests}, failed: {stats.num_failures}\n")
