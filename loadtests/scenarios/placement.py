"""Order placement load test scenarios.

One SequentialTaskSet journey walks a customer through checkout, an
accidental resubmission, the order view and settlement. A second task
submits stale prices to exercise the rejection path.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import PRODUCT_ID, checkout_data, stale_checkout_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState


class CheckoutJourney(SequentialTaskSet):
    """Place Order -> Resubmit (duplicate) -> View Order -> Mark Paid -> Product Summary."""

    def on_start(self):
        self.state = OrderState()

    @task
    def place_order(self):
        payload = checkout_data()
        self.state.email = payload["email"]
        self._payload = payload
        with self.client.post("/orders", json=payload, catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["orderId"]
            else:
                resp.failure(f"Place order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def resubmit(self):
        with self.client.post(
            "/orders",
            json=self._payload,
            catch_response=True,
            name="POST /orders (resubmit)",
        ) as resp:
            if resp.status_code == 409:
                resp.success()
            else:
                resp.failure(f"Resubmission was not rejected as duplicate: {resp.status_code}")

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View order failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def mark_paid(self):
        with self.client.put(
            f"/orders/{self.state.order_id}/payment-status",
            json={"status": "paid"},
            catch_response=True,
            name="PUT /orders/{id}/payment-status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "paid"
            else:
                resp.failure(f"Mark paid failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def product_summary(self):
        self.client.get(f"/products/{PRODUCT_ID}/orders", name="GET /products/{id}/orders")

    @task
    def done(self):
        self.interrupt()


class StalePriceJourney(SequentialTaskSet):
    @task
    def submit_stale_price(self):
        with self.client.post(
            "/orders",
            json=stale_checkout_data(),
            catch_response=True,
            name="POST /orders (stale price)",
        ) as resp:
            if resp.status_code == 422 and resp.json().get("code") == "PRICE_MISMATCH":
                resp.success()
            else:
                resp.failure(f"Stale price was not rejected: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderPlacementUser(HttpUser):
    """Locust user simulating storefront checkouts.

    Weighted distribution:
    - 80% Checkout journey
    - 20% Stale price submissions
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        CheckoutJourney: 4,
        StalePriceJourney: 1,
    }
