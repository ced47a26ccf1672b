"""Transactional in-memory storage for development and testing.

Writes made inside a transaction stay private to the connection until
commit; rollback discards them. Failures can be injected per operation:

    storage.fail("recent_orders", StorageError("replica down"))
    storage.fail("insert_order", StorageTimeout("statement timeout"))
    storage.insert_returns_nothing = True

Latency can be simulated per operation. An operation slower than the
connection timeout raises ``StorageTimeout`` instead of running:

    storage.delay("insert_order", seconds=30)

``committed_writes`` counts orders that reached committed state and
``insert_attempts`` counts every insert call, committed or not.
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from storefront.storage.port import (
    InsertedOrder,
    NewOrder,
    OrderRecord,
    PlatformRecord,
    ProductRecord,
    Storage,
    StorageConnection,
    StorageError,
    StorageTimeout,
)


class InMemoryStorage(Storage):
    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.products: dict[str, ProductRecord] = {}
        self.platforms: dict[str, PlatformRecord] = {}
        self.orders: dict[str, OrderRecord] = {}
        self.clock = clock or (lambda: datetime.now(UTC))
        self.failures: dict[str, BaseException] = {}
        self.latencies: dict[str, float] = {}
        self.insert_returns_nothing: bool = False
        self.committed_writes: int = 0
        self.insert_attempts: int = 0
        self.connections_opened: int = 0
        self.connections_released: int = 0
        self.rollbacks: int = 0
        self._lock = threading.Lock()

    # -------------------------------------------------------------------
    # Seeding and fault injection
    # -------------------------------------------------------------------
    def add_product(self, product_id: str, name: str, fee, is_active: bool = True) -> ProductRecord:
        record = ProductRecord(id=product_id, name=name, fee=Decimal(str(fee)), is_active=is_active)
        self.products[product_id] = record
        return record

    def add_platform(self, platform_id: str, name: str, is_active: bool = True) -> PlatformRecord:
        record = PlatformRecord(id=platform_id, name=name, is_active=is_active)
        self.platforms[platform_id] = record
        return record

    def set_order_status(self, order_id: str, status: str) -> None:
        self.orders[order_id] = replace(self.orders[order_id], status=status)

    def fail(self, operation: str, error: BaseException) -> None:
        self.failures[operation] = error

    def delay(self, operation: str, seconds: float) -> None:
        self.latencies[operation] = seconds

    def heal(self) -> None:
        self.failures.clear()
        self.latencies.clear()
        self.insert_returns_nothing = False

    def _maybe_fail(self, operation: str) -> None:
        error = self.failures.get(operation)
        if error is not None:
            raise error

    @property
    def open_connections(self) -> int:
        return self.connections_opened - self.connections_released

    def connect(self, timeout: float | None = None) -> "InMemoryConnection":
        self._maybe_fail("connect")
        self.connections_opened += 1
        return InMemoryConnection(self, timeout)

    def _apply(self, pending: list[OrderRecord]) -> None:
        with self._lock:
            for record in pending:
                self.orders[record.id] = record
                self.committed_writes += 1


class InMemoryConnection(StorageConnection):
    def __init__(self, storage: InMemoryStorage, timeout: float | None) -> None:
        self._storage = storage
        self.timeout = timeout
        self._pending: list[OrderRecord] = []
        self._open = False
        self._released = False

    @property
    def in_transaction(self) -> bool:
        return self._open

    def begin(self) -> None:
        self._run("begin")
        if self._open:
            raise StorageError("Transaction already open on this connection")
        self._pending = []
        self._open = True

    def commit(self) -> None:
        if not self._open:
            raise StorageError("No open transaction to commit")
        self._run("commit")
        self._storage._apply(self._pending)
        self._pending = []
        self._open = False

    def rollback(self) -> None:
        if not self._open:
            return
        self._pending = []
        self._open = False
        self._storage.rollbacks += 1

    def release(self) -> None:
        if self._released:
            return
        self.rollback()
        self._released = True
        self._storage.connections_released += 1

    def _run(self, operation: str) -> None:
        self._storage._maybe_fail(operation)
        latency = self._storage.latencies.get(operation, 0)
        if self.timeout and latency > self.timeout:
            raise StorageTimeout(f"{operation} exceeded {self.timeout}s")

    def _visible_orders(self) -> list[OrderRecord]:
        return list(self._storage.orders.values()) + self._pending

    def find_product(self, product_id: str) -> ProductRecord | None:
        self._run("find_product")
        return self._storage.products.get(product_id)

    def find_platform(self, platform_id: str) -> PlatformRecord | None:
        self._run("find_platform")
        return self._storage.platforms.get(platform_id)

    def recent_orders(self, product_id: str, email: str, since: datetime) -> list[OrderRecord]:
        self._run("recent_orders")
        return [
            record
            for record in self._visible_orders()
            if record.product_id == product_id and record.customer.email == email and record.created_at >= since
        ]

    def insert_order(self, order: NewOrder) -> InsertedOrder | None:
        self._storage.insert_attempts += 1
        self._run("insert_order")
        if self._storage.insert_returns_nothing:
            return None

        record = OrderRecord(
            id=str(uuid4()),
            customer=order.customer,
            platform_id=order.platform_id,
            payee_name=order.payee_name,
            payee_account_number=order.payee_account_number,
            product_id=order.product_id,
            price=order.price,
            status="unpaid",
            created_at=self._storage.clock(),
        )
        self._pending.append(record)
        return InsertedOrder(id=record.id, created_at=record.created_at, status=record.status)

    def get_order(self, order_id: str) -> OrderRecord | None:
        self._run("get_order")
        return next((r for r in self._visible_orders() if r.id == order_id), None)
