"""Order storage port (abstract interface).

A submission acquires one connection, opens a transaction on it, performs
its reads and the insert, then commits or rolls back. ``release()`` must be
called on every exit path; releasing a connection whose transaction is still
open rolls it back.

All lookups take their inputs as bound values. Adapters never build query
text from them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import NamedTuple


class StorageError(Exception):
    """The storage engine failed or is unreachable."""


class StorageTimeout(StorageError):
    """A storage operation exceeded the connection timeout."""


class CustomerTuple(NamedTuple):
    last_name: str
    first_name: str
    email: str
    phone: str


@dataclass(frozen=True)
class ProductRecord:
    id: str
    name: str
    fee: Decimal
    is_active: bool


@dataclass(frozen=True)
class PlatformRecord:
    id: str
    name: str
    is_active: bool


@dataclass(frozen=True)
class NewOrder:
    """Everything the writer inserts. Identity and timestamps come from storage."""

    customer: CustomerTuple
    platform_id: str
    payee_name: str
    payee_account_number: str
    product_id: str
    price: int


@dataclass(frozen=True)
class InsertedOrder:
    id: str
    created_at: datetime
    status: str


@dataclass(frozen=True)
class OrderRecord:
    id: str
    customer: CustomerTuple
    platform_id: str
    payee_name: str
    payee_account_number: str
    product_id: str
    price: int
    status: str
    created_at: datetime


class StorageConnection(ABC):
    """One pooled connection, used by a single submission."""

    @property
    @abstractmethod
    def in_transaction(self) -> bool: ...

    @abstractmethod
    def begin(self) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...

    @abstractmethod
    def release(self) -> None:
        """Return the connection to the pool, rolling back any open transaction."""
        ...

    @abstractmethod
    def find_product(self, product_id: str) -> ProductRecord | None: ...

    @abstractmethod
    def find_platform(self, platform_id: str) -> PlatformRecord | None: ...

    @abstractmethod
    def recent_orders(self, product_id: str, email: str, since: datetime) -> list[OrderRecord]:
        """Orders for this product and email created at or after ``since``, any status."""
        ...

    @abstractmethod
    def insert_order(self, order: NewOrder) -> InsertedOrder | None:
        """Insert and return the generated identity, or None when nothing was written."""
        ...

    @abstractmethod
    def get_order(self, order_id: str) -> OrderRecord | None: ...


class Storage(ABC):
    """Connection source."""

    @abstractmethod
    def connect(self, timeout: float | None = None) -> StorageConnection:
        """Acquire a connection. ``timeout`` bounds each operation, in seconds."""
        ...
