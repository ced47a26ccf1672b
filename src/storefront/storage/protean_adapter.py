"""Storage adapter backed by the storefront domain's repositories.

A connection maps onto one protean UnitOfWork: ``begin()`` starts it,
``commit()``/``rollback()`` end it. Reads and the insert go through the
repositories of the active domain, so they join the same unit of work.
On PostgreSQL the connection timeout becomes the transaction's
``statement_timeout``; cancelled statements surface as ``StorageTimeout``.
"""

from contextlib import nullcontext
from datetime import UTC, datetime
from decimal import Decimal

import structlog
from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy import text

from storefront.catalogue.platform import PaymentPlatform
from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.storage.port import (
    CustomerTuple,
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

logger = structlog.get_logger(__name__)

# PostgreSQL SQLSTATE raised when statement_timeout cancels a query
_QUERY_CANCELED = "57014"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _storage_error(message: str, exc: Exception) -> StorageError:
    if isinstance(exc, TimeoutError) or getattr(getattr(exc, "orig", None), "pgcode", None) == _QUERY_CANCELED:
        return StorageTimeout(f"{message}: {exc}")
    return StorageError(f"{message}: {exc}")


def _order_record(order) -> OrderRecord:
    return OrderRecord(
        id=str(order.id),
        customer=CustomerTuple(*order.customer.as_tuple()),
        platform_id=str(order.platform_id),
        payee_name=order.payee_name,
        payee_account_number=order.payee_account_number,
        product_id=str(order.product_id),
        price=order.price,
        status=order.payment_status,
        created_at=_as_utc(order.created_at),
    )


class ProteanConnection(StorageConnection):
    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._uow: UnitOfWork | None = None
        self._open = False

    @property
    def in_transaction(self) -> bool:
        return self._open

    def begin(self) -> None:
        if self._open:
            raise StorageError("Transaction already open on this connection")
        try:
            self._uow = UnitOfWork()
            self._uow.start()
            self._apply_statement_timeout()
        except Exception as exc:
            if self._uow is not None and self._uow.in_progress:
                self._uow.rollback()
            raise _storage_error("Could not open transaction", exc) from exc
        self._open = True

    def _order_session(self):
        return self._uow.get_session(Order.meta_.provider) if self._uow is not None else None

    def _apply_statement_timeout(self) -> None:
        """Bound every statement of this transaction on PostgreSQL."""
        if not self.timeout:
            return
        session = self._order_session()
        get_bind = getattr(session, "get_bind", None)
        if get_bind is None or get_bind().dialect.name != "postgresql":
            return
        # SET does not accept bound parameters; the value is an int
        session.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout * 1000)}"))

    def commit(self) -> None:
        if not self._open:
            raise StorageError("No open transaction to commit")
        # Whatever happens, the unit of work is finished after this call
        self._open = False
        try:
            self._uow.commit()
        except Exception as exc:
            raise _storage_error("Commit failed", exc) from exc

    def rollback(self) -> None:
        if not self._open:
            return
        self._open = False
        try:
            self._uow.rollback()
        except Exception as exc:
            raise _storage_error("Rollback failed", exc) from exc

    def release(self) -> None:
        if self._open:
            try:
                self.rollback()
            except StorageError as exc:
                logger.error("Rollback on release failed", error=str(exc))
        self._uow = None

    def find_product(self, product_id: str) -> ProductRecord | None:
        try:
            product = current_domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            raise _storage_error("Product lookup failed", exc) from exc
        return ProductRecord(
            id=str(product.id),
            name=product.name,
            fee=Decimal(str(product.fee)),
            is_active=bool(product.is_active),
        )

    def find_platform(self, platform_id: str) -> PlatformRecord | None:
        try:
            platform = current_domain.repository_for(PaymentPlatform).get(platform_id)
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            raise _storage_error("Platform lookup failed", exc) from exc
        return PlatformRecord(id=str(platform.id), name=platform.name, is_active=bool(platform.is_active))

    def _savepoint(self):
        # On providers with nested transactions a failed read only rolls back to this savepoint
        session = self._order_session()
        begin_nested = getattr(session, "begin_nested", None)
        return begin_nested() if begin_nested is not None else nullcontext()

    def recent_orders(self, product_id: str, email: str, since: datetime) -> list[OrderRecord]:
        since = _as_utc(since).astimezone(UTC)
        try:
            with self._savepoint():
                orders = (
                    current_domain.repository_for(Order)
                    ._dao.query.filter(product_id=product_id, customer_email=email, created_at__gte=since)
                    .order_by("-created_at")
                    .limit(None)
                    .all()
                    .items
                )
        except Exception as exc:
            raise _storage_error("Order history lookup failed", exc) from exc

        return [_order_record(order) for order in orders]

    def insert_order(self, order: NewOrder) -> InsertedOrder | None:
        try:
            placed = Order.place(
                customer=order.customer._asdict(),
                platform_id=order.platform_id,
                payee_name=order.payee_name,
                payee_account_number=order.payee_account_number,
                product_id=order.product_id,
                price=order.price,
            )
            current_domain.repository_for(Order).add(placed)
        except Exception as exc:
            raise _storage_error("Order insert failed", exc) from exc

        if not placed.id:
            return None
        return InsertedOrder(id=str(placed.id), created_at=_as_utc(placed.created_at), status=placed.payment_status)

    def get_order(self, order_id: str) -> OrderRecord | None:
        try:
            order = current_domain.repository_for(Order).get(order_id)
        except ObjectNotFoundError:
            return None
        except Exception as exc:
            raise _storage_error("Order lookup failed", exc) from exc
        return _order_record(order)


class ProteanStorage(Storage):
    def connect(self, timeout: float | None = None) -> ProteanConnection:
        return ProteanConnection(timeout=timeout)
