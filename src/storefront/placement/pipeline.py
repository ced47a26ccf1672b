"""Order placement pipeline.

Runs a submission through every stage in order:

    rate limit -> sanitize -> validate -> business rules -> safety check
    -> open transaction -> resolve entities -> duplicate check -> write
    -> commit -> invalidate cached views

Nothing before the transaction touches storage. Anything that goes wrong
after it opens is rolled back. Whether a failing stage stops the order or
is logged and skipped is decided by ``ERROR_POLICIES``, not by the stage
code. Every outcome, including unexpected exceptions, comes back as an
``OrderResult``.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

from storefront.cache import get_cache
from storefront.cache.port import ReadCache
from storefront.config import PlacementSettings, load_settings
from storefront.placement.duplicates import find_duplicate
from storefront.placement.invalidation import invalidate_order_views
from storefront.placement.messages import field_message, message_for, resolve_locale
from storefront.placement.outcome import (
    CLIENT_INPUT_ERRORS,
    LOOKUP_ERRORS,
    ORDER_CREATED,
    OrderDetails,
    OrderErrorCode,
    OrderResult,
)
from storefront.placement.request import OrderRequest, RequestMeta, is_checkout_form
from storefront.placement.resolver import price_matches, resolve_entities
from storefront.placement.rules import check_business_rules, check_safety
from storefront.placement.sanitizer import sanitize_order
from storefront.placement.schema import validate_order
from storefront.placement.writer import write_order
from storefront.ratelimit import ORDER_ROUTE_KEY, get_rate_limiter
from storefront.ratelimit.port import RateLimiter
from storefront.storage import get_storage
from storefront.storage.port import Storage, StorageConnection, StorageError
from storefront.telemetry import get_telemetry
from storefront.telemetry.port import Telemetry

logger = structlog.get_logger(__name__)


class PipelineStage(str, Enum):
    RATE_LIMITED = "rate_limited"
    SANITIZING = "sanitizing"
    VALIDATING = "validating"
    BUSINESS_RULES = "business_rules"
    SAFETY_CHECK = "safety_check"
    TX_OPEN = "tx_open"
    RESOLVING_ENTITIES = "resolving_entities"
    DUPLICATE_CHECK = "duplicate_check"
    WRITING = "writing"
    TX_COMMITTED = "tx_committed"
    CACHE_INVALIDATED = "cache_invalidated"


class ErrorPolicy(Enum):
    CONTINUE = "continue"
    REPORT = "report"
    ROLLBACK_AND_REPORT = "rollback_and_report"


# What happens when a stage raises
ERROR_POLICIES = {
    PipelineStage.RATE_LIMITED: ErrorPolicy.CONTINUE,
    PipelineStage.SANITIZING: ErrorPolicy.REPORT,
    PipelineStage.VALIDATING: ErrorPolicy.REPORT,
    PipelineStage.BUSINESS_RULES: ErrorPolicy.REPORT,
    PipelineStage.SAFETY_CHECK: ErrorPolicy.REPORT,
    PipelineStage.TX_OPEN: ErrorPolicy.ROLLBACK_AND_REPORT,
    PipelineStage.RESOLVING_ENTITIES: ErrorPolicy.ROLLBACK_AND_REPORT,
    PipelineStage.DUPLICATE_CHECK: ErrorPolicy.CONTINUE,
    PipelineStage.WRITING: ErrorPolicy.ROLLBACK_AND_REPORT,
    PipelineStage.TX_COMMITTED: ErrorPolicy.ROLLBACK_AND_REPORT,
    PipelineStage.CACHE_INVALIDATED: ErrorPolicy.CONTINUE,
}

# Field each business rule points the customer at
_RULE_FIELDS = {
    "placeholder_account_name": "account_name",
    "placeholder_customer_name": "last_name",
    "sequential_account_number": "account_number",
    "account_name_is_contact_detail": "account_name",
}


class PlacementFailure(Exception):
    """A stage stopped the order. Carries everything the result needs."""

    def __init__(
        self,
        code: OrderErrorCode,
        stage: PipelineStage,
        errors: dict[str, str] | None = None,
        retry_after: int | None = None,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(code.value)
        self.code = code
        self.stage = stage
        self.errors = errors or {}
        self.retry_after = retry_after
        self.cause = cause
        self.context = context or {}


def build_order_request(form_fields: Any, product_id: Any, expected_fee: Any) -> OrderRequest:
    """Accept a checkout form mapping, a mapping/object keyed by attribute name, or an OrderRequest."""
    if isinstance(form_fields, OrderRequest):
        return replace(form_fields, product_id=product_id, expected_fee=expected_fee)
    if is_checkout_form(form_fields):
        return OrderRequest.from_form(form_fields, product_id, expected_fee)
    return OrderRequest.from_object(form_fields or {}, product_id, expected_fee)


class OrderPlacementService:
    """Places orders. Collaborators default to the configured adapters."""

    def __init__(
        self,
        storage: Storage | None = None,
        cache: ReadCache | None = None,
        rate_limiter: RateLimiter | None = None,
        telemetry: Telemetry | None = None,
        settings: PlacementSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.storage = storage or get_storage()
        self.cache = cache or get_cache()
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self.telemetry = telemetry or get_telemetry()
        self.settings = settings or load_settings()
        self.clock = clock or (lambda: datetime.now(UTC))

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    def create_order(
        self,
        form_fields: Any,
        product_id: Any,
        expected_fee: Any,
        request_meta: RequestMeta | None = None,
    ) -> OrderResult:
        meta = request_meta or RequestMeta()
        locale = resolve_locale(meta.locale, self.settings.default_locale)
        log = logger.bind(product_id=str(product_id), client_ip=meta.ip)

        connection: StorageConnection | None = None
        stage = PipelineStage.RATE_LIMITED
        try:
            request = build_order_request(form_fields, product_id, expected_fee)
            if meta.subject is None and isinstance(request.email, str):
                meta = replace(meta, subject=request.email)

            # -- Gate --
            blocked = self._guarded(stage, lambda: self.rate_limiter.check(ORDER_ROUTE_KEY, meta), fallback=False)
            if blocked:
                retry_after = self._guarded(
                    stage,
                    lambda: self.rate_limiter.retry_after(ORDER_ROUTE_KEY, meta),
                    fallback=self.settings.rate_limit_window_seconds,
                )
                raise PlacementFailure(OrderErrorCode.RATE_LIMITED, stage, retry_after=retry_after)

            # -- Pure checks --
            stage = PipelineStage.SANITIZING
            sanitized = sanitize_order(request)
            if sanitized.warnings:
                self.telemetry.capture_message(
                    "Suspicious content in order submission",
                    {"product_id": str(product_id), "warnings": sanitized.warnings},
                    level="warning",
                )
            if not sanitized.success:
                errors = {
                    issue.field_name: field_message(issue.rule, locale, **issue.params) for issue in sanitized.issues
                }
                raise PlacementFailure(OrderErrorCode.SANITIZATION_FAILED, stage, errors=errors)

            stage = PipelineStage.VALIDATING
            schema = validate_order(sanitized.record, locale)
            if not schema.valid:
                raise PlacementFailure(OrderErrorCode.VALIDATION_FAILED, stage, errors=schema.errors)
            order = schema.order

            stage = PipelineStage.BUSINESS_RULES
            rules = check_business_rules(order)
            if not rules.passed:
                errors = {}
                for rule in rules.violations:
                    errors.setdefault(_RULE_FIELDS[rule], field_message(rule, locale))
                raise PlacementFailure(
                    OrderErrorCode.BUSINESS_RULES_FAILED,
                    stage,
                    errors=errors,
                    context={"violations": rules.violations},
                )

            stage = PipelineStage.SAFETY_CHECK
            safety = check_safety(order)
            if not safety.passed:
                raise PlacementFailure(
                    OrderErrorCode.SAFETY_CHECK_FAILED,
                    stage,
                    context={"unsafe_fields": safety.violations},
                )

            # -- Transaction --
            stage = PipelineStage.TX_OPEN
            connection = self.storage.connect(timeout=self.settings.db_timeout_seconds)
            connection.begin()

            stage = PipelineStage.RESOLVING_ENTITIES
            resolution = resolve_entities(connection, order.product_id, order.platform_id)
            if not resolution.resolved:
                raise PlacementFailure(resolution.error, stage)
            product = resolution.entities.product
            platform = resolution.entities.platform
            if not price_matches(order.fee, product.fee, self.settings.price_tolerance):
                raise PlacementFailure(
                    OrderErrorCode.PRICE_MISMATCH,
                    stage,
                    context={"expected_fee": str(order.fee), "canonical_fee": str(product.fee)},
                )

            stage = PipelineStage.DUPLICATE_CHECK
            duplicate = self._guarded(
                stage,
                lambda: find_duplicate(
                    connection,
                    email=order.email,
                    product_id=order.product_id,
                    now=self.clock(),
                    window_seconds=self.settings.duplicate_window_seconds,
                ),
                fallback=None,
            )
            if duplicate is not None and duplicate.duplicate:
                raise PlacementFailure(
                    OrderErrorCode.DUPLICATE_ORDER,
                    stage,
                    retry_after=duplicate.retry_after,
                    context={"blocking_order_id": duplicate.blocking_order_id},
                )

            stage = PipelineStage.WRITING
            inserted = write_order(connection, order)
            if inserted is None:
                raise PlacementFailure(OrderErrorCode.INSERT_FAILED, stage)

            stage = PipelineStage.TX_COMMITTED
            connection.commit()
            log.info("Order placed", order_id=inserted.id, platform_id=order.platform_id, amount=int(order.fee))

            # -- After commit: the order stands whatever happens here --
            stage = PipelineStage.CACHE_INVALIDATED
            self._guarded(stage, lambda: invalidate_order_views(self.cache, order.product_id), fallback=0)
            self._guarded(
                PipelineStage.RATE_LIMITED,
                lambda: self.rate_limiter.record_success(ORDER_ROUTE_KEY, meta),
                fallback=None,
            )

            return OrderResult(
                success=True,
                message=message_for(ORDER_CREATED, locale),
                code=ORDER_CREATED,
                order_id=inserted.id,
                order_details=OrderDetails(
                    id=inserted.id,
                    status=inserted.status,
                    created_at=inserted.created_at,
                    product_name=product.name,
                    amount=int(order.fee),
                    platform_name=platform.name,
                ),
            )
        except PlacementFailure as failure:
            return self._fail(failure, connection, locale, log)
        except Exception as exc:
            code = (
                OrderErrorCode.DATABASE_ERROR
                if isinstance(exc, StorageError | TimeoutError)
                else OrderErrorCode.UNKNOWN_ERROR
            )
            return self._fail(PlacementFailure(code, stage, cause=exc), connection, locale, log)
        finally:
            if connection is not None:
                self._release(connection, log)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _guarded(self, stage: PipelineStage, operation: Callable[[], Any], fallback: Any) -> Any:
        """Run a collaborator call under the stage's error policy."""
        try:
            return operation()
        except Exception as exc:
            if ERROR_POLICIES[stage] is not ErrorPolicy.CONTINUE:
                raise
            logger.warning("Stage failed, continuing", stage=stage.value, error=str(exc))
            self.telemetry.capture_exception(exc, {"stage": stage.value, "policy": ErrorPolicy.CONTINUE.value})
            return fallback

    def _fail(
        self,
        failure: PlacementFailure,
        connection: StorageConnection | None,
        locale: str,
        log,
    ) -> OrderResult:
        # Any stop while the transaction is open leaves nothing behind
        if connection is not None and connection.in_transaction:
            try:
                connection.rollback()
            except Exception as exc:
                log.error("Rollback failed", stage=failure.stage.value, error=str(exc))
                self.telemetry.capture_exception(exc, {"stage": failure.stage.value, "operation": "rollback"})

        self._report(failure, log)

        detail = None
        if failure.cause is not None and self.settings.is_development:
            detail = f"{type(failure.cause).__name__}: {failure.cause}"

        return OrderResult(
            success=False,
            message=message_for(failure.code, locale),
            code=failure.code.value,
            errors=failure.errors,
            retry_after=failure.retry_after,
            detail=detail,
        )

    def _report(self, failure: PlacementFailure, log) -> None:
        fields = {"code": failure.code.value, "stage": failure.stage.value, **failure.context}
        if failure.errors:
            fields["fields"] = sorted(failure.errors)

        if failure.code is OrderErrorCode.SAFETY_CHECK_FAILED:
            log.critical("Order rejected by safety check", **fields)
            self.telemetry.capture_message("Order rejected by safety check", fields, level="error")
        elif failure.code is OrderErrorCode.RATE_LIMITED:
            log.warning("Order submission rate limited", retry_after=failure.retry_after, **fields)
        elif failure.code in CLIENT_INPUT_ERRORS:
            log.info("Order rejected", **fields)
            self.telemetry.capture_message("Order rejected", fields, level="info")
        elif failure.code in LOOKUP_ERRORS:
            log.warning("Order rejected", retry_after=failure.retry_after, **fields)
            self.telemetry.capture_message("Order rejected", fields, level="warning")
        else:
            cause = failure.cause or failure
            log.error("Order placement failed", error=str(cause), error_type=type(cause).__name__, **fields)
            self.telemetry.capture_exception(cause, fields)

    def _release(self, connection: StorageConnection, log) -> None:
        try:
            connection.release()
        except Exception as exc:
            log.error("Connection release failed", error=str(exc))
            self.telemetry.capture_exception(exc, {"operation": "release"})


def create_order(
    form_fields: Any,
    product_id: Any,
    expected_fee: Any,
    request_meta: RequestMeta | None = None,
) -> OrderResult:
    """Place an order with the configured storage, cache, rate limiter and telemetry."""
    return OrderPlacementService().create_order(form_fields, product_id, expected_fee, request_meta)
