from storefront.placement.outcome import ORDER_CREATED, OrderErrorCode, OrderResult
from storefront.placement.pipeline import OrderPlacementService, create_order
from storefront.placement.request import OrderRequest, RequestMeta

__all__ = [
    "ORDER_CREATED",
    "OrderErrorCode",
    "OrderPlacementService",
    "OrderRequest",
    "OrderResult",
    "RequestMeta",
    "create_order",
]
