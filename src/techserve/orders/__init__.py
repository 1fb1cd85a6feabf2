"""Order service clients, submission, and lookup."""

from techserve.orders.client import OrdersClient, build_request_log_record, create_client
from techserve.orders.http import HttpOrdersClient
from techserve.orders.local import LocalOrdersClient
from techserve.orders.submission import (
    LookupOutcome,
    OrderSubmitter,
    SubmissionOutcome,
    TrackedOrder,
    build_order_payload,
    build_order_request,
    lookup_order,
    lookup_orders,
)
from techserve.orders.types import AddonCharge, OrderConfirmation, OrderRequest, OrdersApiError, OsSelection

__all__ = [
    "AddonCharge",
    "HttpOrdersClient",
    "LocalOrdersClient",
    "LookupOutcome",
    "OrderConfirmation",
    "OrderRequest",
    "OrderSubmitter",
    "OrdersApiError",
    "OrdersClient",
    "OsSelection",
    "SubmissionOutcome",
    "TrackedOrder",
    "build_order_payload",
    "build_order_request",
    "build_request_log_record",
    "create_client",
    "lookup_order",
    "lookup_orders",
]
