"""Client interface and shared helpers for the order service."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from techserve.orders.types import OrderConfirmation


@runtime_checkable
class OrdersClient(Protocol):
    async def load_catalog(self) -> list[dict[str, Any]]:
        """Return active operating systems with their active versions."""

    async def create_order(self, payload: dict[str, Any]) -> OrderConfirmation:
        """Create an order with its OS selections and add-ons as one unit."""

    async def find_orders(self, email: str, phone: str) -> list[dict[str, Any]]:
        """Return orders for a contact, newest first."""

    async def get_order(self, order_number: str) -> dict[str, Any]:
        """Return one order row; unknown numbers raise ``OrdersApiError`` (404)."""

    async def aclose(self) -> None:
        """Release any underlying client resources."""


def create_client(mode: str, **kwargs: Any) -> OrdersClient:
    if mode == "local":
        from techserve.orders.local import LocalOrdersClient

        return LocalOrdersClient(**kwargs)
    if mode == "remote":
        from techserve.orders.http import HttpOrdersClient

        return HttpOrdersClient(**kwargs)
    raise ValueError(f"Unsupported order backend: {mode}")


def build_request_log_record(
    *,
    endpoint: str,
    order_number: str | None,
    request: dict[str, Any],
    ok: bool,
    latency_ms: int,
    reason: str | None = None,
    status_code: int | None = None,
) -> dict[str, Any]:
    return {
        "endpoint": endpoint,
        "order_number": order_number,
        "ok": ok,
        "reason": reason,
        "status_code": status_code,
        "latency_ms": latency_ms,
        "request": request,
    }
