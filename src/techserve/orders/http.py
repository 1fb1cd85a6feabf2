"""HTTP client for the TechServe order service."""

from __future__ import annotations

import os
from typing import Any
from urllib.parse import quote

import httpx

from techserve.config import DEFAULT_API_URL, DEFAULT_TIMEOUT_S
from techserve.orders.types import OrderConfirmation, OrdersApiError


class HttpOrdersClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url or os.environ.get("TECHSERVE_API_URL", DEFAULT_API_URL)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_s,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def load_catalog(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/operating-systems")
        if not isinstance(data, list):
            raise OrdersApiError(
                status_code=502,
                reason="Catalog response must be a list.",
                endpoint="/operating-systems",
            )
        return data

    async def create_order(self, payload: dict[str, Any]) -> OrderConfirmation:
        data = await self._request("POST", "/orders", json=payload)
        if not isinstance(data, dict):
            data = {}
        return OrderConfirmation(
            order_id=data.get("orderId"),
            order_number=str(data.get("orderNumber") or payload.get("orderNumber", "")),
            message=str(data.get("message", "")),
            raw=data,
        )

    async def find_orders(self, email: str, phone: str) -> list[dict[str, Any]]:
        data = await self._request("POST", "/orders/find", json={"email": email, "phone": phone})
        if not isinstance(data, list):
            raise OrdersApiError(
                status_code=502,
                reason="Order lookup response must be a list.",
                endpoint="/orders/find",
            )
        return data

    async def get_order(self, order_number: str) -> dict[str, Any]:
        endpoint = f"/orders/{quote(order_number, safe='')}"
        data = await self._request("GET", endpoint)
        if not isinstance(data, dict):
            raise OrdersApiError(status_code=502, reason="Order response must be an object.", endpoint=endpoint)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpOrdersClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _request(self, method: str, endpoint: str, json: dict[str, Any] | None = None) -> Any:
        response = await self._client.request(method, endpoint, json=json)
        if response.status_code < 200 or response.status_code >= 300:
            raise OrdersApiError(
                status_code=response.status_code,
                reason=_error_reason(response),
                endpoint=endpoint,
                response_text=response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise OrdersApiError(
                status_code=response.status_code,
                reason="Response was not valid JSON.",
                endpoint=endpoint,
                response_text=response.text,
            ) from exc


def _error_reason(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"Request failed with status {response.status_code}"
