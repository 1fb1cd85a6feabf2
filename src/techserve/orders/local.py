"""In-process order service for offline use and tests.

Mirrors the remote service's contract: the same catalog shape, the same
server-side checks on submitted orders, lookups in the service's row shape,
and an order's OS selections and add-ons created together with the order
or not at all.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any, Callable

from techserve.catalog import load_catalog_records
from techserve.config import ADD_ON_TYPES, INSTALLATION_TYPES, ORDER_STATUSES
from techserve.orders.types import OrderConfirmation, OrdersApiError
from techserve.storage import read_json, write_json

SERVER_PHONE_PATTERN = re.compile(r"^07[0-9]{8}$")
ORDER_NUMBER_PATTERN = re.compile(r"^TS-[0-9]{10}$")
CUSTOMER_KEYS = ("customerName", "customerEmail", "customerPhone", "customerAddress")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalOrdersClient:
    def __init__(
        self,
        *,
        catalog_records: list[dict[str, Any]] | None = None,
        store_path: Path | None = None,
        latency_ms: int = 0,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        if catalog_records is None:
            catalog_records, _warning = load_catalog_records()
        self._catalog = copy.deepcopy(catalog_records)
        self._store_path = store_path
        self._latency_ms = latency_ms
        self._clock = clock
        self._document = self._load_document()

    async def load_catalog(self) -> list[dict[str, Any]]:
        await self._simulate_latency()
        systems = []
        for system in sorted(self._catalog, key=lambda item: item["name"]):
            if not system.get("is_active", True):
                continue
            versions = [
                {"id": version["id"], "name": version["name"], "is_active": True}
                for version in sorted(system.get("versions") or [], key=lambda item: item["name"])
                if version.get("is_active", True)
            ]
            systems.append(
                {
                    "id": system["id"],
                    "name": system["name"],
                    "type": system["type"],
                    "is_active": True,
                    "versions": versions,
                }
            )
        return systems

    async def create_order(self, payload: dict[str, Any]) -> OrderConfirmation:
        await self._simulate_latency()
        reason = self._check_payload(payload)
        if reason:
            raise OrdersApiError(status_code=400, reason=reason, endpoint="/orders")
        orders = self._document["orders"]
        order_number = payload["orderNumber"]
        if any(order["order_number"] == order_number for order in orders):
            raise OrdersApiError(status_code=409, reason="Order number already exists", endpoint="/orders")

        order_id = self._document["next_id"]
        now = self._clock()
        record = {
            "id": order_id,
            "order_number": order_number,
            "installation_type": payload["installationType"],
            "customer_name": payload["customerName"],
            "customer_email": payload["customerEmail"],
            "customer_phone": payload["customerPhone"],
            "customer_address": payload["customerAddress"],
            "status": "pending",
            "created_at": now,
            "updated_at": now,
            "os_selections": [self._selection_row(selection) for selection in payload["osSelections"]],
            "addons": [
                {"addon_type": addon["type"], "price": addon["price"]}
                for addon in payload.get("addons") or []
            ],
        }
        # The order and its child rows land in one document swap.
        self._commit({"orders": [*orders, record], "next_id": order_id + 1})
        return OrderConfirmation(
            order_id=order_id,
            order_number=order_number,
            message="Order created successfully",
            raw={"message": "Order created successfully", "orderId": order_id, "orderNumber": order_number},
        )

    async def find_orders(self, email: str, phone: str) -> list[dict[str, Any]]:
        await self._simulate_latency()
        if not email or not phone:
            raise OrdersApiError(status_code=400, reason="Email and phone are required", endpoint="/orders/find")
        matches = [
            order
            for order in self._document["orders"]
            if order["customer_email"] == email and order["customer_phone"] == phone
        ]
        matches.sort(key=lambda order: (order["created_at"], order["id"]), reverse=True)
        return copy.deepcopy(matches)

    async def get_order(self, order_number: str) -> dict[str, Any]:
        await self._simulate_latency()
        for order in self._document["orders"]:
            if order["order_number"] == order_number:
                return copy.deepcopy(order)
        raise OrdersApiError(status_code=404, reason="Order not found", endpoint=f"/orders/{order_number}")

    def update_status(self, order_number: str, status: str) -> dict[str, Any]:
        """Administrator-side status change; the wizard never calls this."""
        if status not in ORDER_STATUSES:
            raise ValueError(f"Unsupported order status: {status}")
        orders = copy.deepcopy(self._document["orders"])
        for order in orders:
            if order["order_number"] == order_number:
                order["status"] = status
                order["updated_at"] = self._clock()
                self._commit({"orders": orders, "next_id": self._document["next_id"]})
                return copy.deepcopy(order)
        raise OrdersApiError(
            status_code=404,
            reason="Order not found",
            endpoint=f"/orders/{order_number}/status",
        )

    def order_count(self) -> int:
        return len(self._document["orders"])

    async def aclose(self) -> None:
        return

    def _commit(self, document: dict[str, Any]) -> None:
        if self._store_path is not None:
            write_json(self._store_path, document)
        self._document = document

    def _load_document(self) -> dict[str, Any]:
        empty = {"orders": [], "next_id": 1}
        if self._store_path is None:
            return empty
        data = read_json(self._store_path, default=None)
        if data is None:
            return empty
        if not isinstance(data, dict) or not isinstance(data.get("orders"), list):
            raise ValueError(f"Order store {self._store_path} is malformed.")
        data.setdefault("next_id", max((order["id"] for order in data["orders"]), default=0) + 1)
        return data

    async def _simulate_latency(self) -> None:
        if self._latency_ms > 0:
            await asyncio.sleep(self._latency_ms / 1000.0)

    def _find_system(self, os_id: Any) -> dict[str, Any] | None:
        for system in self._catalog:
            if system["id"] == os_id and system.get("is_active", True):
                return system
        return None

    def _find_version(self, system: dict[str, Any], version_id: Any) -> dict[str, Any] | None:
        for version in system.get("versions") or []:
            if version["id"] == version_id and version.get("is_active", True):
                return version
        return None

    def _selection_row(self, selection: dict[str, Any]) -> dict[str, Any]:
        system = self._find_system(selection["osId"]) or {}
        version = self._find_version(system, selection["versionId"]) or {}
        return {
            "os_id": selection["osId"],
            "os_name": system.get("name"),
            "version_id": selection["versionId"],
            "version_name": version.get("name"),
        }

    def _check_payload(self, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return "Request body must be an object"
        order_number = payload.get("orderNumber")
        if not isinstance(order_number, str) or not ORDER_NUMBER_PATTERN.fullmatch(order_number):
            return "Invalid order number"
        installation_type = payload.get("installationType")
        if installation_type not in INSTALLATION_TYPES:
            return "Installation type must be 'full' or 'dual'"
        for key in CUSTOMER_KEYS:
            value = payload.get(key)
            if not isinstance(value, str) or not value.strip():
                return f"{key} is required"
        if not SERVER_PHONE_PATTERN.fullmatch(payload["customerPhone"]):
            return "Phone number must start with 07 and have 10 digits"

        selections = payload.get("osSelections")
        expected = 1 if installation_type == "full" else 2
        if not isinstance(selections, list) or len(selections) != expected:
            return f"{installation_type} installation requires {expected} OS selection(s)"
        seen_os: set[Any] = set()
        for selection in selections:
            if not isinstance(selection, dict):
                return "OS selection must be an object"
            system = self._find_system(selection.get("osId"))
            if system is None:
                return f"Unknown operating system: {selection.get('osId')}"
            if self._find_version(system, selection.get("versionId")) is None:
                return f"Unknown version {selection.get('versionId')} for {system['name']}"
            if system["id"] in seen_os:
                return "Dual boot requires two different operating systems"
            seen_os.add(system["id"])

        addons = payload.get("addons") or []
        if not isinstance(addons, list):
            return "Add-ons must be a list"
        seen_addons: set[str] = set()
        for addon in addons:
            if not isinstance(addon, dict) or addon.get("type") not in ADD_ON_TYPES:
                return "Unknown add-on"
            if addon["type"] in seen_addons:
                return f"Duplicate add-on: {addon['type']}"
            seen_addons.add(addon["type"])
            price = addon.get("price")
            if isinstance(price, bool) or not isinstance(price, (int, float)) or price < 0:
                return f"Invalid price for {addon['type']}"
        return None
