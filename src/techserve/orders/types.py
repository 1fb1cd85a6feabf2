"""Wire types for the order service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OsSelection:
    os_id: int
    version_id: int

    def to_wire(self) -> dict[str, Any]:
        return {"osId": self.os_id, "versionId": self.version_id}


@dataclass(frozen=True)
class AddonCharge:
    type: str
    price: float

    def to_wire(self) -> dict[str, Any]:
        return {"type": self.type, "price": self.price}


@dataclass(frozen=True)
class OrderRequest:
    order_number: str
    installation_type: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    os_selections: tuple[OsSelection, ...]
    addons: tuple[AddonCharge, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "orderNumber": self.order_number,
            "installationType": self.installation_type,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "customerAddress": self.customer_address,
            "osSelections": [selection.to_wire() for selection in self.os_selections],
            "addons": [addon.to_wire() for addon in self.addons],
        }


@dataclass(frozen=True)
class OrderConfirmation:
    order_id: int | str | None
    order_number: str
    message: str = ""
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class OrdersApiError(RuntimeError):
    status_code: int
    reason: str
    endpoint: str
    response_text: str = ""

    def __str__(self) -> str:
        return f"OrdersApiError(status={self.status_code}, endpoint={self.endpoint}): {self.reason}"
