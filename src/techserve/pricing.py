"""Price and summary computation for the order wizard."""

from __future__ import annotations

from dataclasses import dataclass

from techserve.catalog import CatalogSnapshot
from techserve.config import CURRENCY, PriceTable
from techserve.wizard.state import SelectionState

INSTALLATION_LABELS = {
    "full": "Full Installation",
    "dual": "Dual Boot Installation",
}
ADD_ON_LABELS = {
    "additional_drivers": "Additional Drivers",
    "office_suite": "Office Suite",
}
SLOT_PLACEHOLDERS = {
    "full": ("Not selected",),
    "dual": ("First OS not selected", "Second OS not selected"),
}
NO_SELECTION = "No selections made"


@dataclass(frozen=True)
class AddOnLine:
    type: str
    label: str
    price: float


@dataclass(frozen=True)
class Quote:
    base: float
    add_ons: list[AddOnLine]
    total: float


@dataclass(frozen=True)
class OrderSummary:
    order_number: str
    installation_label: str
    os_lines: list[str]
    quote: Quote
    customer: dict[str, str]

    @property
    def os_text(self) -> str:
        return " + ".join(self.os_lines)

    def to_rows(self) -> list[tuple[str, str]]:
        rows = [
            ("Order number", self.order_number),
            ("Installation", self.installation_label),
            ("Operating system", self.os_text),
            ("Base price", format_price(self.quote.base)),
        ]
        for line in self.quote.add_ons:
            rows.append((line.label, f"+{format_price(line.price)}"))
        rows.append(("Total", format_price(self.quote.total)))
        for key in ("name", "email", "phone", "address"):
            value = self.customer.get(key, "")
            if value:
                rows.append((key.capitalize(), value))
        return rows


def format_price(value: float) -> str:
    if float(value).is_integer():
        return f"{CURRENCY} {int(value)}"
    return f"{CURRENCY} {value:.2f}"


def compute_quote(state: SelectionState, prices: PriceTable) -> Quote:
    base = prices.base_price(state.installation_type)
    lines = [
        AddOnLine(type=add_on, label=ADD_ON_LABELS[add_on], price=prices.add_on_price(add_on))
        for add_on in state.add_ons.selected()
    ]
    total = base + sum(line.price for line in lines)
    return Quote(base=base, add_ons=lines, total=total)


def describe_slot(
    catalog: CatalogSnapshot,
    os_id: int | None,
    version_id: int | None,
    placeholder: str,
) -> str:
    system = catalog.get_system(os_id)
    if system is None:
        return placeholder
    version = catalog.get_version(os_id, version_id)
    if version is None:
        return f"{system.name} (Version not selected)"
    return f"{system.name} ({version.name})"


def describe_slots(state: SelectionState, catalog: CatalogSnapshot) -> list[str]:
    placeholders = SLOT_PLACEHOLDERS.get(state.installation_type or "full", SLOT_PLACEHOLDERS["full"])
    lines = []
    for slot, placeholder in enumerate(placeholders):
        os_id = state.selected_os_ids[slot] if slot < len(state.selected_os_ids) else None
        lines.append(describe_slot(catalog, os_id, state.version_for_slot(slot), placeholder))
    return lines


def build_summary(state: SelectionState, catalog: CatalogSnapshot, prices: PriceTable) -> OrderSummary:
    return OrderSummary(
        order_number=state.order_number,
        installation_label=INSTALLATION_LABELS.get(state.installation_type or "", "Not selected"),
        os_lines=describe_slots(state, catalog),
        quote=compute_quote(state, prices),
        customer=state.customer_info.to_dict(),
    )


def live_preview(state: SelectionState, catalog: CatalogSnapshot) -> str:
    """One-line preview shown while the customer is still choosing."""
    if state.installation_type is None:
        return NO_SELECTION
    label = INSTALLATION_LABELS[state.installation_type]
    return f"{label} - {' + '.join(describe_slots(state, catalog))}"
