"""Order submission and status lookup driven by the wizard."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import re
import time
from typing import Any, Awaitable

import httpx

from techserve.config import PriceTable
from techserve.orders.client import OrdersClient, build_request_log_record
from techserve.orders.types import AddonCharge, OrderConfirmation, OrderRequest, OrdersApiError, OsSelection
from techserve.pricing import compute_quote
from techserve.storage import append_jsonl
from techserve.validation import ValidationIssue, normalize_phone, validate_contact
from techserve.wizard.flow import StepNavigator
from techserve.wizard.state import SelectionState, Step

STATUS_PROGRESS = {
    "pending": 25,
    "in_progress": 60,
    "completed": 100,
    "rejected": 100,
    "cancelled": 100,
}
STATUS_COLORS = {
    "pending": "yellow",
    "in_progress": "blue",
    "completed": "green",
    "rejected": "red",
    "cancelled": "grey50",
}
INSTALLATION_SHORT_LABELS = {
    "full": "Full Installation",
    "dual": "Dual Boot",
}
BUSY_REASON = "Submission already in progress"
ORDER_NUMBER_PATTERN = re.compile(r"^TS-[0-9]{10}$")
ORDER_NUMBER_MESSAGE = "Order number looks like TS- followed by 10 digits"


def build_order_request(state: SelectionState, prices: PriceTable) -> OrderRequest:
    """Snapshot the session into a request; add-on prices are taken from ``prices`` now."""
    info = state.customer_info
    selections = tuple(
        OsSelection(os_id=os_id, version_id=version_id)
        for os_id, version_id in zip(state.selected_os_ids, state.selected_version_ids)
        if version_id is not None
    )
    quote = compute_quote(state, prices)
    return OrderRequest(
        order_number=state.order_number,
        installation_type=state.installation_type or "",
        customer_name=info.name.strip(),
        customer_email=info.email.strip(),
        customer_phone=normalize_phone(info.phone),
        customer_address=info.address.strip(),
        os_selections=selections,
        addons=tuple(AddonCharge(type=line.type, price=line.price) for line in quote.add_ons),
    )


def build_order_payload(state: SelectionState, prices: PriceTable) -> dict[str, Any]:
    return build_order_request(state, prices).to_payload()


@dataclass(frozen=True)
class SubmissionOutcome:
    ok: bool
    order_number: str
    reason: str | None = None
    log_warning: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    confirmation: OrderConfirmation | None = None
    payload: dict[str, Any] | None = None
    total: float | None = None


class OrderSubmitter:
    """Sends the wizard's order as a single request.

    While a request is in flight the submitter is ``busy`` and further
    submissions are refused. A failed attempt leaves the session and the
    current step untouched so the customer can retry without retyping.
    """

    def __init__(
        self,
        navigator: StepNavigator,
        client: OrdersClient,
        *,
        call_log_path: Path | None = None,
    ) -> None:
        self.navigator = navigator
        self.client = client
        self.call_log_path = call_log_path
        self.last_confirmation: OrderConfirmation | None = None
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def submit(self) -> SubmissionOutcome:
        machine = self.navigator.machine
        state = machine.state
        if self._busy:
            return SubmissionOutcome(ok=False, order_number=state.order_number, reason=BUSY_REASON)
        if self.navigator.current != Step.CUSTOMER:
            return SubmissionOutcome(
                ok=False,
                order_number=state.order_number,
                reason="Orders can only be submitted from the customer details step",
            )
        validation = machine.validate_customer()
        if not validation.ok:
            return SubmissionOutcome(
                ok=False,
                order_number=state.order_number,
                reason="Please correct the highlighted fields",
                field_errors=validation.by_field(),
            )
        blocker = machine.advance_blocker(Step.VERSION)
        if blocker:
            return SubmissionOutcome(ok=False, order_number=state.order_number, reason=blocker)

        payload = build_order_payload(state, self.navigator.prices)
        total = compute_quote(state, self.navigator.prices).total
        self._busy = True
        start = time.monotonic()
        reason: str | None = None
        status_code: int | None = None
        confirmation: OrderConfirmation | None = None
        try:
            confirmation = await self.client.create_order(payload)
        except OrdersApiError as exc:
            reason = exc.reason
            status_code = exc.status_code
        except httpx.HTTPError as exc:
            reason = f"Network error: {exc}"
        except OSError as exc:
            reason = f"Order could not be saved: {exc}"
        finally:
            self._busy = False
        latency_ms = int((time.monotonic() - start) * 1000)

        if confirmation is not None:
            self.last_confirmation = confirmation
            self.navigator.go_to_summary()
        log_warning = self._log(
            build_request_log_record(
                endpoint="/orders",
                order_number=payload["orderNumber"],
                request=payload,
                ok=confirmation is not None,
                latency_ms=latency_ms,
                reason=reason,
                status_code=status_code,
            )
        )

        if confirmation is None:
            return SubmissionOutcome(
                ok=False,
                order_number=payload["orderNumber"],
                reason=reason or "Order submission failed",
                payload=payload,
                total=total,
                log_warning=log_warning,
            )
        return SubmissionOutcome(
            ok=True,
            order_number=payload["orderNumber"],
            confirmation=confirmation,
            payload=payload,
            total=total,
            log_warning=log_warning,
        )

    def _log(self, record: dict[str, Any]) -> str | None:
        return write_request_log(self.call_log_path, record)


@dataclass(frozen=True)
class TrackedOrder:
    order_number: str
    installation_type: str
    installation_label: str
    os_text: str
    status: str
    progress: int
    status_color: str
    created_at: str | None
    updated_at: str | None
    addons: list[dict[str, Any]]

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "TrackedOrder":
        status = str(record.get("status") or "pending").lower()
        installation_type = str(record.get("installation_type") or "")
        return cls(
            order_number=str(record.get("order_number", "")),
            installation_type=installation_type,
            installation_label=INSTALLATION_SHORT_LABELS.get(installation_type, installation_type or "Unknown"),
            os_text=describe_os_selections(record.get("os_selections") or []),
            status=status,
            progress=STATUS_PROGRESS.get(status, 25),
            status_color=STATUS_COLORS.get(status, "grey50"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
            addons=list(record.get("addons") or []),
        )


def describe_os_selections(selections: list[dict[str, Any]]) -> str:
    if not selections:
        return "Not specified"
    parts = []
    for selection in selections:
        os_name = selection.get("os_name") or f"OS {selection.get('os_id')}"
        version_name = selection.get("version_name")
        parts.append(f"{os_name} ({version_name})" if version_name else os_name)
    return " + ".join(parts)


@dataclass(frozen=True)
class LookupOutcome:
    orders: list[TrackedOrder] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    reason: str | None = None
    log_warning: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.reason is None


async def lookup_orders(
    client: OrdersClient,
    email: str,
    phone: str,
    *,
    call_log_path: Path | None = None,
) -> LookupOutcome:
    """Find a customer's orders; nothing is sent unless both contact values are valid."""
    email = (email or "").strip()
    phone = (phone or "").strip()
    validation = validate_contact(email, phone)
    if not validation.ok:
        return LookupOutcome(errors=validation.errors)

    normalized_phone = normalize_phone(phone)
    request = {"email": email, "phone": normalized_phone}
    return await _lookup(
        client.find_orders(email, normalized_phone),
        endpoint="/orders/find",
        order_number=None,
        request=request,
        call_log_path=call_log_path,
    )


async def lookup_order(
    client: OrdersClient,
    order_number: str,
    *,
    call_log_path: Path | None = None,
) -> LookupOutcome:
    """Status of a single order by its ``TS-`` number."""
    order_number = (order_number or "").strip().upper()
    if not ORDER_NUMBER_PATTERN.fullmatch(order_number):
        return LookupOutcome(errors=[ValidationIssue("order_number", ORDER_NUMBER_MESSAGE)])
    return await _lookup(
        _single(client.get_order(order_number)),
        endpoint=f"/orders/{order_number}",
        order_number=order_number,
        request={},
        call_log_path=call_log_path,
    )


async def _single(pending: Awaitable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [await pending]


async def _lookup(
    pending: Awaitable[list[dict[str, Any]]],
    *,
    endpoint: str,
    order_number: str | None,
    request: dict[str, Any],
    call_log_path: Path | None,
) -> LookupOutcome:
    start = time.monotonic()
    reason: str | None = None
    status_code: int | None = None
    records: list[dict[str, Any]] = []
    try:
        records = await pending
    except OrdersApiError as exc:
        reason = exc.reason
        status_code = exc.status_code
    except httpx.HTTPError as exc:
        reason = f"Network error: {exc}"
    except OSError as exc:
        reason = f"Order store could not be read: {exc}"
    log_warning = write_request_log(
        call_log_path,
        build_request_log_record(
            endpoint=endpoint,
            order_number=order_number,
            request=request,
            ok=reason is None,
            latency_ms=int((time.monotonic() - start) * 1000),
            reason=reason,
            status_code=status_code,
        ),
    )
    if reason is not None:
        return LookupOutcome(reason=reason, log_warning=log_warning)
    return LookupOutcome(orders=[TrackedOrder.from_record(record) for record in records], log_warning=log_warning)


def write_request_log(path: Path | None, record: dict[str, Any]) -> str | None:
    """Append to the request log; a failed write is reported, never raised."""
    if path is None:
        return None
    try:
        append_jsonl(path, record)
    except OSError as exc:
        return f"Request log not written: {exc}"
    return None
