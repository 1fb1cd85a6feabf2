from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from techserve.orders.local import LocalOrdersClient
from techserve.orders.submission import BUSY_REASON, OrderSubmitter, build_order_payload, lookup_orders
from techserve.orders.types import OrderConfirmation, OrdersApiError
from techserve.storage import read_jsonl
from techserve.wizard.state import Step


class RecordingClient:
    """Stands in for the order service and records what it was sent."""

    def __init__(self, *, error: Exception | None = None, gate: asyncio.Event | None = None) -> None:
        self.error = error
        self.gate = gate
        self.payloads: list[dict] = []

    async def load_catalog(self) -> list[dict]:
        return []

    async def create_order(self, payload: dict) -> OrderConfirmation:
        self.payloads.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return OrderConfirmation(order_id=1, order_number=payload["orderNumber"], message="Order created successfully")

    async def find_orders(self, email: str, phone: str) -> list[dict]:
        return []

    async def get_order(self, order_number: str) -> dict:
        raise OrdersApiError(status_code=404, reason="Order not found", endpoint=f"/orders/{order_number}")

    async def aclose(self) -> None:
        return None


def test_payload_for_full_ubuntu_with_drivers(at_customer) -> None:
    machine = at_customer.machine
    machine.set_add_on("additional_drivers", True)
    payload = build_order_payload(machine.state, at_customer.prices)
    assert payload["orderNumber"] == machine.state.order_number
    assert payload["installationType"] == "full"
    assert payload["osSelections"] == [{"osId": 3, "versionId": 7}]
    assert payload["addons"] == [{"type": "additional_drivers", "price": 30}]
    assert payload["customerPhone"] == "0712345678"
    assert payload["customerName"] == "Amina Njeri"


def test_payload_keeps_dual_slot_order(navigator) -> None:
    machine = navigator.machine
    machine.set_installation_type("dual")
    machine.select_dual_os(3, 1)
    machine.select_version(0, 6)
    machine.select_version(1, 2)
    payload = build_order_payload(machine.state, navigator.prices)
    assert payload["osSelections"] == [{"osId": 3, "versionId": 6}, {"osId": 1, "versionId": 2}]
    assert payload["addons"] == []


@pytest.mark.asyncio
async def test_successful_submission_moves_to_summary(at_customer, submitter, local_client, tmp_path: Path) -> None:
    order_number = at_customer.machine.state.order_number
    outcome = await submitter.submit()
    assert outcome.ok
    assert outcome.order_number == order_number
    assert outcome.total == 100
    assert at_customer.current == Step.SUMMARY
    assert at_customer.summary.order_number == order_number
    assert local_client.order_count() == 1

    stored = await local_client.get_order(order_number)
    assert stored["customer_phone"] == "0712345678"
    assert stored["os_selections"] == [
        {"os_id": 3, "os_name": "Ubuntu", "version_id": 7, "version_name": "22.04 LTS"}
    ]

    log = read_jsonl(tmp_path / "calls.jsonl")
    assert [record["ok"] for record in log] == [True]
    assert log[0]["endpoint"] == "/orders"
    assert log[0]["order_number"] == order_number


@pytest.mark.asyncio
async def test_resubmission_from_summary_is_rejected(at_customer, submitter, local_client) -> None:
    assert (await submitter.submit()).ok
    again = await submitter.submit()
    assert not again.ok
    assert local_client.order_count() == 1


@pytest.mark.asyncio
async def test_invalid_customer_blocks_submission(at_customer, local_client) -> None:
    navigator = at_customer
    navigator.machine.set_customer_field("phone", "0812345678")
    submitter = OrderSubmitter(navigator, local_client)
    outcome = await submitter.submit()
    assert not outcome.ok
    assert outcome.field_errors == {"phone": "Phone number must start with 07 and have 10 digits"}
    assert outcome.payload is None
    assert navigator.current == Step.CUSTOMER
    assert local_client.order_count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        OrdersApiError(status_code=500, reason="Failed to create order", endpoint="/orders"),
        httpx.ConnectError("connection refused"),
    ],
)
async def test_failed_submission_keeps_state(at_customer, error: Exception) -> None:
    state = at_customer.machine.state
    before = (state.order_number, list(state.selected_os_ids), list(state.selected_version_ids), state.customer_info.to_dict())
    client = RecordingClient(error=error)
    submitter = OrderSubmitter(at_customer, client)

    outcome = await submitter.submit()
    assert not outcome.ok
    assert outcome.reason
    assert at_customer.current == Step.CUSTOMER
    after = (state.order_number, list(state.selected_os_ids), list(state.selected_version_ids), state.customer_info.to_dict())
    assert after == before
    assert not submitter.busy

    client.error = None
    retry = await submitter.submit()
    assert retry.ok
    assert [payload["orderNumber"] for payload in client.payloads] == [before[0], before[0]]


@pytest.mark.asyncio
async def test_duplicate_submission_while_in_flight(at_customer) -> None:
    gate = asyncio.Event()
    client = RecordingClient(gate=gate)
    submitter = OrderSubmitter(at_customer, client)

    first = asyncio.create_task(submitter.submit())
    await asyncio.sleep(0)
    assert submitter.busy
    second = await submitter.submit()
    assert not second.ok
    assert second.reason == BUSY_REASON

    gate.set()
    assert (await first).ok
    assert len(client.payloads) == 1
    assert not submitter.busy


@pytest.mark.asyncio
async def test_payload_is_captured_before_the_wait(at_customer) -> None:
    gate = asyncio.Event()
    client = RecordingClient(gate=gate)
    submitter = OrderSubmitter(at_customer, client)

    task = asyncio.create_task(submitter.submit())
    await asyncio.sleep(0)
    at_customer.machine.set_customer_field("name", "Someone Else")
    gate.set()
    outcome = await task
    assert outcome.payload["customerName"] == "Amina Njeri"


@pytest.mark.asyncio
async def test_reset_after_submission_issues_new_order_number(at_customer, submitter) -> None:
    outcome = await submitter.submit()
    at_customer.reset()
    assert at_customer.current == Step.TYPE
    assert at_customer.machine.state.order_number != outcome.order_number


@pytest.mark.asyncio
async def test_store_write_failure_is_a_failed_outcome(at_customer, catalog_records, tmp_path: Path) -> None:
    client = LocalOrdersClient(catalog_records=catalog_records, store_path=tmp_path / "store" / "orders.json")
    (tmp_path / "store").write_text("not a directory", encoding="utf-8")
    submitter = OrderSubmitter(at_customer, client)

    outcome = await submitter.submit()
    assert not outcome.ok
    assert outcome.reason.startswith("Order could not be saved")
    assert at_customer.current == Step.CUSTOMER
    assert client.order_count() == 0
    assert not submitter.busy


@pytest.mark.asyncio
async def test_request_log_failure_does_not_undo_a_placed_order(at_customer, local_client, tmp_path: Path) -> None:
    (tmp_path / "logs").write_text("not a directory", encoding="utf-8")
    submitter = OrderSubmitter(at_customer, local_client, call_log_path=tmp_path / "logs" / "calls.jsonl")

    outcome = await submitter.submit()
    assert outcome.ok
    assert outcome.log_warning.startswith("Request log not written")
    assert at_customer.current == Step.SUMMARY
    assert submitter.last_confirmation.order_number == outcome.order_number
    assert local_client.order_count() == 1


@pytest.mark.asyncio
async def test_lookup_survives_request_log_failure(local_client, tmp_path: Path) -> None:
    (tmp_path / "logs").write_text("not a directory", encoding="utf-8")
    outcome = await lookup_orders(
        local_client,
        "amina@example.com",
        "0712345678",
        call_log_path=tmp_path / "logs" / "calls.jsonl",
    )
    assert outcome.ok
    assert outcome.orders == []
    assert outcome.log_warning.startswith("Request log not written")
