from __future__ import annotations

from itertools import count
from pathlib import Path

import pytest
import pytest_asyncio

from techserve.catalog import CatalogSnapshot, load_catalog_records, load_price_table
from techserve.orders.local import LocalOrdersClient
from techserve.orders.submission import OrderSubmitter
from techserve.wizard.flow import StepNavigator
from techserve.wizard.selection import SelectionMachine
from techserve.wizard.state import Step

UBUNTU = 3
UBUNTU_2204 = 7

CUSTOMER = {
    "name": "Amina Njeri",
    "email": "amina@example.com",
    "phone": "0712 345-678",
    "address": "12 Moi Avenue, Nairobi",
}


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog_records() -> list[dict]:
    records, warning = load_catalog_records()
    assert warning is None
    return records


@pytest.fixture
def catalog(catalog_records) -> CatalogSnapshot:
    return CatalogSnapshot.from_records(catalog_records)


@pytest.fixture
def prices():
    table, warning = load_price_table()
    assert warning is None
    return table


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def machine(catalog, clock) -> SelectionMachine:
    numbers = count(1)
    return SelectionMachine(
        catalog,
        undo_window_s=10.0,
        clock=clock,
        order_number_factory=lambda: f"TS-{next(numbers):010d}",
    )


@pytest.fixture
def navigator(machine, prices) -> StepNavigator:
    return StepNavigator(machine, prices)


@pytest.fixture
def local_client(tmp_path: Path, catalog_records) -> LocalOrdersClient:
    return LocalOrdersClient(catalog_records=catalog_records, store_path=tmp_path / "orders.json")


@pytest_asyncio.fixture
async def submitter(navigator, local_client, tmp_path: Path):
    submitter = OrderSubmitter(navigator, local_client, call_log_path=tmp_path / "calls.jsonl")
    yield submitter
    await local_client.aclose()


def _drive_to_customer(navigator: StepNavigator, *, customer: dict | None = None) -> StepNavigator:
    """Full installation of Ubuntu 22.04 LTS with the customer step filled in."""
    machine = navigator.machine
    assert machine.set_installation_type("full").applied
    assert navigator.forward().applied
    assert machine.select_single_os(UBUNTU).applied
    assert navigator.forward().applied
    assert machine.select_version(0, UBUNTU_2204).complete
    assert navigator.forward().applied
    machine.set_customer_info(**(CUSTOMER if customer is None else customer))
    assert navigator.current == Step.CUSTOMER
    return navigator


@pytest.fixture
def at_customer(navigator) -> StepNavigator:
    return _drive_to_customer(navigator)
