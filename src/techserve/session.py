"""Session bootstrap shared by the prompt wizard and the TUI."""

from __future__ import annotations

from dataclasses import dataclass

from techserve.catalog import CatalogSnapshot, load_price_table
from techserve.config import Settings
from techserve.orders.client import OrdersClient, create_client
from techserve.orders.submission import OrderSubmitter
from techserve.wizard.flow import StepNavigator
from techserve.wizard.selection import SelectionMachine
from techserve.wizard.steps import WizardSession


@dataclass(frozen=True)
class SessionSetup:
    session: WizardSession
    warnings: list[str]


def build_client(settings: Settings) -> OrdersClient:
    if settings.backend == "remote":
        return create_client("remote", base_url=settings.api_url, timeout_s=settings.timeout_s)
    return create_client("local", store_path=settings.store_path)


async def open_session(client: OrdersClient, settings: Settings) -> SessionSetup:
    """Load the catalog once and wire the machine, navigator and submitter.

    Raises whatever the client raises when the catalog cannot be loaded;
    malformed catalog data raises ``ValueError``.
    """
    records = await client.load_catalog()
    catalog = CatalogSnapshot.from_records(records)
    prices, warning = load_price_table()
    machine = SelectionMachine(catalog, undo_window_s=settings.undo_window_s)
    navigator = StepNavigator(machine, prices)
    submitter = OrderSubmitter(navigator, client, call_log_path=settings.call_log_path)
    warnings = [warning] if warning else []
    if not catalog.selectable_systems():
        warnings.append("No operating systems are currently available.")
    return SessionSetup(session=WizardSession(navigator=navigator, submitter=submitter), warnings=warnings)
