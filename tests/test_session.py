from __future__ import annotations

from pathlib import Path

import pytest
from textual.widgets import Button

from techserve.config import load_settings
from techserve.orders.local import LocalOrdersClient
from techserve.session import build_client, open_session
from techserve.ui.app import TechServeApp
from techserve.ui.screens import CustomerScreen, OsScreen, TypeScreen
from techserve.wizard.state import Step


def _settings(tmp_path: Path):  # type: ignore[no-untyped-def]
    return load_settings({"TECHSERVE_STORE_PATH": str(tmp_path / "orders.json"), "TECHSERVE_UNDO_WINDOW_S": "5"})


@pytest.mark.asyncio
async def test_open_session_wires_components(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    client = build_client(settings)
    assert isinstance(client, LocalOrdersClient)
    setup = await open_session(client, settings)
    session = setup.session
    assert setup.warnings == []
    assert session.navigator.current == Step.TYPE
    assert session.submitter.navigator is session.navigator
    assert session.navigator.catalog.is_selectable(3)
    assert session.navigator.prices.full_installation == 100
    await client.aclose()


@pytest.mark.asyncio
async def test_open_session_warns_when_nothing_is_selectable(tmp_path: Path) -> None:
    records = [{"id": 1, "name": "Debian", "type": "linux", "is_active": True, "versions": []}]
    client = LocalOrdersClient(catalog_records=records)
    setup = await open_session(client, _settings(tmp_path))
    assert setup.warnings == ["No operating systems are currently available."]


@pytest.mark.asyncio
async def test_tui_starts_on_type_step_and_advances(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    app = TechServeApp(settings, LocalOrdersClient(store_path=settings.store_path))
    async with app.run_test() as pilot:
        await pilot.pause()
        assert isinstance(app.screen, TypeScreen)
        app.session.navigator.machine.set_installation_type("dual")
        app.advance()
        await pilot.pause()
        assert isinstance(app.screen, OsScreen)
        assert app.session.navigator.current == Step.OS


@pytest.mark.asyncio
async def test_tui_submit_failure_re_enables_the_button(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    client = LocalOrdersClient(store_path=tmp_path / "store" / "orders.json")
    app = TechServeApp(settings, client)
    async with app.run_test() as pilot:
        await pilot.pause()
        navigator = app.session.navigator
        machine = navigator.machine
        machine.set_installation_type("full")
        machine.select_single_os(3)
        machine.select_version(0, 7)
        machine.set_customer_info(name="Amina Njeri", email="amina@example.com", phone="0712345678", address="Nairobi")
        for _ in range(3):
            assert navigator.forward().applied
        app.show_step()
        await pilot.pause()
        screen = app.screen
        assert isinstance(screen, CustomerScreen)

        (tmp_path / "store").write_text("not a directory", encoding="utf-8")
        button = screen.query_one("#customer-submit", Button)
        button.press()
        await pilot.pause()
        await screen.submit_task
        await pilot.pause()

        assert not button.disabled
        assert not app.session.submitter.busy
        assert navigator.current == Step.CUSTOMER
        assert client.order_count() == 0
