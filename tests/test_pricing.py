from __future__ import annotations

import pytest

from techserve.config import PriceTable
from techserve.pricing import build_summary, compute_quote, describe_slot, format_price, live_preview

UBUNTU = 3
UBUNTU_2204 = 7
WINDOWS_11 = 1
WINDOWS_11_PRO = 2


def test_summary_renders_os_and_version(machine, catalog, prices) -> None:
    machine.set_installation_type("full")
    machine.select_single_os(UBUNTU)
    machine.select_version(0, UBUNTU_2204)
    machine.set_add_on("additional_drivers", True)

    summary = build_summary(machine.state, catalog, prices)
    assert summary.os_text == "Ubuntu (22.04 LTS)"
    assert summary.installation_label == "Full Installation"
    assert summary.quote.base == 100
    assert [line.type for line in summary.quote.add_ons] == ["additional_drivers"]
    assert summary.quote.total == 130
    rows = dict(summary.to_rows())
    assert rows["Total"] == "KSh 130"
    assert rows["Additional Drivers"] == "+KSh 30"


def test_every_catalog_pair_renders_exactly(catalog, machine, prices) -> None:
    machine.set_installation_type("full")
    for system in catalog.selectable_systems():
        for version in system.active_versions():
            machine.select_single_os(system.id)
            machine.select_version(0, version.id)
            summary = build_summary(machine.state, catalog, prices)
            assert summary.os_text == f"{system.name} ({version.name})"


def test_dual_quote_with_both_add_ons(machine, prices) -> None:
    machine.set_installation_type("dual")
    machine.set_add_on("additional_drivers", True)
    machine.set_add_on("office_suite", True)
    quote = compute_quote(machine.state, prices)
    assert quote.base == 150
    assert quote.total == 230


def test_slot_descriptions(catalog) -> None:
    assert describe_slot(catalog, UBUNTU, UBUNTU_2204, "Not selected") == "Ubuntu (22.04 LTS)"
    assert describe_slot(catalog, UBUNTU, None, "Not selected") == "Ubuntu (Version not selected)"
    assert describe_slot(catalog, None, None, "First OS not selected") == "First OS not selected"


def test_live_preview_in_progress(machine, catalog) -> None:
    assert live_preview(machine.state, catalog) == "No selections made"
    machine.set_installation_type("dual")
    assert live_preview(machine.state, catalog) == (
        "Dual Boot Installation - First OS not selected + Second OS not selected"
    )
    machine.select_dual_os(WINDOWS_11, UBUNTU)
    machine.select_version(0, WINDOWS_11_PRO)
    assert live_preview(machine.state, catalog) == (
        "Dual Boot Installation - Windows 11 (Pro) + Ubuntu (Version not selected)"
    )


def test_format_price() -> None:
    assert format_price(100) == "KSh 100"
    assert format_price(99.5) == "KSh 99.50"


def test_price_table_accepts_rows_and_mappings() -> None:
    rows = [
        {"service_type": "full_installation", "price": "120"},
        {"service_type": "dual_boot_installation", "price": 180},
        {"service_type": "additional_drivers", "price": 35},
        {"service_type": "office_suite", "price": 55},
    ]
    table = PriceTable.from_records(rows)
    assert table.full_installation == 120.0
    assert PriceTable.from_records(table.to_dict()) == table


def test_price_table_rejects_bad_values() -> None:
    with pytest.raises(ValueError, match="office_suite"):
        PriceTable.from_records({"full_installation": 1, "dual_boot_installation": 2, "additional_drivers": 3})
    with pytest.raises(ValueError, match="must be >= 0"):
        PriceTable.from_records(
            {"full_installation": -1, "dual_boot_installation": 2, "additional_drivers": 3, "office_suite": 4}
        )
