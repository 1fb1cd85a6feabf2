"""Render helpers for techserve CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Sequence

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from techserve.ui.console import get_console

if TYPE_CHECKING:
    from techserve.catalog import CatalogSnapshot
    from techserve.orders.submission import TrackedOrder


def _panel(body, title: str, *, border_style: str = "border") -> Panel:
    return Panel(
        body,
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style=border_style,
        padding=(0, 2),
        expand=True,
    )


def render_banner(title: str, subtitle: str) -> None:
    console = get_console()
    console.print(_panel(Group(Text(subtitle, style="subtitle")), title))
    console.print()


def render_step_header(
    step_idx: int | None,
    step_total: int | None,
    title: str,
    description: str,
    markers: Sequence[tuple[str, str]] = (),
) -> None:
    console = get_console()
    if step_idx is not None and step_total is not None:
        panel_title = f"Step {step_idx}/{step_total} · {title}"
    else:
        panel_title = title
    content = []
    if markers:
        line = Text()
        for index, (label, marker_state) in enumerate(markers):
            if index:
                line.append("  ›  ", style="dim")
            symbol = {"completed": "✓", "current": "●"}.get(marker_state, "○")
            line.append(f"{symbol} {label}", style=marker_state)
        content.append(line)
    if description:
        content.append(Text(description, style="subtitle"))
    console.print(_panel(Group(*content), panel_title))


def render_info(text: str) -> None:
    console = get_console()
    console.print(text, style="info", markup=False)


def render_warning(text: str) -> None:
    console = get_console()
    console.print(text, style="warning", markup=False)


def render_notice(text: str) -> None:
    console = get_console()
    console.print(
        Panel(
            Text(text, style="warning"),
            box=box.ROUNDED,
            border_style="border",
            padding=(0, 2),
            expand=True,
        )
    )


def render_success(text: str) -> None:
    console = get_console()
    console.print(text, style="success", markup=False)


def render_error(text: str) -> None:
    console = get_console()
    console.print(
        Panel(
            Text(text, style="error"),
            box=box.ROUNDED,
            border_style="error",
            padding=(0, 2),
            expand=True,
        )
    )


def render_summary_table(rows: Mapping[str, str] | Sequence[tuple[str, str]], title: str = "Summary") -> None:
    console = get_console()
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="label", no_wrap=True, justify="right")
    table.add_column(style="value")

    items = rows.items() if hasattr(rows, "items") else rows
    for key, value in items:
        label = Text(str(key), style="label")
        value_text = Text(str(value), style="value")
        if str(key).lower() in {"total", "order number"}:
            value_text.stylize("price" if str(key).lower() == "total" else "accent")
        table.add_row(label, value_text)

    console.print()
    console.print(_panel(table, title))


def render_validation_panel(title: str, issues: Sequence[str], *, style: str) -> None:
    console = get_console()
    lines = [Text(f"- {issue}", style=style) for issue in issues]
    console.print(_panel(Group(*lines), title))


def render_selection_panel(
    *,
    title: str,
    description: str,
    options: Sequence[str],
    selected: Sequence[str],
    instructions: str,
) -> None:
    console = get_console()
    rows = []
    selected_set = set(selected)
    for index, option in enumerate(options, start=1):
        marker = "[x]" if option in selected_set else "[ ]"
        rows.append(Text(f"{index:>2} {marker} {option}", style="value"))
    body = Group(Text(description, style="subtitle"), Text(""), *rows, Text(""), Text(instructions, style="dim"))
    console.print(_panel(body, title))


def render_catalog_table(catalog: "CatalogSnapshot") -> None:
    console = get_console()
    table = Table(show_header=True, box=box.SIMPLE, pad_edge=False)
    table.add_column("ID", style="label", justify="right")
    table.add_column("Operating system", style="value")
    table.add_column("Kind", style="label")
    table.add_column("Versions", style="value")
    for system in catalog.systems:
        versions = system.active_versions()
        version_text = ", ".join(f"{version.name} [{version.id}]" for version in versions)
        if not versions:
            version_text = "No versions available"
        style = "value" if catalog.is_selectable(system.id) else "dim"
        table.add_row(str(system.id), Text(system.name, style=style), system.kind, version_text)
    console.print(_panel(table, "Operating systems"))


def render_orders_table(orders: Sequence["TrackedOrder"]) -> None:
    console = get_console()
    if not orders:
        render_notice("No orders found for this email and phone number.")
        return
    for order in orders:
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column(style="label", no_wrap=True, justify="right")
        table.add_column(style="value")
        table.add_row("Installation", order.installation_label)
        table.add_row("Operating system", order.os_text)
        table.add_row("Status", Text(order.status.replace("_", " ").title(), style=order.status_color))
        table.add_row(
            "Progress",
            Group(ProgressBar(total=100, completed=order.progress, width=30), Text(f"{order.progress}%", style="dim")),
        )
        if order.created_at:
            table.add_row("Placed", order.created_at)
        if order.updated_at and order.updated_at != order.created_at:
            table.add_row("Updated", order.updated_at)
        console.print(_panel(table, order.order_number))
