"""CLI entrypoint for techserve."""

from __future__ import annotations

import asyncio

import httpx
import typer

from techserve.catalog import CatalogSnapshot, load_price_table
from techserve.config import Settings, load_settings
from techserve.env import load_dotenv
from techserve.orders.submission import LookupOutcome, lookup_order, lookup_orders
from techserve.orders.types import OrdersApiError
from techserve.pricing import ADD_ON_LABELS, INSTALLATION_LABELS, format_price
from techserve.session import build_client, open_session
from techserve.ui.progress import status_spinner
from techserve.ui.render import (
    render_banner,
    render_catalog_table,
    render_error,
    render_info,
    render_notice,
    render_orders_table,
    render_success,
    render_summary_table,
    render_validation_panel,
)
from techserve.validation import validate_email, validate_phone
from techserve.wizard.steps import run_wizard

app = typer.Typer(add_completion=False, help="TechServe OS installation orders.")
check_app = typer.Typer(add_completion=False, help="Validate contact details.")
app.add_typer(check_app, name="check")


@app.callback(invoke_without_command=True)
def root(ctx: typer.Context) -> None:
    """TechServe order wizard CLI."""
    load_dotenv()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command("order")
def order() -> None:
    """Interactive wizard to place an installation order."""
    settings = _settings_or_exit()
    render_banner("TechServe", "Operating system installation order")
    code = asyncio.run(_run_order(settings))
    if code:
        raise typer.Exit(code=code)


async def _run_order(settings: Settings) -> int:
    client = build_client(settings)
    try:
        try:
            with status_spinner("Loading operating systems"):
                setup = await open_session(client, settings)
        except (OrdersApiError, httpx.HTTPError, ValueError) as exc:
            render_error(f"Could not load the catalog: {exc}")
            return 1
        for warning in setup.warnings:
            render_notice(warning)
        session = await run_wizard(setup.session)
    finally:
        await client.aclose()
    if session.orders_placed:
        render_info(f"Orders placed this session: {', '.join(session.orders_placed)}")
    return 0


@app.command("tui")
def tui() -> None:
    """Full-screen order wizard."""
    settings = _settings_or_exit()
    from techserve.ui.app import run_app

    code = run_app(settings)
    if code:
        raise typer.Exit(code=code)


@app.command("track")
def track(
    email: str = typer.Option(..., "--email", "-e", help="Email used when ordering."),
    phone: str = typer.Option(..., "--phone", "-p", help="Phone number used when ordering."),
) -> None:
    """Look up the status of your orders."""
    settings = _settings_or_exit()
    log_path = settings.call_log_path
    outcome = asyncio.run(_lookup(settings, lambda client: lookup_orders(client, email, phone, call_log_path=log_path)))
    _render_lookup(outcome)


@app.command("status")
def status(order_number: str = typer.Argument(..., help="Order number, e.g. TS-1234567890.")) -> None:
    """Look up a single order by its number."""
    settings = _settings_or_exit()
    log_path = settings.call_log_path
    outcome = asyncio.run(_lookup(settings, lambda client: lookup_order(client, order_number, call_log_path=log_path)))
    _render_lookup(outcome)


async def _lookup(settings: Settings, run) -> LookupOutcome:  # type: ignore[no-untyped-def]
    client = build_client(settings)
    try:
        with status_spinner("Looking up orders"):
            return await run(client)
    finally:
        await client.aclose()


def _render_lookup(outcome: LookupOutcome) -> None:
    if outcome.log_warning:
        render_notice(outcome.log_warning)
    if outcome.errors:
        render_validation_panel("INVALID", [f"{issue.path}: {issue.message}" for issue in outcome.errors], style="error")
        raise typer.Exit(code=1)
    if outcome.reason:
        render_error(f"Order lookup failed: {outcome.reason}")
        raise typer.Exit(code=1)
    render_orders_table(outcome.orders)


@app.command("catalog")
def catalog() -> None:
    """Show available operating systems and prices."""
    settings = _settings_or_exit()
    try:
        records = asyncio.run(_load_catalog(settings))
        snapshot = CatalogSnapshot.from_records(records)
    except (OrdersApiError, httpx.HTTPError, ValueError) as exc:
        render_error(f"Could not load the catalog: {exc}")
        raise typer.Exit(code=1) from exc
    prices, warning = load_price_table()
    if warning:
        render_notice(warning)
    render_catalog_table(snapshot)
    rows = [
        (INSTALLATION_LABELS["full"], format_price(prices.full_installation)),
        (INSTALLATION_LABELS["dual"], format_price(prices.dual_boot_installation)),
    ]
    rows.extend((label, f"+{format_price(prices.add_on_price(add_on))}") for add_on, label in ADD_ON_LABELS.items())
    render_summary_table(rows, title="Prices")


async def _load_catalog(settings: Settings) -> list[dict]:
    client = build_client(settings)
    try:
        return await client.load_catalog()
    finally:
        await client.aclose()


@check_app.command("email")
def check_email(value: str = typer.Argument(..., help="Email address to check.")) -> None:
    """Check an email address the way the order form does."""
    issue = validate_email(value)
    if issue:
        render_validation_panel("INVALID", [issue.message], style="error")
        raise typer.Exit(code=1)
    render_success("Email address is valid.")


@check_app.command("phone")
def check_phone(value: str = typer.Argument(..., help="Phone number to check.")) -> None:
    """Check a phone number the way the order form does."""
    issue = validate_phone(value)
    if issue:
        render_validation_panel("INVALID", [issue.message], style="error")
        raise typer.Exit(code=1)
    render_success("Phone number is valid.")


def _settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ValueError as exc:
        render_error(str(exc))
        raise typer.Exit(code=1) from exc


def main() -> None:
    app()


if __name__ == "__main__":
    main()
