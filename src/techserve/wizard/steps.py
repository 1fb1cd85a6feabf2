"""Prompt-driven wizard steps and registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable

import typer

from techserve.orders.submission import OrderSubmitter
from techserve.pricing import ADD_ON_LABELS, INSTALLATION_LABELS, compute_quote, format_price
from techserve.ui.progress import status_spinner
from techserve.ui.render import (
    render_error,
    render_info,
    render_notice,
    render_step_header,
    render_success,
    render_summary_table,
    render_validation_panel,
    render_warning,
)
from techserve.validation import CUSTOMER_FIELDS
from techserve.wizard.flow import StepNavigator
from techserve.wizard.state import Step

BACK = "back"
FORWARD = "forward"
STAY = "stay"

FIELD_PROMPTS = {
    "name": "Full name",
    "email": "Email address",
    "phone": "Phone number (07XXXXXXXX)",
    "address": "Installation address",
}


@dataclass
class WizardSession:
    navigator: StepNavigator
    submitter: OrderSubmitter
    finished: bool = False
    orders_placed: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WizardStep:
    step: Step
    description: str
    handler: Callable[[WizardSession], Awaitable[str]]


_REGISTRY: dict[Step, WizardStep] = {}


def register_step(step: WizardStep) -> None:
    _REGISTRY[step.step] = step


def get_step(step: Step) -> WizardStep:
    return _REGISTRY[step]


async def run_step(session: WizardSession) -> str:
    navigator = session.navigator
    wizard_step = get_step(navigator.current)
    markers = [(step.title, marker) for step, marker in navigator.progress_markers()]
    render_step_header(int(wizard_step.step), len(Step), wizard_step.step.title, wizard_step.description, markers)
    return await wizard_step.handler(session)


async def run_wizard(session: WizardSession) -> WizardSession:
    navigator = session.navigator
    while not session.finished:
        intent = await run_step(session)
        if intent == BACK:
            result = navigator.backward()
        elif intent == FORWARD:
            result = navigator.forward()
        else:
            continue
        if not result.applied and result.reason:
            render_warning(result.reason)
    return session


def _prompt_choice(prompt: str, choices: list[str], default: str | None = None) -> str:
    normalized_choices = {choice.lower(): choice for choice in choices}
    while True:
        response = typer.prompt(f"{prompt} ({'/'.join(choices)})", default=default)
        normalized = response.strip().lower()
        if normalized in normalized_choices:
            return normalized_choices[normalized]
        render_warning(f"Invalid choice: {response}. Choose from {', '.join(choices)}.")


def _prompt_yes_no(prompt: str, default: bool = False) -> bool:
    default_value = "y" if default else "n"
    while True:
        response = typer.prompt(f"{prompt} (y/n)", default=default_value)
        normalized = response.strip().lower()
        if normalized in {"y", "yes"}:
            return True
        if normalized in {"n", "no"}:
            return False
        render_warning("Please enter y or n.")


def _prompt_numbered(prompt: str, options: list[tuple[int, str]], default: int | None, *, allow_back: bool = True) -> int | str | None:
    """Pick an option by its list number; blank keeps ``default``."""
    for index, (_value, label) in enumerate(options, start=1):
        render_info(f"{index:>2}. {label}")
    default_text = ""
    for index, (value, _label) in enumerate(options, start=1):
        if value == default:
            default_text = str(index)
    hint = " or 'back'" if allow_back else ""
    while True:
        response = typer.prompt(f"{prompt} [1-{len(options)}{hint}]", default=default_text, show_default=bool(default_text))
        normalized = response.strip().lower()
        if allow_back and normalized == BACK:
            return BACK
        if not normalized:
            return None
        if normalized.isdigit() and 1 <= int(normalized) <= len(options):
            return options[int(normalized) - 1][0]
        render_warning(f"Enter a number between 1 and {len(options)}.")


async def step_type(session: WizardSession) -> str:
    machine = session.navigator.machine
    render_info(session.navigator.preview())
    current = machine.state.installation_type
    choice = _prompt_choice(
        "Installation type",
        ["full", "dual"],
        current or "full",
    )
    result = machine.set_installation_type(choice, confirm=lambda message: _prompt_yes_no(message, default=False))
    if not result.applied:
        render_warning(result.reason or "Installation type unchanged.")
        return STAY
    render_info(f"Selected: {INSTALLATION_LABELS[choice]}")
    if machine.undo_available():
        remaining = int(machine.undo_remaining_s())
        if _prompt_yes_no(f"Undo the installation type change? ({remaining}s left)", default=False):
            undone = machine.undo()
            if undone.applied:
                render_success("Previous selection restored.")
            else:
                render_warning(undone.reason or "Undo failed.")
            return STAY
    return FORWARD


async def step_os(session: WizardSession) -> str:
    machine = session.navigator.machine
    catalog = session.navigator.catalog
    state = machine.state
    options = [(system.id, f"{system.name} ({system.kind})") for system in catalog.selectable_systems()]
    if not options:
        render_error("No operating systems are available right now.")
        return BACK

    if state.installation_type == "full":
        current = state.selected_os_ids[0] if state.selected_os_ids else None
        picked = _prompt_numbered("Operating system", options, current)
        if picked == BACK:
            return BACK
        if picked is None:
            return FORWARD
        result = machine.select_single_os(int(picked))
    else:
        first_default = state.selected_os_ids[0] if len(state.selected_os_ids) > 0 else None
        second_default = state.selected_os_ids[1] if len(state.selected_os_ids) > 1 else None
        first = _prompt_numbered("First operating system", options, first_default)
        if first == BACK:
            return BACK
        second = _prompt_numbered("Second operating system", options, second_default)
        if second == BACK:
            return BACK
        if first is None and second is None and len(state.selected_os_ids) == 2:
            return FORWARD
        first_id = int(first) if first is not None else first_default
        second_id = int(second) if second is not None else second_default
        result = machine.select_dual_os(first_id, second_id)

    if not result.applied:
        render_warning(result.reason or "Selection rejected.")
        return STAY
    render_info(session.navigator.preview())
    return FORWARD


async def step_version(session: WizardSession) -> str:
    navigator = session.navigator
    machine = navigator.machine
    for surface in navigator.refresh_version_surfaces():
        options = [(version.id, version.name) for version in surface.versions]
        if not options:
            render_warning(f"No versions are available for {surface.system.name}.")
            return BACK
        picked = _prompt_numbered(f"{surface.system.name} version", options, surface.selected_version_id)
        if picked == BACK:
            return BACK
        if picked is None:
            continue
        result = machine.select_version(surface.slot, int(picked))
        if not result.applied:
            render_warning(result.reason or "Version rejected.")
            return STAY
    render_info(navigator.preview())
    return FORWARD


async def step_customer(session: WizardSession) -> str:
    navigator = session.navigator
    machine = navigator.machine
    info = machine.state.customer_info
    for field_name in CUSTOMER_FIELDS:
        while True:
            current = getattr(info, field_name)
            value = typer.prompt(FIELD_PROMPTS[field_name], default=current, show_default=bool(current))
            machine.set_customer_field(field_name, value)
            issue = machine.check_field(field_name)
            if issue is None:
                break
            render_warning(f"{FIELD_PROMPTS[field_name]}: {issue.message}")

    prices = navigator.prices
    for add_on, label in ADD_ON_LABELS.items():
        enabled = getattr(machine.state.add_ons, add_on)
        price = format_price(prices.add_on_price(add_on))
        machine.set_add_on(add_on, _prompt_yes_no(f"Add {label} (+{price})?", default=enabled))

    quote = compute_quote(machine.state, prices)
    render_info(f"{navigator.preview()} · Total {format_price(quote.total)}")
    action = _prompt_choice("Submit order", ["submit", "edit", BACK], "submit")
    if action == BACK:
        return BACK
    if action == "edit":
        return STAY

    with status_spinner("Submitting order..."):
        outcome = await session.submitter.submit()
    if outcome.log_warning:
        render_notice(outcome.log_warning)
    if outcome.ok:
        session.orders_placed.append(outcome.order_number)
        render_success(f"Order {outcome.order_number} placed successfully.")
        return STAY
    if outcome.field_errors:
        render_validation_panel(
            "Customer details",
            [f"{FIELD_PROMPTS[name]}: {message}" for name, message in outcome.field_errors.items()],
            style="warning",
        )
    render_error(outcome.reason or "Order submission failed.")
    return STAY


async def step_summary(session: WizardSession) -> str:
    navigator = session.navigator
    summary = navigator.summary or navigator.refresh_summary()
    render_summary_table(summary.to_rows(), title="Order summary")
    confirmation = session.submitter.last_confirmation
    if confirmation is None or confirmation.order_number != summary.order_number:
        render_info("This order has not been submitted yet.")
        if _prompt_yes_no("Go back to submit it?", default=True):
            return BACK
        session.finished = True
        return STAY

    render_success(f"Keep your order number {confirmation.order_number} to track the installation.")
    if _prompt_yes_no("Start a new order?", default=False):
        navigator.reset()
        session.submitter.last_confirmation = None
        render_info(f"New order number: {navigator.machine.state.order_number}")
        return STAY
    session.finished = True
    return STAY


register_step(WizardStep(Step.TYPE, "Choose a full installation or a dual boot setup.", step_type))
register_step(WizardStep(Step.OS, "Pick the operating system(s) to install.", step_os))
register_step(WizardStep(Step.VERSION, "Pick a version for each operating system.", step_version))
register_step(WizardStep(Step.CUSTOMER, "Contact details, add-ons, and submission.", step_customer))
register_step(WizardStep(Step.SUMMARY, "Review your order.", step_summary))
