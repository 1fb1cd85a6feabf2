"""Textual screens for the TechServe order wizard."""

from __future__ import annotations

import asyncio

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, Checkbox, Input, Label, OptionList, Static

from techserve.config import INSTALLATION_TYPES
from techserve.pricing import ADD_ON_LABELS, INSTALLATION_LABELS, compute_quote, format_price
from techserve.ui.widgets import PickList, SelectOption
from techserve.validation import CUSTOMER_FIELDS
from techserve.wizard.selection import SWITCH_CONFIRM_MESSAGE
from techserve.wizard.state import Step
from techserve.wizard.steps import FIELD_PROMPTS, WizardSession


class BaseScreen(Screen):
    """Base screen with a surface container."""

    BINDINGS = [("escape", "back", "Back")]

    def __init__(self, session: WizardSession) -> None:
        super().__init__()
        self.session = session

    @property
    def navigator(self):  # type: ignore[no-untyped-def]
        return self.session.navigator

    @property
    def machine(self):  # type: ignore[no-untyped-def]
        return self.session.navigator.machine

    def action_back(self) -> None:
        self.app.retreat()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "nav-back":
            self.app.retreat()
        elif event.button.id == "nav-continue":
            self.app.advance()


def _footer_hint() -> Static:
    return Static("↑↓ navigate · space pick · enter confirm · esc back · q quit", id="key-hint")


def _progress_line(navigator) -> str:  # type: ignore[no-untyped-def]
    symbols = {"completed": "✓", "current": "●", "upcoming": "○"}
    parts = [f"{symbols[marker]} {step.title}" for step, marker in navigator.progress_markers()]
    return "  ›  ".join(parts)


def _nav_buttons(*, back: bool = True, forward: bool = True) -> Horizontal:
    buttons = []
    if back:
        buttons.append(Button("Back", id="nav-back"))
    if forward:
        buttons.append(Button("Continue", id="nav-continue", variant="primary"))
    return Horizontal(*buttons, classes="nav-row")


class ConfirmScreen(ModalScreen[bool]):
    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        surface = Container(id="confirm-surface", classes="surface")
        surface.border_title = "Confirm"
        with surface:
            yield Static(self.message, id="confirm-message")
            yield Horizontal(
                Button("Yes", id="confirm-yes", variant="warning"),
                Button("No", id="confirm-no"),
                classes="nav-row",
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes")


class TypeScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        surface = Container(id="type-surface", classes="surface")
        surface.border_title = f"Step 1/5 · {Step.TYPE.title}"
        with surface:
            yield Static(_progress_line(self.navigator), classes="progress-line")
            self.preview = Static("", id="type-preview")
            yield self.preview
            self.list = OptionList(*(INSTALLATION_LABELS[kind] for kind in INSTALLATION_TYPES), id="type-list")
            yield self.list
            self.message = Static("", id="type-message", classes="message")
            yield self.message
            self.undo_button = Button("Undo", id="type-undo")
            yield self.undo_button
            yield _nav_buttons(back=False)
        yield _footer_hint()

    def on_mount(self) -> None:
        current = self.machine.state.installation_type
        if current in INSTALLATION_TYPES:
            self.list.highlighted = INSTALLATION_TYPES.index(current)
        self._refresh()
        self.set_interval(0.5, self._refresh_undo)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        choice = INSTALLATION_TYPES[event.option_index]
        state = self.machine.state
        if state.installation_type not in (None, choice) and state.selected_os_ids:
            self.app.push_screen(ConfirmScreen(SWITCH_CONFIRM_MESSAGE), lambda confirmed: self._apply(choice, bool(confirmed)))
            return
        self._apply(choice, True)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "type-undo":
            result = self.machine.undo()
            self.message.update("Previous selection restored." if result.applied else result.reason or "")
            self._refresh()
            return
        super().on_button_pressed(event)

    def _apply(self, choice: str, confirmed: bool) -> None:
        result = self.machine.set_installation_type(choice, confirm=lambda _message: confirmed)
        if not result.applied:
            self.message.update(result.reason or "")
            return
        self._refresh()
        if self.machine.undo_available():
            self.message.update("Installation type changed; your OS selections were cleared.")
            return
        self.app.advance()

    def _refresh(self) -> None:
        self.preview.update(self.navigator.preview())
        self._refresh_undo()

    def _refresh_undo(self) -> None:
        available = self.machine.undo_available()
        self.undo_button.display = available
        if available:
            self.undo_button.label = f"Undo ({int(self.machine.undo_remaining_s()) + 1}s)"


class OsScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        surface = Container(id="os-surface", classes="surface")
        surface.border_title = f"Step 2/5 · {Step.OS.title}"
        options = [
            SelectOption(value=system.id, label=f"{system.name} ({system.kind})")
            for system in self.navigator.catalog.selectable_systems()
        ]
        self.options = options
        state = self.machine.state
        with surface:
            yield Static(_progress_line(self.navigator), classes="progress-line")
            if state.installation_type == "dual":
                yield Static("Pick two different systems with space, then press enter.", id="os-hint")
                self.picker = PickList(options, state.selected_os_ids, limit=2, id="os-picks")
                yield self.picker
            else:
                yield Static("Pick the system to install.", id="os-hint")
                self.list = OptionList(*(option.label for option in options), id="os-list")
                yield self.list
            self.message = Static("", id="os-message", classes="message")
            yield self.message
            yield _nav_buttons()
        yield _footer_hint()

    def on_mount(self) -> None:
        state = self.machine.state
        if state.installation_type != "dual" and state.selected_os_ids:
            values = [option.value for option in self.options]
            if state.selected_os_ids[0] in values:
                self.list.highlighted = values.index(state.selected_os_ids[0])

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list.id != "os-list":
            return
        result = self.machine.select_single_os(self.options[event.option_index].value)
        if not result.applied:
            self.message.update(result.reason or "")
            return
        self.app.advance()

    def on_pick_list_confirmed(self, message: PickList.Confirmed) -> None:
        picks = self.picker.picked_values + [None, None]
        result = self.machine.select_dual_os(picks[0], picks[1])
        if not result.applied:
            self.message.update(result.reason or "")
            self.picker.update_options(self.options, self.machine.state.selected_os_ids)
            return
        self.app.advance()


class VersionScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        surface = Container(id="version-surface", classes="surface")
        surface.border_title = f"Step 3/5 · {Step.VERSION.title}"
        with surface:
            yield Static(_progress_line(self.navigator), classes="progress-line")
            for version_surface in self.navigator.version_surfaces:
                yield Label(version_surface.system.name, classes="version-label")
                yield OptionList(
                    *(version.name for version in version_surface.versions),
                    id=f"version-{version_surface.slot}",
                )
            self.preview = Static("", id="version-preview")
            yield self.preview
            self.message = Static("", id="version-message", classes="message")
            yield self.message
            yield _nav_buttons()
        yield _footer_hint()

    def on_mount(self) -> None:
        for version_surface in self.navigator.version_surfaces:
            ids = [version.id for version in version_surface.versions]
            if version_surface.selected_version_id in ids:
                option_list = self.query_one(f"#version-{version_surface.slot}", OptionList)
                option_list.highlighted = ids.index(version_surface.selected_version_id)
        self.preview.update(self.navigator.preview())

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        slot = int((event.option_list.id or "version-0").rsplit("-", 1)[1])
        version_surface = self.navigator.version_surfaces[slot]
        result = self.machine.select_version(slot, version_surface.versions[event.option_index].id)
        self.preview.update(self.navigator.preview())
        if not result.applied:
            self.message.update(result.reason or "")
        elif result.complete:
            self.message.update("All versions selected. Continue when ready.")
        else:
            self.message.update("")


class CustomerScreen(BaseScreen):
    submit_task: asyncio.Task | None = None

    def compose(self) -> ComposeResult:
        surface = Container(id="customer-surface", classes="surface")
        surface.border_title = f"Step 4/5 · {Step.CUSTOMER.title}"
        info = self.machine.state.customer_info
        add_ons = self.machine.state.add_ons
        prices = self.navigator.prices
        with surface:
            yield Static(_progress_line(self.navigator), classes="progress-line")
            for field_name in CUSTOMER_FIELDS:
                yield Input(
                    value=getattr(info, field_name),
                    placeholder=FIELD_PROMPTS[field_name],
                    id=f"field-{field_name}",
                )
                yield Static("", id=f"error-{field_name}", classes="field-error")
            for add_on, label in ADD_ON_LABELS.items():
                yield Checkbox(
                    f"{label} (+{format_price(prices.add_on_price(add_on))})",
                    value=getattr(add_ons, add_on),
                    id=f"addon-{add_on}",
                )
            self.total = Static("", id="customer-total")
            yield self.total
            self.message = Static("", id="customer-message", classes="message")
            yield self.message
            yield Horizontal(
                Button("Back", id="nav-back"),
                Button("Submit order", id="customer-submit", variant="primary"),
                classes="nav-row",
            )
        yield _footer_hint()

    def on_mount(self) -> None:
        self._refresh_total()

    def on_input_changed(self, event: Input.Changed) -> None:
        field_name = (event.input.id or "").removeprefix("field-")
        if field_name in CUSTOMER_FIELDS:
            self.machine.set_customer_field(field_name, event.value)

    def on_input_blurred(self, event: Input.Blurred) -> None:
        field_name = (event.input.id or "").removeprefix("field-")
        if field_name not in CUSTOMER_FIELDS:
            return
        issue = self.machine.check_field(field_name)
        self.query_one(f"#error-{field_name}", Static).update(issue.message if issue else "")

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        add_on = (event.checkbox.id or "").removeprefix("addon-")
        self.machine.set_add_on(add_on, event.value)
        self._refresh_total()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "customer-submit":
            if self.session.submitter.busy:
                return
            event.button.disabled = True
            self.message.update("Submitting order...")
            self.submit_task = asyncio.create_task(self._submit(event.button))
            return
        super().on_button_pressed(event)

    async def _submit(self, button: Button) -> None:
        try:
            outcome = await self.session.submitter.submit()
        except Exception as exc:  # noqa: BLE001
            self.message.update(f"Order submission failed: {exc}")
            return
        finally:
            button.disabled = False
        if outcome.log_warning:
            self.app.notify(outcome.log_warning, severity="warning")
        if outcome.ok:
            self.app.show_step()
            return
        for field_name in CUSTOMER_FIELDS:
            self.query_one(f"#error-{field_name}", Static).update(outcome.field_errors.get(field_name, ""))
        self.message.update(outcome.reason or "Order submission failed.")

    def _refresh_total(self) -> None:
        quote = compute_quote(self.machine.state, self.navigator.prices)
        self.total.update(f"{self.navigator.preview()}\nTotal: {format_price(quote.total)}")


class SummaryScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        surface = Container(id="summary-surface", classes="surface")
        surface.border_title = f"Step 5/5 · {Step.SUMMARY.title}"
        summary = self.navigator.summary or self.navigator.refresh_summary()
        confirmation = self.session.submitter.last_confirmation
        self.submitted = confirmation is not None and confirmation.order_number == summary.order_number
        with surface:
            yield Static(_progress_line(self.navigator), classes="progress-line")
            yield Static("\n".join(f"{label}: {value}" for label, value in summary.to_rows()), id="summary-rows")
            if self.submitted:
                yield Static(
                    f"Order {summary.order_number} placed. Keep this number to track your installation.",
                    id="summary-confirmation",
                )
                buttons = [Button("New order", id="summary-new", variant="primary"), Button("Exit", id="summary-exit")]
            else:
                yield Static("This order has not been submitted yet.", id="summary-confirmation")
                buttons = [Button("Back", id="nav-back"), Button("Exit", id="summary-exit")]
            yield Horizontal(*buttons, classes="nav-row")
        yield _footer_hint()

    def action_back(self) -> None:
        if not self.submitted:
            self.app.retreat()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "summary-new":
            self.navigator.reset()
            self.session.submitter.last_confirmation = None
            self.app.show_step()
        elif event.button.id == "summary-exit":
            self.app.exit()
        else:
            super().on_button_pressed(event)


STEP_SCREENS = {
    Step.TYPE: TypeScreen,
    Step.OS: OsScreen,
    Step.VERSION: VersionScreen,
    Step.CUSTOMER: CustomerScreen,
    Step.SUMMARY: SummaryScreen,
}
