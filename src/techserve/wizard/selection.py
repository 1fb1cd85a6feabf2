"""Selection state machine: the only mutation path for a wizard session."""

from __future__ import annotations

import time
from typing import Callable

from techserve.catalog import CatalogSnapshot
from techserve.config import ADD_ON_TYPES, DEFAULT_UNDO_WINDOW_S, INSTALLATION_TYPES
from techserve.validation import (
    CUSTOMER_FIELDS,
    ValidationIssue,
    ValidationResult,
    validate_customer_info,
    validate_field,
)
from techserve.wizard.state import (
    ActionResult,
    SelectionState,
    Step,
    UndoSnapshot,
    generate_order_number,
)

SWITCH_CONFIRM_MESSAGE = "Switching installation type will clear your current OS selections. Continue?"
SWITCH_CANCELLED = "Installation type change cancelled."
BOTH_REQUIRED = "Please select both operating systems"
MUST_DIFFER = "Please select two different operating systems"
NOTHING_TO_UNDO = "Nothing to undo."
UNDO_EXPIRED = "Undo window has expired."

Confirm = Callable[[str], bool]


class SelectionMachine:
    """Owns a :class:`SelectionState` and keeps it consistent with the catalog.

    Every operation returns an :class:`ActionResult`. An operation either
    applies completely or leaves the state as it was; the one documented
    exception is an invalid dual-boot pair, which clears the OS selection.
    """

    def __init__(
        self,
        catalog: CatalogSnapshot,
        *,
        undo_window_s: float = DEFAULT_UNDO_WINDOW_S,
        clock: Callable[[], float] = time.monotonic,
        order_number_factory: Callable[[], str] = generate_order_number,
    ) -> None:
        self.catalog = catalog
        self._undo_window_s = undo_window_s
        self._clock = clock
        self._new_order_number = order_number_factory
        self._undo: UndoSnapshot | None = None
        self.state = SelectionState(order_number=self._new_order_number())

    # Installation type and undo

    def set_installation_type(
        self,
        installation_type: str,
        confirm: Confirm | None = None,
        *,
        now: float | None = None,
    ) -> ActionResult:
        if installation_type not in INSTALLATION_TYPES:
            return ActionResult.rejected(f"Unknown installation type: {installation_type}")
        state = self.state
        previous = state.installation_type
        if previous == installation_type:
            state.section = installation_type
            return ActionResult.ok()

        if previous is not None and state.selected_os_ids:
            if confirm is None or not confirm(SWITCH_CONFIRM_MESSAGE):
                return ActionResult.rejected(SWITCH_CANCELLED)

        snapshot = UndoSnapshot(
            installation_type=previous,
            selected_os_ids=tuple(state.selected_os_ids),
            selected_version_ids=tuple(state.selected_version_ids),
            expires_at=self._now(now) + self._undo_window_s,
        )
        state.clear_os_selection()
        state.installation_type = installation_type
        state.section = installation_type
        # Only a switch away from an earlier type can be undone.
        self._undo = snapshot if previous is not None else None
        return ActionResult.ok()

    def undo_available(self, *, now: float | None = None) -> bool:
        return self._undo is not None and self._now(now) < self._undo.expires_at

    def undo_remaining_s(self, *, now: float | None = None) -> float:
        if self._undo is None:
            return 0.0
        return max(0.0, self._undo.expires_at - self._now(now))

    def undo(self, *, now: float | None = None) -> ActionResult:
        snapshot = self._undo
        if snapshot is None:
            return ActionResult.rejected(NOTHING_TO_UNDO)
        self._undo = None
        if self._now(now) >= snapshot.expires_at:
            return ActionResult.rejected(UNDO_EXPIRED)
        state = self.state
        state.installation_type = snapshot.installation_type
        state.section = snapshot.installation_type
        state.selected_os_ids = list(snapshot.selected_os_ids)
        state.selected_version_ids = list(snapshot.selected_version_ids)
        return ActionResult.ok(complete=self.versions_complete())

    # Operating systems and versions

    def select_single_os(self, os_id: int) -> ActionResult:
        state = self.state
        if state.installation_type != "full":
            return ActionResult.rejected("Single OS selection is only available for a full installation.")
        if not self.catalog.is_selectable(os_id):
            return ActionResult.rejected(f"Operating system {os_id} is not available.")
        state.selected_os_ids = [os_id]
        state.selected_version_ids = [None]
        return ActionResult.ok()

    def select_dual_os(self, os_id_a: int | None, os_id_b: int | None) -> ActionResult:
        state = self.state
        if state.installation_type != "dual":
            return ActionResult.rejected("Dual OS selection is only available for a dual boot installation.")
        if not os_id_a or not os_id_b:
            state.clear_os_selection()
            return ActionResult.rejected(BOTH_REQUIRED)
        if os_id_a == os_id_b:
            state.clear_os_selection()
            return ActionResult.rejected(MUST_DIFFER)
        for os_id in (os_id_a, os_id_b):
            if not self.catalog.is_selectable(os_id):
                return ActionResult.rejected(f"Operating system {os_id} is not available.")
        state.selected_os_ids = [os_id_a, os_id_b]
        state.selected_version_ids = [None, None]
        return ActionResult.ok()

    def select_version(self, slot: int, version_id: int) -> ActionResult:
        state = self.state
        if not 0 <= slot < len(state.selected_os_ids):
            return ActionResult.rejected(f"No operating system selected for slot {slot}.")
        os_id = state.selected_os_ids[slot]
        if not self.catalog.version_belongs(os_id, version_id):
            system = self.catalog.get_system(os_id)
            label = system.name if system else f"OS {os_id}"
            return ActionResult.rejected(f"Version {version_id} is not available for {label}.")
        state.selected_version_ids[slot] = version_id
        return ActionResult.ok(complete=self.versions_complete())

    def versions_complete(self) -> bool:
        state = self.state
        if len(state.selected_os_ids) != state.required_os_count():
            return False
        return state.selected_version_count() == state.required_os_count()

    # Customer details and add-ons

    def set_customer_field(self, field: str, value: str) -> ActionResult:
        if field not in CUSTOMER_FIELDS:
            return ActionResult.rejected(f"Unknown customer field: {field}")
        setattr(self.state.customer_info, field, value)
        return ActionResult.ok()

    def set_customer_info(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> ActionResult:
        for field, value in (("name", name), ("email", email), ("phone", phone), ("address", address)):
            if value is not None:
                setattr(self.state.customer_info, field, value)
        return ActionResult.ok()

    def check_field(self, field: str) -> ValidationIssue | None:
        """Live feedback for a single field, e.g. when it loses focus."""
        return validate_field(field, getattr(self.state.customer_info, field, None))

    def validate_customer(self) -> ValidationResult:
        return validate_customer_info(self.state.customer_info)

    def set_add_on(self, add_on_type: str, enabled: bool) -> ActionResult:
        if add_on_type not in ADD_ON_TYPES:
            return ActionResult.rejected(f"Unknown add-on: {add_on_type}")
        setattr(self.state.add_ons, add_on_type, bool(enabled))
        return ActionResult.ok()

    # Step predicates

    def advance_blocker(self, step: int) -> str | None:
        """Reason the given step cannot be left forwards, or ``None``.

        Earlier steps are re-checked so a later edit (a type switch, an undo)
        can never leave a gap behind the current step.
        """
        step = Step(step)
        state = self.state
        if state.installation_type not in INSTALLATION_TYPES:
            return "Please select an installation type"
        if step == Step.TYPE:
            return None

        if not state.selected_os_ids:
            return "Please select operating system(s)"
        if len(state.selected_os_ids) != state.required_os_count():
            return BOTH_REQUIRED
        if step == Step.OS:
            return None

        if not self.versions_complete():
            if state.installation_type == "full":
                return "Please select a version"
            return "Please select versions for both operating systems"
        if step == Step.VERSION:
            return None

        result = self.validate_customer()
        if not result.ok:
            fields = ", ".join(issue.path for issue in result.errors)
            return f"Please correct the customer details: {fields}"
        if step == Step.CUSTOMER:
            return None
        return "Summary is the final step"

    def is_advanceable(self, step: int) -> bool:
        return self.advance_blocker(step) is None

    def reset(self) -> None:
        previous = self.state.order_number
        order_number = self._new_order_number()
        while order_number == previous:
            order_number = self._new_order_number()
        self.state = SelectionState(order_number=order_number)
        self._undo = None

    def _now(self, now: float | None) -> float:
        return self._clock() if now is None else now
