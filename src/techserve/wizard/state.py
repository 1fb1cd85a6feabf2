"""Session state for the order wizard."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
import random
import time
from typing import Callable

from techserve.validation import CUSTOMER_FIELDS


class Step(IntEnum):
    TYPE = 1
    OS = 2
    VERSION = 3
    CUSTOMER = 4
    SUMMARY = 5

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    Step.TYPE: "Installation type",
    Step.OS: "Operating system",
    Step.VERSION: "Version",
    Step.CUSTOMER: "Customer details",
    Step.SUMMARY: "Summary",
}


def generate_order_number(
    *,
    clock: Callable[[], float] = time.time,
    rng: random.Random | None = None,
) -> str:
    """``TS-`` followed by the last 6 digits of the millisecond clock and 4 random digits."""
    source = rng or random
    millis = str(int(clock() * 1000))[-6:].rjust(6, "0")
    suffix = source.randint(1000, 9999)
    return f"TS-{millis}{suffix}"


@dataclass
class CustomerInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""

    def to_dict(self) -> dict[str, str]:
        return {field_name: getattr(self, field_name) for field_name in CUSTOMER_FIELDS}

    def is_empty(self) -> bool:
        return not any(value.strip() for value in self.to_dict().values())


@dataclass
class AddOns:
    additional_drivers: bool = False
    office_suite: bool = False

    def selected(self) -> list[str]:
        chosen = []
        if self.additional_drivers:
            chosen.append("additional_drivers")
        if self.office_suite:
            chosen.append("office_suite")
        return chosen


@dataclass
class SelectionState:
    order_number: str
    installation_type: str | None = None
    selected_os_ids: list[int] = field(default_factory=list)
    selected_version_ids: list[int | None] = field(default_factory=list)
    customer_info: CustomerInfo = field(default_factory=CustomerInfo)
    add_ons: AddOns = field(default_factory=AddOns)
    section: str | None = None

    def required_os_count(self) -> int:
        return 2 if self.installation_type == "dual" else 1

    def version_for_slot(self, slot: int) -> int | None:
        if 0 <= slot < len(self.selected_version_ids):
            return self.selected_version_ids[slot]
        return None

    def selected_version_count(self) -> int:
        return sum(1 for version_id in self.selected_version_ids if version_id is not None)

    def clear_os_selection(self) -> None:
        self.selected_os_ids = []
        self.selected_version_ids = []


@dataclass(frozen=True)
class UndoSnapshot:
    installation_type: str | None
    selected_os_ids: tuple[int, ...]
    selected_version_ids: tuple[int | None, ...]
    expires_at: float


@dataclass(frozen=True)
class ActionResult:
    applied: bool
    reason: str | None = None
    complete: bool = False

    @classmethod
    def ok(cls, *, complete: bool = False) -> "ActionResult":
        return cls(applied=True, complete=complete)

    @classmethod
    def rejected(cls, reason: str) -> "ActionResult":
        return cls(applied=False, reason=reason)
