"""Five-step linear navigation over the selection state machine."""

from __future__ import annotations

from dataclasses import dataclass

from techserve.catalog import CatalogSnapshot, OperatingSystem, OSVersion
from techserve.config import PriceTable
from techserve.pricing import OrderSummary, build_summary, live_preview
from techserve.wizard.selection import SelectionMachine
from techserve.wizard.state import ActionResult, Step


@dataclass(frozen=True)
class VersionSurface:
    """Version choices for one selected OS slot."""

    slot: int
    system: OperatingSystem
    versions: list[OSVersion]
    selected_version_id: int | None


class StepNavigator:
    def __init__(self, machine: SelectionMachine, prices: PriceTable) -> None:
        self.machine = machine
        self.prices = prices
        self.current = Step.TYPE
        self.version_surfaces: list[VersionSurface] = []
        self.summary: OrderSummary | None = None

    @property
    def catalog(self) -> CatalogSnapshot:
        return self.machine.catalog

    def forward(self) -> ActionResult:
        if self.current == Step.SUMMARY:
            return ActionResult.rejected("Summary is the final step")
        blocker = self.machine.advance_blocker(self.current)
        if blocker:
            return ActionResult.rejected(blocker)
        self._enter(Step(self.current + 1))
        return ActionResult.ok()

    def backward(self) -> ActionResult:
        if self.current == Step.TYPE:
            return ActionResult.rejected("Already at the first step")
        self._enter(Step(self.current - 1))
        return ActionResult.ok()

    def go_to_summary(self) -> OrderSummary:
        """Enter SUMMARY after an accepted submission, which already passed the step 4 gate."""
        self._enter(Step.SUMMARY)
        return self.summary  # type: ignore[return-value]

    def reset(self) -> None:
        self.machine.reset()
        self.current = Step.TYPE
        self.version_surfaces = []
        self.summary = None

    def refresh_version_surfaces(self) -> list[VersionSurface]:
        state = self.machine.state
        surfaces = []
        for slot, os_id in enumerate(state.selected_os_ids):
            system = self.catalog.get_system(os_id)
            if system is None:
                continue
            surfaces.append(
                VersionSurface(
                    slot=slot,
                    system=system,
                    versions=system.active_versions(),
                    selected_version_id=state.version_for_slot(slot),
                )
            )
        self.version_surfaces = surfaces
        return surfaces

    def refresh_summary(self) -> OrderSummary:
        self.summary = build_summary(self.machine.state, self.catalog, self.prices)
        return self.summary

    def preview(self) -> str:
        return live_preview(self.machine.state, self.catalog)

    def progress_markers(self) -> list[tuple[Step, str]]:
        markers = []
        for step in Step:
            if step < self.current:
                markers.append((step, "completed"))
            elif step == self.current:
                markers.append((step, "current"))
            else:
                markers.append((step, "upcoming"))
        return markers

    def _enter(self, step: Step) -> None:
        self.current = step
        if step == Step.VERSION:
            self.refresh_version_surfaces()
        elif step == Step.SUMMARY:
            self.refresh_summary()
