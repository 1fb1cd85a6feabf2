"""Textual widgets for the TechServe TUI."""

from __future__ import annotations

from dataclasses import dataclass

from textual.message import Message
from textual.widgets import OptionList


@dataclass(frozen=True)
class SelectOption:
    value: int
    label: str


class PickList(OptionList):
    """OptionList with ordered checkbox-style picks, capped at ``limit``.

    Picks keep the order they were made in; the first pick is slot 1.
    """

    class Confirmed(Message):
        def __init__(self, sender: "PickList") -> None:
            super().__init__()
            self.pick_list = sender

    def __init__(self, options: list[SelectOption], picked: list[int], *, limit: int = 2, id: str | None = None) -> None:
        self._options = options
        self._picked = list(picked)[:limit]
        self._limit = limit
        super().__init__(id=id)
        self._refresh_options()

    @property
    def picked_values(self) -> list[int]:
        return list(self._picked)

    def update_options(self, options: list[SelectOption], picked: list[int]) -> None:
        self._options = options
        self._picked = list(picked)[: self._limit]
        self._refresh_options()

    def _refresh_options(self) -> None:
        self.clear_options()
        for option in self._options:
            if option.value in self._picked:
                marker = f"[{self._picked.index(option.value) + 1}]"
            else:
                marker = "[ ]"
            self.add_option(f"{marker} {option.label}")

    def _toggle_picked(self) -> None:
        index = self.highlighted
        if index is None or not 0 <= index < len(self._options):
            return
        value = self._options[index].value
        if value in self._picked:
            self._picked.remove(value)
        elif len(self._picked) < self._limit:
            self._picked.append(value)
        else:
            self.app.bell()
            return
        self._refresh_options()
        self.highlighted = index

    async def on_key(self, event) -> None:  # type: ignore[override]
        if event.key == "space":
            self._toggle_picked()
            event.stop()
        elif event.key == "enter":
            self.post_message(self.Confirmed(self))
            event.stop()
