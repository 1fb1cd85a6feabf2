"""Wizard package."""

from techserve.wizard.selection import SelectionMachine
from techserve.wizard.state import ActionResult, SelectionState, Step

__all__ = ["ActionResult", "SelectionMachine", "SelectionState", "Step"]
