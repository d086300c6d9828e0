"""In-progress answer state for a single level attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Set, Union

from puzzlepath.core.levels import (
    FAMILIES_WITH_LIVES,
    BalanceLayout,
    GridLayout,
    Level,
    ValidatorKind,
)
from puzzlepath.core.tutorial import TutorialProgress


@dataclass
class SlotSelection:
    """Which beam slot holds the movable weight (None until placed)."""

    slot: Optional[int] = None

    def is_empty(self) -> bool:
        return self.slot is None


@dataclass
class CellSelection:
    """Toggled cell indices of a grid or shape."""

    cells: Set[int] = field(default_factory=set)

    def toggle(self, index: int) -> None:
        if index in self.cells:
            self.cells.discard(index)
        else:
            self.cells.add(index)

    @property
    def count(self) -> int:
        return len(self.cells)

    def is_empty(self) -> bool:
        return not self.cells


@dataclass
class NumericEntry:
    """Raw text of the numerator and denominator fields."""

    numerator: str = ""
    denominator: str = ""

    def is_empty(self) -> bool:
        return not self.numerator.strip() or not self.denominator.strip()


Selection = Union[SlotSelection, CellSelection, NumericEntry]


def empty_selection(level: Level) -> Selection:
    kind = level.kind
    if kind is ValidatorKind.TORQUE:
        return SlotSelection()
    if kind is ValidatorKind.AREA_FRACTION:
        return CellSelection()
    return NumericEntry()


def copy_selection(selection: Selection) -> Selection:
    if isinstance(selection, CellSelection):
        return CellSelection(cells=set(selection.cells))
    if isinstance(selection, SlotSelection):
        return SlotSelection(slot=selection.slot)
    return NumericEntry(numerator=selection.numerator, denominator=selection.denominator)


class AttemptState:
    """Mutable answer, mistake counter, lives and tutorial cursor for one attempt.

    Always built fresh from the level definition; there is no partial reset.
    """

    def __init__(self, level: Level, lives: Optional[int] = None) -> None:
        self._level = level
        self.selection: Selection = empty_selection(level)
        self.mistake_count = 0
        self.initial_lives = lives if level.family in FAMILIES_WITH_LIVES else None
        self.lives: Optional[int] = self.initial_lives
        self.tutorial: Optional[TutorialProgress] = (
            TutorialProgress(level.tutorial) if level.tutorial else None
        )

    @property
    def level(self) -> Level:
        return self._level

    @property
    def in_tutorial(self) -> bool:
        return self.tutorial is not None and not self.tutorial.complete

    def select_slot(self, slot: int) -> bool:
        """Place the movable weight on *slot*, or lift it when *slot* already holds it.

        The pivot and slots carrying a fixed weight cannot be chosen.
        """
        layout = self._level.layout
        if not isinstance(self.selection, SlotSelection) or not isinstance(layout, BalanceLayout):
            return False
        if not layout.is_open(slot):
            return False
        self.selection.slot = None if self.selection.slot == slot else slot
        return True

    def toggle_cell(self, index: int) -> bool:
        layout = self._level.layout
        if not isinstance(self.selection, CellSelection) or not isinstance(layout, GridLayout):
            return False
        if not 0 <= index < layout.total_parts:
            return False
        self.selection.toggle(index)
        return True

    def set_entry(self, numerator: Optional[str] = None, denominator: Optional[str] = None) -> bool:
        if not isinstance(self.selection, NumericEntry):
            return False
        if numerator is not None:
            self.selection.numerator = str(numerator)
        if denominator is not None:
            self.selection.denominator = str(denominator)
        return True

    def record_mistake(self) -> None:
        self.mistake_count += 1
        if self.lives is not None:
            self.lives = max(0, self.lives - 1)

    @property
    def out_of_lives(self) -> bool:
        return self.lives is not None and self.lives <= 0
