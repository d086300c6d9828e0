"""Guided intro steps that gate which learner actions are accepted."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

SELECT_SLOT = "select_slot"
TOGGLE_CELL = "toggle_cell"
TOUCH_WHOLE = "touch_whole"
CUT = "cut"
PAINT = "paint"
SMASH = "smash"

TUTORIAL_ACTIONS = (SELECT_SLOT, TOGGLE_CELL, TOUCH_WHOLE, CUT, PAINT, SMASH)


@dataclass(frozen=True)
class TutorialStep:
    """One permitted action. ``target`` of None accepts any index."""

    action: str
    target: Optional[int] = None
    message: str = ""

    def matches(self, action: str, target: Optional[int]) -> bool:
        if action != self.action:
            return False
        return self.target is None or self.target == target


class TutorialProgress:
    """Linear walk through a tuple of steps; only the current step is permitted."""

    def __init__(self, steps: Sequence[TutorialStep]) -> None:
        self._steps: Tuple[TutorialStep, ...] = tuple(steps)
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def complete(self) -> bool:
        return self._index >= len(self._steps)

    def current_step(self) -> Optional[TutorialStep]:
        if self.complete:
            return None
        return self._steps[self._index]

    @property
    def message(self) -> str:
        step = self.current_step()
        return step.message if step is not None else ""

    def permits(self, action: str, target: Optional[int] = None) -> bool:
        step = self.current_step()
        return step is not None and step.matches(action, target)

    def advance(self, action: str, target: Optional[int] = None) -> bool:
        """Move past the current step if the action matches it."""
        if not self.permits(action, target):
            return False
        self._index += 1
        return True
