"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from puzzlepath.core.levels import Level
from puzzlepath.core.progress import ProgressRecord


@dataclass
class LevelState:
    """UI state for a single level: unlock status, best stars, and selection."""

    level: Level
    unlocked: bool
    best_stars: int
    is_current: bool = False


def build_level_states(levels: List[Level], record: ProgressRecord, unlock_all: bool = False) -> List[LevelState]:
    """Unlock/star state for every level, marking the first unlocked level without stars as current."""
    states = [
        LevelState(
            level=level,
            unlocked=unlock_all or record.is_unlocked(level.index),
            best_stars=record.stars_for(level.index),
        )
        for level in levels
    ]
    for st in states:
        if st.unlocked and st.best_stars == 0:
            st.is_current = True
            break
    return states
