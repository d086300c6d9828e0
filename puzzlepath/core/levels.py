from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from puzzlepath.core.tutorial import TUTORIAL_ACTIONS, TutorialStep

logger = logging.getLogger(__name__)


class Family(str, Enum):
    BALANCE = "balance"
    COLORING = "coloring"
    GARDEN = "garden"
    SMASH = "smash"


class ValidatorKind(Enum):
    TORQUE = "torque"
    AREA_FRACTION = "area-fraction"
    NUMERIC_ENTRY = "numeric-entry"


class TorqueGoal(str, Enum):
    BALANCED = "balanced"
    TILT_LEFT = "tilt-left"
    TILT_RIGHT = "tilt-right"


FAMILY_KINDS: Dict[Family, ValidatorKind] = {
    Family.BALANCE: ValidatorKind.TORQUE,
    Family.COLORING: ValidatorKind.AREA_FRACTION,
    Family.GARDEN: ValidatorKind.AREA_FRACTION,
    Family.SMASH: ValidatorKind.NUMERIC_ENTRY,
}

# Families whose attempts carry a bounded lives counter.
FAMILIES_WITH_LIVES = frozenset({Family.SMASH})


@dataclass(frozen=True)
class FixedWeight:
    slot_index: int
    weight: int


@dataclass(frozen=True)
class BalanceLayout:
    positions: Tuple[int, ...]
    fixed: Tuple[FixedWeight, ...]
    movable_weight: int

    @property
    def slot_count(self) -> int:
        return len(self.positions)

    def is_open(self, slot: int) -> bool:
        """True for an on-beam slot that is neither the pivot nor holds a fixed weight."""
        if not 0 <= slot < len(self.positions) or self.positions[slot] == 0:
            return False
        return all(f.slot_index != slot for f in self.fixed)


@dataclass(frozen=True)
class GridLayout:
    rows: int
    cols: int
    shape: str = "grid"

    @property
    def total_parts(self) -> int:
        return self.rows * self.cols


@dataclass(frozen=True)
class FractionTarget:
    num: int
    den: int

    def __str__(self) -> str:
        return f"{self.num}/{self.den}"


@dataclass(frozen=True)
class Level:
    id: int
    name: str
    family: Family
    target: Union[TorqueGoal, FractionTarget]
    layout: Union[BalanceLayout, GridLayout]
    intro_text: str = ""
    tutorial: Tuple[TutorialStep, ...] = field(default_factory=tuple)

    @property
    def index(self) -> int:
        """Zero-based position in the family catalog."""
        return self.id - 1

    @property
    def kind(self) -> ValidatorKind:
        return FAMILY_KINDS[self.family]


def _default_levels_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "levels"


class LevelRepository:
    """Ordered, read-only level catalogs keyed by family.

    Each family lives in ``data/levels/<family>/`` as ``level<N>.yaml`` files
    numbered from 1 without gaps.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or _default_levels_dir()
        self._levels = self._load_levels()

    def families(self) -> List[Family]:
        return list(self._levels.keys())

    def all(self, family: Union[Family, str]) -> List[Level]:
        return list(self._levels[Family(family)])

    def count(self, family: Union[Family, str]) -> int:
        return len(self._levels[Family(family)])

    def get(self, family: Union[Family, str], index: int) -> Level:
        """Return the level at zero-based *index*; raises IndexError past the end."""
        levels = self._levels[Family(family)]
        if index < 0:
            raise IndexError(f"level index {index} out of range")
        return levels[index]

    def _load_levels(self) -> Dict[Family, List[Level]]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        catalogs: Dict[Family, List[Level]] = {}
        for family in Family:
            family_dir = base_dir / family.value
            if not family_dir.is_dir():
                logger.debug("No level directory for %s", family.value)
                continue
            levels = self._load_family(family, family_dir)
            if levels:
                catalogs[family] = levels

        if not catalogs:
            raise ValueError(f"No level files (level*.yaml) found in {base_dir}")
        return catalogs

    def _load_family(self, family: Family, family_dir: Path) -> List[Level]:
        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^level(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        levels: List[Level] = []
        for expected_id, level_path in enumerate(
            sorted(family_dir.glob("level*.yaml"), key=_sort_key), start=1
        ):
            m = re.match(r"^level(\d+)$", level_path.stem)
            if not m or int(m.group(1)) != expected_id:
                raise ValueError(
                    f"{family.value}/{level_path.name}: expected level{expected_id}.yaml "
                    "(levels must be numbered from 1 without gaps)"
                )
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            if not raw or not isinstance(raw, dict):
                raise ValueError(f"{level_path.name}: expected YAML mapping with level fields")
            levels.append(_parse_level(family, expected_id, raw, level_path.name))
        return levels


def _require_int(raw: Dict[str, Any], key: str, where: str, minimum: Optional[int] = None) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{where}: missing or invalid '{key}'")
    if minimum is not None and value < minimum:
        raise ValueError(f"{where}: '{key}' must be >= {minimum}")
    return value


def _parse_level(family: Family, level_id: int, raw: Dict[str, Any], where: str) -> Level:
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"{where}: missing or invalid 'name'")
    intro = str(raw.get("intro") or "").strip()

    target: Union[TorqueGoal, FractionTarget]
    layout: Union[BalanceLayout, GridLayout]
    if FAMILY_KINDS[family] is ValidatorKind.TORQUE:
        target, layout = _parse_balance(raw, where)
    else:
        target, layout = _parse_fraction(raw, where)

    return Level(
        id=level_id,
        name=name.strip(),
        family=family,
        target=target,
        layout=layout,
        intro_text=intro,
        tutorial=_parse_tutorial(raw.get("tutorial"), where),
    )


def _parse_balance(raw: Dict[str, Any], where: str) -> tuple[TorqueGoal, BalanceLayout]:
    try:
        goal = TorqueGoal(raw.get("goal"))
    except ValueError:
        raise ValueError(f"{where}: missing or invalid 'goal'") from None

    positions = raw.get("positions")
    if not isinstance(positions, list) or not positions:
        raise ValueError(f"{where}: 'positions' must be a non-empty list")
    if not all(isinstance(p, int) and not isinstance(p, bool) for p in positions):
        raise ValueError(f"{where}: 'positions' must contain integers")

    fixed: List[FixedWeight] = []
    for item in raw.get("fixed") or []:
        if not isinstance(item, dict):
            raise ValueError(f"{where}: each 'fixed' entry needs 'slot' and 'weight'")
        slot = _require_int(item, "slot", where, minimum=0)
        if slot >= len(positions):
            raise ValueError(f"{where}: fixed slot {slot} outside the beam")
        fixed.append(FixedWeight(slot_index=slot, weight=_require_int(item, "weight", where, minimum=1)))

    layout = BalanceLayout(
        positions=tuple(positions),
        fixed=tuple(fixed),
        movable_weight=_require_int(raw, "movable_weight", where, minimum=1),
    )
    return goal, layout


def _parse_fraction(raw: Dict[str, Any], where: str) -> tuple[FractionTarget, GridLayout]:
    target = FractionTarget(
        num=_require_int(raw, "num", where, minimum=0),
        den=_require_int(raw, "den", where, minimum=1),
    )
    layout = GridLayout(
        rows=_require_int(raw, "rows", where, minimum=1),
        cols=_require_int(raw, "cols", where, minimum=1),
        shape=str(raw.get("shape") or "grid"),
    )
    return target, layout


def _parse_tutorial(raw: Any, where: str) -> Tuple[TutorialStep, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError(f"{where}: 'tutorial' must be a list of steps")
    steps: List[TutorialStep] = []
    for item in raw:
        if not isinstance(item, dict) or item.get("action") not in TUTORIAL_ACTIONS:
            raise ValueError(f"{where}: tutorial step needs a known 'action'")
        target = item.get("target")
        if target is not None and (isinstance(target, bool) or not isinstance(target, int)):
            raise ValueError(f"{where}: tutorial 'target' must be an integer")
        steps.append(
            TutorialStep(
                action=item["action"],
                target=target,
                message=str(item.get("message") or "").strip(),
            )
        )
    return tuple(steps)
