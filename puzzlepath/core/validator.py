"""Answer checking for each puzzle family.

All functions here are pure: they read a level and a selection snapshot and
return a :class:`ValidationResult`. Counting mistakes and awarding stars is
left to the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from puzzlepath.core.attempt import CellSelection, NumericEntry, Selection, SlotSelection
from puzzlepath.core.levels import (
    BalanceLayout,
    FractionTarget,
    GridLayout,
    Level,
    TorqueGoal,
    ValidatorKind,
)


class FailureReason(str, Enum):
    EMPTY_SELECTION = "empty-selection"
    INSUFFICIENT_MAGNITUDE = "insufficient-magnitude"
    EXCESS_MAGNITUDE = "excess-magnitude"
    WRONG_TOTAL_COUNT = "wrong-total-count"
    WRONG_DENOMINATOR = "wrong-denominator"
    WRONG_NUMERATOR = "wrong-numerator"
    NO_FAILURE = "no-failure"


@dataclass(frozen=True)
class ValidationResult:
    passed: bool
    failure_reason: FailureReason = FailureReason.NO_FAILURE
    net_torque: Optional[int] = None

    @classmethod
    def success(cls, net_torque: Optional[int] = None) -> "ValidationResult":
        return cls(passed=True, failure_reason=FailureReason.NO_FAILURE, net_torque=net_torque)

    @classmethod
    def failure(cls, reason: FailureReason, net_torque: Optional[int] = None) -> "ValidationResult":
        return cls(passed=False, failure_reason=reason, net_torque=net_torque)


def net_torque(layout: BalanceLayout, slot: Optional[int]) -> int:
    """Sum of weight x signed position over fixed weights and the placed movable weight."""
    total = sum(f.weight * layout.positions[f.slot_index] for f in layout.fixed)
    if slot is not None:
        total += layout.movable_weight * layout.positions[slot]
    return total


def validate_torque(level: Level, selection: SlotSelection) -> ValidationResult:
    layout = level.layout
    goal = level.target
    if not isinstance(layout, BalanceLayout) or not isinstance(goal, TorqueGoal):
        raise TypeError(f"{level.family.value} #{level.id} is not a torque level")
    if selection.slot is None:
        return ValidationResult.failure(FailureReason.EMPTY_SELECTION)

    net = net_torque(layout, selection.slot)
    if goal is TorqueGoal.BALANCED:
        passed = net == 0
    elif goal is TorqueGoal.TILT_RIGHT:
        passed = net > 0
    else:
        passed = net < 0
    if passed:
        return ValidationResult.success(net_torque=net)

    # Above the passing band means too much right-hand torque.
    if goal is TorqueGoal.TILT_RIGHT or (goal is TorqueGoal.BALANCED and net < 0):
        reason = FailureReason.INSUFFICIENT_MAGNITUDE
    else:
        reason = FailureReason.EXCESS_MAGNITUDE
    return ValidationResult.failure(reason, net_torque=net)


def validate_area_fraction(level: Level, selection: CellSelection) -> ValidationResult:
    layout = level.layout
    target = level.target
    if not isinstance(layout, GridLayout) or not isinstance(target, FractionTarget):
        raise TypeError(f"{level.family.value} #{level.id} is not an area-fraction level")
    total_parts = layout.total_parts
    selected = sum(1 for cell in selection.cells if 0 <= cell < total_parts)
    if selected == 0:
        return ValidationResult.failure(FailureReason.EMPTY_SELECTION)

    left = selected * target.den
    right = target.num * total_parts
    if left == right:
        return ValidationResult.success()
    if left < right:
        return ValidationResult.failure(FailureReason.INSUFFICIENT_MAGNITUDE)
    return ValidationResult.failure(FailureReason.EXCESS_MAGNITUDE)


def parse_entry(text: str) -> Optional[int]:
    try:
        return int(str(text).strip())
    except ValueError:
        return None


def validate_numeric_entry(level: Level, selection: NumericEntry) -> ValidationResult:
    target = level.target
    if not isinstance(target, FractionTarget):
        raise TypeError(f"{level.family.value} #{level.id} has no fraction target")
    num = parse_entry(selection.numerator)
    den = parse_entry(selection.denominator)
    if num is None or den is None:
        return ValidationResult.failure(FailureReason.EMPTY_SELECTION)
    if den != target.den:
        return ValidationResult.failure(FailureReason.WRONG_DENOMINATOR)
    if num != target.num:
        return ValidationResult.failure(FailureReason.WRONG_NUMERATOR)
    return ValidationResult.success()


def validate(level: Level, selection: Selection) -> ValidationResult:
    """Check *selection* against *level* using the family's rules."""
    kind = level.kind
    if kind is ValidatorKind.TORQUE and isinstance(selection, SlotSelection):
        return validate_torque(level, selection)
    if kind is ValidatorKind.AREA_FRACTION and isinstance(selection, CellSelection):
        return validate_area_fraction(level, selection)
    if kind is ValidatorKind.NUMERIC_ENTRY and isinstance(selection, NumericEntry):
        return validate_numeric_entry(level, selection)
    raise TypeError(
        f"{type(selection).__name__} cannot answer a {kind.value} level ({level.family.value} #{level.id})"
    )
