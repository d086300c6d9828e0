"""Feedback text shown after a check."""

from __future__ import annotations

from puzzlepath.core.levels import Family, FractionTarget, Level, TorqueGoal
from puzzlepath.core.validator import FailureReason, ValidationResult

_AREA_HINTS = {
    Family.GARDEN: {
        FailureReason.EMPTY_SELECTION: "Nothing is watered yet. Tap some squares to water the garden.",
        FailureReason.INSUFFICIENT_MAGNITUDE: "Too little water! You need a bigger part of the garden watered.",
        FailureReason.EXCESS_MAGNITUDE: (
            "Too much water! You watered more than the target fraction. Turn some off."
        ),
    },
    Family.COLORING: {
        FailureReason.EMPTY_SELECTION: "Nothing is colored yet. Click the parts to color them.",
        FailureReason.INSUFFICIENT_MAGNITUDE: "Not quite! Color a few more parts.",
        FailureReason.EXCESS_MAGNITUDE: "Too many parts colored. Click one again to clear it.",
    },
}

_ENTRY_HINTS = {
    FailureReason.EMPTY_SELECTION: "Type a number on the top and on the bottom.",
    FailureReason.WRONG_DENOMINATOR: "Count ALL the pieces for the bottom number.",
    FailureReason.WRONG_NUMERATOR: "Only count the colored pieces for the top number.",
}


def _torque_hint(goal: TorqueGoal, net: int) -> str:
    if goal is TorqueGoal.BALANCED:
        if net > 0:
            return "Right side is stronger. Move the blue weight closer to the left or farther from the pivot."
        if net < 0:
            return "Left side is stronger. Move the blue weight closer to the right or nearer the pivot."
        return "Almost there, try adjusting one more step."
    if goal is TorqueGoal.TILT_RIGHT:
        if net < 0:
            return "The left side is winning. Put the blue weight on the right or farther from the pivot."
        return "Not enough right-side strength yet. Try a position farther to the right."
    if net > 0:
        return "The right side is winning. Put the blue weight on the left or farther from the pivot."
    return "You need more power on the left. Try a position farther to the left."


def hint_for(level: Level, result: ValidationResult) -> str:
    """Message for the learner after *result* was produced on *level*."""
    if result.passed:
        if isinstance(level.target, FractionTarget):
            return f"Perfect! That is exactly {level.target}."
        return "Perfect! The beam does exactly what you wanted."

    if level.family is Family.BALANCE:
        if result.failure_reason is FailureReason.EMPTY_SELECTION:
            return "Tap a spot on the beam to place the blue weight."
        if not isinstance(level.target, TorqueGoal):
            raise TypeError(f"balance #{level.id} has no torque goal")
        return _torque_hint(level.target, result.net_torque or 0)

    if level.family is Family.SMASH:
        return _ENTRY_HINTS.get(result.failure_reason, "Not quite. Count slowly and try again.")

    hints = _AREA_HINTS.get(level.family, {})
    return hints.get(result.failure_reason, "Not quite. Try again!")
