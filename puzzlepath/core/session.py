from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from puzzlepath.core.attempt import AttemptState, Selection, copy_selection
from puzzlepath.core.config import EngineConfig
from puzzlepath.core.hints import hint_for
from puzzlepath.core.levels import Family, Level, LevelRepository
from puzzlepath.core.progress import ProgressRecord, ProgressStore
from puzzlepath.core.scoring import stars
from puzzlepath.core.tutorial import (
    CUT,
    PAINT,
    SELECT_SLOT,
    SMASH,
    TOGGLE_CELL,
    TOUCH_WHOLE,
    TutorialProgress,
)
from puzzlepath.core.validator import FailureReason, ValidationResult, validate

logger = logging.getLogger(__name__)

Scheduler = Callable[[int, Callable[[], None]], None]

_INTRO_ONLY_ACTIONS = (TOUCH_WHOLE, CUT, PAINT, SMASH)


class SessionState(str, Enum):
    MENU = "menu"
    INTRO = "intro"
    PLAYING = "playing"
    CHECKING = "checking"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view handed to the UI after every accepted action."""

    state: SessionState
    family: Optional[Family]
    level_index: Optional[int]
    level: Optional[Level]
    selection: Optional[Selection]
    mistake_count: int
    lives: Optional[int]
    last_result: Optional[ValidationResult]
    stars_earned: Optional[int]
    message: str
    progress: Optional[ProgressRecord]
    is_last_level: bool = False


class GameSession:
    """One learner's path through a family: menu, intro, play, check, win/lose, advance.

    Every action returns True when accepted. Rejected actions (a locked level,
    input while a check is pending, wrong action for the state) are no-ops.

    The pause between a check and its outcome is driven from outside: pass a
    ``schedule(delay_ms, callback)`` callable (the UI uses ``QTimer.singleShot``)
    or call :meth:`resolve_check` yourself.
    """

    def __init__(
        self,
        levels: LevelRepository,
        progress_store: ProgressStore,
        config: Optional[EngineConfig] = None,
        schedule: Optional[Scheduler] = None,
        on_change: Optional[Callable[[SessionSnapshot], None]] = None,
    ) -> None:
        self._levels = levels
        self._store = progress_store
        self._config = config or EngineConfig()
        self._schedule = schedule
        self._on_change = on_change

        self._state = SessionState.MENU
        self._family: Optional[Family] = None
        self._level_index: Optional[int] = None
        self._attempt: Optional[AttemptState] = None
        self._progress: Optional[ProgressRecord] = None
        self._last_result: Optional[ValidationResult] = None
        self._pending: Optional[ValidationResult] = None
        self._stars_earned: Optional[int] = None
        self._message = ""

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def family(self) -> Optional[Family]:
        return self._family

    @property
    def level_index(self) -> Optional[int]:
        return self._level_index

    @property
    def level(self) -> Optional[Level]:
        return self._attempt.level if self._attempt is not None else None

    @property
    def attempt(self) -> Optional[AttemptState]:
        return self._attempt

    @property
    def last_result(self) -> Optional[ValidationResult]:
        return self._last_result

    def progress(self, family: Union[Family, str]) -> ProgressRecord:
        return self._store.load(family)

    def is_playable(self, family: Union[Family, str], level_index: int) -> bool:
        if not 0 <= level_index < self._levels.count(family):
            return False
        return self._config.unlock_all or self._store.load(family).is_unlocked(level_index)

    # ---- inbound actions ----

    def start_level(self, family: Union[Family, str], level_index: int) -> bool:
        if self._state is SessionState.CHECKING:
            return self._reject("start_level")
        family = Family(family)
        if not self.is_playable(family, level_index):
            return self._reject("start_level", f"{family.value} #{level_index} is locked")
        self._begin(family, level_index)
        return True

    def select_slot(self, slot: int) -> bool:
        return self._mutate(SELECT_SLOT, slot, lambda attempt: attempt.select_slot(slot))

    def toggle_cell(self, index: int) -> bool:
        return self._mutate(TOGGLE_CELL, index, lambda attempt: attempt.toggle_cell(index))

    def set_entry(self, numerator: Optional[str] = None, denominator: Optional[str] = None) -> bool:
        if self._state is not SessionState.PLAYING or self._attempt is None:
            return self._reject("set_entry")
        if not self._attempt.set_entry(numerator=numerator, denominator=denominator):
            return self._reject("set_entry", "level does not take typed answers")
        self._notify()
        return True

    def tutorial_action(self, action: str, target: Optional[int] = None) -> bool:
        """Intro-only actions that do not change the answer (touch, cut, paint, smash)."""
        attempt = self._attempt
        if (
            self._state is not SessionState.INTRO
            or attempt is None
            or attempt.tutorial is None
            or action not in _INTRO_ONLY_ACTIONS
            or not attempt.tutorial.advance(action, target)
        ):
            return self._reject(action)
        self._after_tutorial_step(attempt, attempt.tutorial)
        self._notify()
        return True

    def check_answer(self) -> bool:
        attempt = self._attempt
        if self._state is not SessionState.PLAYING or attempt is None:
            return self._reject("check_answer")

        result = validate(attempt.level, attempt.selection)
        self._last_result = result
        if result.failure_reason is FailureReason.EMPTY_SELECTION:
            # Not a scored mistake; just prompt for an answer.
            self._message = hint_for(attempt.level, result)
            self._notify()
            return True

        self._pending = result
        self._state = SessionState.CHECKING
        self._notify()
        if self._schedule is not None:
            self._schedule(self._config.check_delay_ms, self.resolve_check)
        return True

    def resolve_check(self) -> bool:
        """Apply the pending check result. Runs once per check."""
        attempt = self._attempt
        result = self._pending
        family = self._family
        level_index = self._level_index
        if (
            self._state is not SessionState.CHECKING
            or attempt is None
            or result is None
            or family is None
            or level_index is None
        ):
            return self._reject("resolve_check")
        self._pending = None

        self._message = hint_for(attempt.level, result)
        if result.passed:
            earned = stars(attempt.mistake_count)
            self._stars_earned = earned
            self._progress = self._store.record_completion(family, level_index, earned)
            self._state = SessionState.WON
        else:
            attempt.record_mistake()
            if attempt.out_of_lives:
                self._state = SessionState.LOST
                self._message = "Out of hearts! Try the level again."
            else:
                self._state = SessionState.PLAYING
        logger.debug(
            "%s #%d check -> %s (%s)",
            family.value,
            level_index + 1,
            self._state.value,
            result.failure_reason.value,
        )
        self._notify()
        return True

    def reset_attempt(self) -> bool:
        resettable = (SessionState.INTRO, SessionState.PLAYING, SessionState.WON, SessionState.LOST)
        if self._state not in resettable or self._family is None or self._level_index is None:
            return self._reject("reset_attempt")
        self._begin(self._family, self._level_index)
        return True

    def advance_to_next(self) -> bool:
        if self._state is not SessionState.WON or self._family is None or self._level_index is None:
            return self._reject("advance_to_next")
        next_index = self._level_index + 1
        if next_index < self._levels.count(self._family):
            self._begin(self._family, next_index)
        else:
            self._enter_menu()
        return True

    def return_to_menu(self) -> bool:
        if self._state is SessionState.CHECKING:
            return self._reject("return_to_menu")
        self._enter_menu()
        return True

    # ---- outbound state ----

    def snapshot(self) -> SessionSnapshot:
        attempt = self._attempt
        is_last = (
            self._family is not None
            and self._level_index is not None
            and self._level_index == self._levels.count(self._family) - 1
        )
        return SessionSnapshot(
            state=self._state,
            family=self._family,
            level_index=self._level_index,
            level=attempt.level if attempt else None,
            selection=copy_selection(attempt.selection) if attempt else None,
            mistake_count=attempt.mistake_count if attempt else 0,
            lives=attempt.lives if attempt else None,
            last_result=self._last_result,
            stars_earned=self._stars_earned,
            message=self._message,
            progress=self._progress,
            is_last_level=is_last,
        )

    # ---- internals ----

    def _begin(self, family: Family, level_index: int) -> None:
        level = self._levels.get(family, level_index)
        self._family = family
        self._level_index = level_index
        self._attempt = AttemptState(level, lives=self._config.lives)
        self._progress = self._store.load(family)
        self._last_result = None
        self._pending = None
        self._stars_earned = None
        if self._attempt.in_tutorial:
            self._state = SessionState.INTRO
            self._message = self._attempt.tutorial.message if self._attempt.tutorial else ""
        else:
            self._state = SessionState.PLAYING
            self._message = level.intro_text
        logger.info("Started %s level %d (%s)", family.value, level.id, level.name)
        self._notify()

    def _enter_menu(self) -> None:
        self._state = SessionState.MENU
        self._attempt = None
        self._level_index = None
        self._last_result = None
        self._pending = None
        self._stars_earned = None
        self._message = ""
        if self._family is not None:
            self._progress = self._store.load(self._family)
        self._notify()

    def _mutate(self, action: str, target: int, apply: Callable[[AttemptState], bool]) -> bool:
        attempt = self._attempt
        if attempt is None:
            return self._reject(action)
        tutorial = attempt.tutorial
        if self._state is SessionState.PLAYING:
            if not apply(attempt):
                return self._reject(action, f"target {target} not valid here")
        elif (
            self._state is SessionState.INTRO
            and tutorial is not None
            and tutorial.permits(action, target)
        ):
            if not apply(attempt):
                return self._reject(action, f"target {target} not valid here")
            tutorial.advance(action, target)
            self._after_tutorial_step(attempt, tutorial)
        else:
            return self._reject(action)
        self._notify()
        return True

    def _after_tutorial_step(self, attempt: AttemptState, tutorial: TutorialProgress) -> None:
        if tutorial.complete:
            self._state = SessionState.PLAYING
            self._message = attempt.level.intro_text
        else:
            self._message = tutorial.message

    def _reject(self, action: str, reason: str = "") -> bool:
        logger.debug("Ignoring %s in state %s %s", action, self._state.value, reason)
        return False

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())
