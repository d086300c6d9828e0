"""Tests for puzzlepath.core.session – the play-flow state machine."""

from __future__ import annotations

from typing import Callable, List, Tuple

import pytest

from puzzlepath.core.attempt import NumericEntry
from puzzlepath.core.config import EngineConfig
from puzzlepath.core.levels import Family, LevelRepository
from puzzlepath.core.progress import MemoryProgressStore
from puzzlepath.core.session import GameSession, SessionSnapshot, SessionState
from puzzlepath.core.tutorial import CUT, PAINT, SMASH, TOUCH_WHOLE
from puzzlepath.core.validator import FailureReason


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

class CollectingScheduler:
    """Holds scheduled callbacks until the test fires them."""

    def __init__(self) -> None:
        self.calls: List[Tuple[int, Callable[[], None]]] = []

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.calls.append((delay_ms, callback))

    def fire(self) -> None:
        calls, self.calls = self.calls, []
        for _delay, callback in calls:
            callback()


@pytest.fixture(scope="module")
def repo() -> LevelRepository:
    return LevelRepository()


@pytest.fixture()
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture()
def scheduler() -> CollectingScheduler:
    return CollectingScheduler()


@pytest.fixture()
def snapshots() -> List[SessionSnapshot]:
    return []


@pytest.fixture()
def session(repo, store, scheduler, snapshots) -> GameSession:
    return GameSession(repo, store, config=EngineConfig(), schedule=scheduler, on_change=snapshots.append)


def _unlock(store: MemoryProgressStore, family: Family, index: int) -> None:
    for i in range(index):
        store.record_completion(family, i, 3)


def _check(session: GameSession, scheduler: CollectingScheduler) -> None:
    assert session.check_answer()
    assert session.state is SessionState.CHECKING
    scheduler.fire()


# ---------------------------------------------------------------------------
# Starting levels
# ---------------------------------------------------------------------------

class TestStartLevel:
    def test_initial_state(self, session: GameSession):
        assert session.state is SessionState.MENU
        assert session.attempt is None

    def test_first_level_always_playable(self, session: GameSession):
        assert session.start_level(Family.COLORING, 0)
        assert session.state is SessionState.PLAYING
        assert session.level.id == 1

    def test_locked_level_rejected(self, session: GameSession, snapshots):
        assert not session.start_level(Family.GARDEN, 2)
        assert session.state is SessionState.MENU
        assert snapshots == []

    def test_out_of_range_rejected(self, session: GameSession, store):
        _unlock(store, Family.GARDEN, 4)
        assert not session.start_level(Family.GARDEN, 4)
        assert not session.start_level(Family.GARDEN, -1)

    def test_unlocked_level(self, session: GameSession, store):
        _unlock(store, Family.SMASH, 3)
        assert session.start_level("smash", 3)
        assert session.level.name == "Long Strip"
        assert session.attempt.lives == 3

    def test_unlock_all(self, repo, store):
        session = GameSession(repo, store, config=EngineConfig(unlock_all=True))
        assert session.start_level(Family.SMASH, 6)

    def test_intro_text_message(self, session: GameSession, snapshots):
        session.start_level(Family.COLORING, 0)
        assert snapshots[-1].message.startswith("Click to color 1/2")
        assert snapshots[-1].level_index == 0

    def test_is_playable(self, session: GameSession, store):
        _unlock(store, Family.BALANCE, 1)
        assert session.is_playable(Family.BALANCE, 1)
        assert not session.is_playable(Family.BALANCE, 2)


# ---------------------------------------------------------------------------
# Checking answers
# ---------------------------------------------------------------------------

class TestCheckAnswer:
    @pytest.fixture(autouse=True)
    def _unlocked(self, store):
        _unlock(store, Family.COLORING, 1)
        _unlock(store, Family.GARDEN, 1)

    def test_clean_win_awards_three_stars(self, session, scheduler, store, snapshots):
        session.start_level(Family.COLORING, 0)
        session.toggle_cell(1)
        assert session.check_answer()
        assert scheduler.calls[0][0] == 600
        scheduler.fire()
        assert session.state is SessionState.WON
        assert snapshots[-1].stars_earned == 3
        assert snapshots[-1].message == "Perfect! That is exactly 1/2."
        assert store.load(Family.COLORING).stars_for(0) == 3

    def test_input_ignored_while_checking(self, session, scheduler):
        session.start_level(Family.COLORING, 1)
        session.toggle_cell(0)
        session.check_answer()
        assert not session.toggle_cell(1)
        assert not session.check_answer()
        assert not session.reset_attempt()
        assert not session.return_to_menu()
        assert not session.start_level(Family.COLORING, 0)
        assert session.attempt.selection.cells == {0}
        assert len(scheduler.calls) == 1

    def test_failed_check_counts_mistake(self, session, scheduler, snapshots):
        session.start_level(Family.COLORING, 1)  # 2/4
        session.toggle_cell(0)
        _check(session, scheduler)
        assert session.state is SessionState.PLAYING
        assert session.attempt.mistake_count == 1
        assert session.last_result.failure_reason is FailureReason.INSUFFICIENT_MAGNITUDE
        assert snapshots[-1].message == "Not quite! Color a few more parts."

    def test_selection_kept_after_failure(self, session, scheduler):
        session.start_level(Family.COLORING, 1)
        session.toggle_cell(3)
        _check(session, scheduler)
        assert session.attempt.selection.cells == {3}

    def test_stars_drop_with_mistakes(self, session, scheduler, store):
        session.start_level(Family.COLORING, 1)
        session.toggle_cell(0)
        _check(session, scheduler)
        session.toggle_cell(1)
        _check(session, scheduler)
        assert session.snapshot().stars_earned == 2
        assert store.load(Family.COLORING).stars_for(1) == 2

    def test_empty_selection_is_not_a_mistake(self, session, scheduler, snapshots):
        session.start_level(Family.GARDEN, 1)
        assert session.check_answer()
        assert session.state is SessionState.PLAYING
        assert scheduler.calls == []
        assert session.attempt.mistake_count == 0
        assert snapshots[-1].last_result.failure_reason is FailureReason.EMPTY_SELECTION
        assert "Nothing is watered yet" in snapshots[-1].message

    def test_resolve_without_pending_rejected(self, session):
        session.start_level(Family.COLORING, 0)
        assert not session.resolve_check()

    def test_resolve_runs_once(self, session, scheduler):
        session.start_level(Family.COLORING, 0)
        session.toggle_cell(0)
        session.check_answer()
        _delay, callback = scheduler.calls[0]
        callback()
        assert not session.resolve_check()
        assert session.state is SessionState.WON

    def test_manual_resolution_without_scheduler(self, repo, store):
        session = GameSession(repo, store)
        session.start_level(Family.COLORING, 0)
        session.toggle_cell(0)
        session.check_answer()
        assert session.state is SessionState.CHECKING
        assert session.resolve_check()
        assert session.state is SessionState.WON

    def test_configured_delay(self, repo, store, scheduler):
        session = GameSession(repo, store, config=EngineConfig(check_delay_ms=0), schedule=scheduler)
        session.start_level(Family.COLORING, 0)
        session.toggle_cell(0)
        session.check_answer()
        assert scheduler.calls[0][0] == 0

    def test_beam_solution(self, session, scheduler, store):
        _unlock(store, Family.BALANCE, 1)
        session.start_level(Family.BALANCE, 1)
        session.select_slot(2)
        _check(session, scheduler)
        assert session.state is SessionState.WON
        assert session.last_result.net_torque == 0

    def test_pivot_and_fixed_slots_cost_nothing(self, session, scheduler, store):
        _unlock(store, Family.BALANCE, 1)
        session.start_level(Family.BALANCE, 1)
        assert not session.select_slot(3)
        assert not session.select_slot(6)
        assert session.check_answer()
        assert scheduler.calls == []
        assert session.attempt.mistake_count == 0
        assert session.last_result.failure_reason is FailureReason.EMPTY_SELECTION

    def test_lifted_weight_is_empty(self, session, scheduler, store, snapshots):
        _unlock(store, Family.BALANCE, 1)
        session.start_level(Family.BALANCE, 1)
        assert session.select_slot(5)
        assert session.select_slot(5)
        assert snapshots[-1].selection.slot is None
        session.check_answer()
        assert session.state is SessionState.PLAYING
        assert session.attempt.mistake_count == 0


# ---------------------------------------------------------------------------
# Lives
# ---------------------------------------------------------------------------

class TestLives:
    @pytest.fixture()
    def chocolate(self, session, store) -> GameSession:
        _unlock(store, Family.SMASH, 4)
        session.start_level(Family.SMASH, 4)  # 5/8
        session.tutorial_action(SMASH)
        return session

    def test_wrong_denominator_costs_a_heart(self, chocolate, scheduler, snapshots):
        chocolate.set_entry("5", "4")
        _check(chocolate, scheduler)
        assert chocolate.state is SessionState.PLAYING
        assert chocolate.attempt.lives == 2
        assert snapshots[-1].lives == 2
        assert snapshots[-1].last_result.failure_reason is FailureReason.WRONG_DENOMINATOR

    def test_out_of_lives(self, chocolate, scheduler, store):
        for _ in range(3):
            chocolate.set_entry("1", "8")
            _check(chocolate, scheduler)
        assert chocolate.state is SessionState.LOST
        assert chocolate.snapshot().message == "Out of hearts! Try the level again."
        assert not chocolate.set_entry("5", "8")
        assert not chocolate.check_answer()
        assert store.load(Family.SMASH).stars_for(4) == 0

    def test_retry_after_loss(self, chocolate, scheduler):
        for _ in range(3):
            chocolate.set_entry("1", "8")
            _check(chocolate, scheduler)
        assert chocolate.reset_attempt()
        assert chocolate.state is SessionState.INTRO
        assert chocolate.tutorial_action(SMASH)
        assert chocolate.state is SessionState.PLAYING
        assert chocolate.attempt.lives == 3
        assert chocolate.attempt.mistake_count == 0
        assert chocolate.attempt.selection == NumericEntry()

    def test_configured_lives(self, repo, store, scheduler):
        _unlock(store, Family.SMASH, 1)
        session = GameSession(repo, store, config=EngineConfig(lives=1), schedule=scheduler)
        session.start_level(Family.SMASH, 1)
        session.tutorial_action(SMASH)
        session.set_entry("1", "4")
        _check(session, scheduler)
        assert session.state is SessionState.LOST

    def test_set_entry_rejected_on_grid(self, session):
        session.start_level(Family.COLORING, 0)
        assert not session.set_entry("1", "2")


# ---------------------------------------------------------------------------
# Guided intro
# ---------------------------------------------------------------------------

class TestTutorial:
    def test_balance_intro_gates_slots(self, session, snapshots):
        session.start_level(Family.BALANCE, 0)
        assert session.state is SessionState.INTRO
        assert snapshots[-1].message.startswith("Tap the spot at the far right end.")
        assert not session.select_slot(3)
        assert session.attempt.selection.slot is None
        assert session.select_slot(6)
        assert session.attempt.selection.slot == 6
        assert session.state is SessionState.INTRO
        assert session.select_slot(0)
        assert session.state is SessionState.PLAYING
        assert snapshots[-1].message == session.level.intro_text

    def test_check_not_allowed_during_intro(self, session):
        session.start_level(Family.BALANCE, 0)
        assert not session.check_answer()

    def test_garden_intro_toggles_twice(self, session):
        session.start_level(Family.GARDEN, 0)
        assert not session.toggle_cell(1)
        assert session.toggle_cell(0)
        assert session.attempt.selection.cells == {0}
        assert session.toggle_cell(0)
        assert session.attempt.selection.cells == set()
        assert session.state is SessionState.PLAYING

    def test_smash_intro_actions(self, session):
        session.start_level(Family.SMASH, 0)
        assert session.state is SessionState.INTRO
        assert not session.set_entry("1", "2")
        assert not session.tutorial_action(CUT)
        assert session.tutorial_action(TOUCH_WHOLE)
        assert session.tutorial_action(CUT)
        assert not session.tutorial_action(PAINT, 1)
        assert session.tutorial_action(PAINT, 0)
        assert session.state is SessionState.INTRO
        assert not session.set_entry("1", "2")
        assert session.tutorial_action(SMASH)
        assert session.state is SessionState.PLAYING
        assert session.set_entry("1", "2")

    def test_every_smash_level_is_smashed_first(self, repo, store, scheduler):
        session = GameSession(repo, store, config=EngineConfig(unlock_all=True), schedule=scheduler)
        for index in range(1, repo.count(Family.SMASH)):
            session.start_level(Family.SMASH, index)
            assert session.state is SessionState.INTRO
            assert not session.set_entry("1", "2")
            assert session.tutorial_action(SMASH)
            assert session.state is SessionState.PLAYING
            assert session.set_entry("1", "2")

    def test_tutorial_action_outside_intro(self, session):
        session.start_level(Family.COLORING, 0)
        assert not session.tutorial_action(TOUCH_WHOLE)

    def test_reset_restarts_intro(self, session):
        session.start_level(Family.GARDEN, 0)
        session.toggle_cell(0)
        assert session.reset_attempt()
        assert session.state is SessionState.INTRO
        assert session.attempt.tutorial.index == 0

    def test_replay_of_first_level_repeats_intro(self, session, store):
        _unlock(store, Family.GARDEN, 2)
        session.start_level(Family.GARDEN, 0)
        assert session.state is SessionState.INTRO


# ---------------------------------------------------------------------------
# Advancing and leaving
# ---------------------------------------------------------------------------

class TestNavigation:
    def _win_coloring(self, session, scheduler, index: int, cells) -> None:
        session.start_level(Family.COLORING, index)
        for cell in cells:
            session.toggle_cell(cell)
        _check(session, scheduler)
        assert session.state is SessionState.WON

    def test_advance_opens_next_level(self, session, scheduler):
        self._win_coloring(session, scheduler, 0, [0])
        assert session.advance_to_next()
        assert session.level_index == 1
        assert session.state is SessionState.PLAYING
        assert session.attempt.mistake_count == 0

    def test_advance_only_after_win(self, session):
        session.start_level(Family.COLORING, 0)
        assert not session.advance_to_next()

    def test_last_level_returns_to_menu(self, session, scheduler, store, snapshots):
        _unlock(store, Family.COLORING, 4)
        self._win_coloring(session, scheduler, 4, [0, 1, 2, 3])
        assert snapshots[-1].is_last_level
        assert session.advance_to_next()
        assert session.state is SessionState.MENU
        assert snapshots[-1].progress.unlocked_level_index == 5

    def test_reset_after_win(self, session, scheduler, store):
        self._win_coloring(session, scheduler, 0, [0])
        assert session.reset_attempt()
        assert session.state is SessionState.PLAYING
        assert store.load(Family.COLORING).stars_for(0) == 3

    def test_return_to_menu(self, session, snapshots):
        session.start_level(Family.SMASH, 0)
        assert session.return_to_menu()
        assert session.state is SessionState.MENU
        assert session.attempt is None
        assert snapshots[-1].family is Family.SMASH
        assert snapshots[-1].level is None

    def test_reset_in_menu_rejected(self, session):
        assert not session.reset_attempt()

    def test_progress_reflects_store(self, session, scheduler):
        self._win_coloring(session, scheduler, 0, [1])
        assert session.progress(Family.COLORING).unlocked_level_index == 1

    def test_snapshot_selection_is_a_copy(self, session, snapshots):
        session.start_level(Family.COLORING, 0)
        session.toggle_cell(0)
        first = snapshots[-1]
        session.toggle_cell(1)
        assert first.selection.cells == {0}
