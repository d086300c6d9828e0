from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from puzzlepath.core.attempt import AttemptState, CellSelection, NumericEntry, SlotSelection
from puzzlepath.core.config import EngineConfig
from puzzlepath.core.levels import BalanceLayout, Family, FractionTarget, GridLayout, LevelRepository
from puzzlepath.core.progress import ProgressStore
from puzzlepath.core.session import GameSession, SessionSnapshot, SessionState
from puzzlepath.core.tutorial import CUT, PAINT, SELECT_SLOT, SMASH, TOGGLE_CELL, TOUCH_WHOLE
from puzzlepath.ui.colors import FAMILY_COLORS, FAMILY_TITLES, HomeColors, star_text
from puzzlepath.ui.level_cards import LevelMapWidget
from puzzlepath.ui.models import build_level_states
from puzzlepath.ui.puzzle_widgets import BeamWidget, CellGridWidget, FractionEntryWidget

logger = logging.getLogger(__name__)

_INTRO_BUTTON_TEXT = {
    TOUCH_WHOLE: "Touch the block",
    CUT: "✂ Cut",
    PAINT: "🎨 Paint",
    SMASH: "💥 Smash it!",
}


def _button(text: str, primary: bool = False) -> QPushButton:
    btn = QPushButton(text)
    btn.setCursor(Qt.PointingHandCursor)
    bg = HomeColors.PRIMARY if primary else "#ffffff"
    fg = "#ffffff" if primary else HomeColors.TEXT_PRIMARY
    btn.setStyleSheet(
        f"""
        QPushButton {{
            background: {bg};
            color: {fg};
            padding: 10px 18px;
            border: 1px solid #e2e8f0;
            border-radius: 12px;
            font-weight: 800;
            font-size: 14px;
        }}
        QPushButton:disabled {{
            background: #e2e8f0;
            color: {HomeColors.TEXT_MUTED};
        }}
        """
    )
    return btn


class MainWindow(QMainWindow):
    """Home screen with one level map per game, and a play screen driven by GameSession."""

    def __init__(
        self,
        levels: LevelRepository,
        progress_store: ProgressStore,
        config: Optional[EngineConfig] = None,
    ) -> None:
        super().__init__()
        self._levels_repo = levels
        self._progress_store = progress_store
        self._config = config or EngineConfig()
        self._family: Family = levels.families()[0]
        self._rendered_attempt: Optional[AttemptState] = None

        self._session = GameSession(
            levels,
            progress_store,
            config=self._config,
            schedule=lambda delay_ms, callback: QTimer.singleShot(delay_ms, callback),
            on_change=self._render,
        )

        self.setWindowTitle("Puzzle Path")
        self._build_ui()
        self._refresh_levels_list()

    # ---- layout ----

    def _build_ui(self) -> None:
        self._stack = QStackedWidget()
        self._home_screen = self._build_home_screen()
        self._play_screen = self._build_play_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._play_screen)
        self.setCentralWidget(self._stack)
        self.setStyleSheet(
            f"QMainWindow {{ background: qlineargradient(x1:0, y1:0, x2:0, y2:1,"
            f" stop:0 {HomeColors.BG_TOP}, stop:1 {HomeColors.BG_BOTTOM}); }}"
        )

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(14)

        tabs = QHBoxLayout()
        self._family_buttons: dict[Family, QPushButton] = {}
        for family in self._levels_repo.families():
            btn = _button(FAMILY_TITLES[family])
            btn.clicked.connect(lambda _=False, f=family: self._show_family(f))
            tabs.addWidget(btn)
            self._family_buttons[family] = btn
        tabs.addStretch(1)
        layout.addLayout(tabs)

        header = QHBoxLayout()
        self._home_title = QLabel("")
        self._home_title.setStyleSheet(f"font-size: 24px; font-weight: 900; color: {HomeColors.TEXT_PRIMARY};")
        self._stars_summary = QLabel("")
        self._stars_summary.setStyleSheet(f"font-size: 16px; font-weight: 800; color: {HomeColors.STAR};")
        reset_btn = _button("Reset progress")
        reset_btn.clicked.connect(self._reset_progress)
        header.addWidget(self._home_title)
        header.addStretch(1)
        header.addWidget(self._stars_summary)
        header.addWidget(reset_btn)
        layout.addLayout(header)

        self._level_map = LevelMapWidget(
            base_color=FAMILY_COLORS[self._family],
            on_level_clicked=self._start_level,
        )
        layout.addWidget(self._level_map, 1)
        return screen

    def _build_play_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setSpacing(14)

        top = QHBoxLayout()
        menu_btn = _button("← Levels")
        menu_btn.clicked.connect(lambda: self._session.return_to_menu())
        self._play_title = QLabel("")
        self._play_title.setStyleSheet(f"font-size: 20px; font-weight: 900; color: {HomeColors.TEXT_PRIMARY};")
        self._hearts_label = QLabel("")
        self._hearts_label.setStyleSheet(f"font-size: 20px; color: {HomeColors.HEART};")
        top.addWidget(menu_btn)
        top.addWidget(self._play_title, 1)
        top.addWidget(self._hearts_label)
        layout.addLayout(top)

        self._message_label = QLabel("")
        self._message_label.setWordWrap(True)
        self._message_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self._message_label)

        self._puzzle_stack = QStackedWidget()
        self._beam = BeamWidget(on_slot_clicked=self._session.select_slot)
        self._cells = CellGridWidget(on_cell_clicked=self._session.toggle_cell)

        smash_page = QWidget()
        smash_layout = QHBoxLayout(smash_page)
        self._smash_preview = CellGridWidget()
        self._entry = FractionEntryWidget(
            on_changed=lambda num, den: self._session.set_entry(numerator=num, denominator=den)
        )
        smash_layout.addWidget(self._smash_preview, 2)
        smash_layout.addWidget(self._entry, 1)

        self._puzzle_stack.addWidget(self._beam)
        self._puzzle_stack.addWidget(self._cells)
        self._puzzle_stack.addWidget(smash_page)
        self._smash_page = smash_page
        layout.addWidget(self._puzzle_stack, 1)

        buttons = QHBoxLayout()
        self._intro_btn = _button("", primary=True)
        self._intro_btn.clicked.connect(self._on_intro_button)
        self._check_btn = _button("Check", primary=True)
        self._check_btn.clicked.connect(lambda: self._session.check_answer())
        self._reset_btn = _button("↺ Reset")
        self._reset_btn.clicked.connect(lambda: self._session.reset_attempt())
        self._next_btn = _button("Next →", primary=True)
        self._next_btn.clicked.connect(lambda: self._session.advance_to_next())
        buttons.addStretch(1)
        for btn in (self._intro_btn, self._check_btn, self._reset_btn, self._next_btn):
            buttons.addWidget(btn)
        buttons.addStretch(1)
        layout.addLayout(buttons)
        return screen

    # ---- home ----

    def _show_family(self, family: Family) -> None:
        self._family = family
        self._refresh_levels_list()

    def _refresh_levels_list(self) -> None:
        """Rebuild the level map for the selected game from stored progress."""
        family = self._family
        record = self._progress_store.load(family)
        levels = self._levels_repo.all(family)
        states = build_level_states(levels, record, unlock_all=self._config.unlock_all)

        self._home_title.setText(FAMILY_TITLES[family])
        self._stars_summary.setText(f"★ {record.total_stars} / {len(levels) * 3}")
        for f, btn in self._family_buttons.items():
            btn.setEnabled(f is not family)
        self._level_map.set_base_color(FAMILY_COLORS[family])
        self._level_map.set_level_states(states)
        self._stack.setCurrentWidget(self._home_screen)

    def _start_level(self, level_index: int) -> None:
        self._session.start_level(self._family, level_index)

    def _reset_progress(self) -> None:
        answer = QMessageBox.question(
            self,
            "Reset progress",
            f"Clear all stars and unlocked levels for {FAMILY_TITLES[self._family]}?",
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._progress_store.reset(self._family)
            self._refresh_levels_list()

    # ---- play ----

    def _on_intro_button(self) -> None:
        attempt = self._session.attempt
        step = attempt.tutorial.current_step() if attempt and attempt.tutorial else None
        if step is not None:
            self._session.tutorial_action(step.action, step.target)

    def _render(self, snap: SessionSnapshot) -> None:
        if snap.state is SessionState.MENU or snap.level is None:
            self._rendered_attempt = None
            if snap.family is not None:
                self._family = snap.family
            self._refresh_levels_list()
            return

        level = snap.level
        attempt = self._session.attempt
        # A new attempt object means start, reset or advance: rebuild the play area.
        if attempt is not self._rendered_attempt:
            self._load_level_view(snap)
        self._rendered_attempt = attempt

        total = self._levels_repo.count(level.family)
        self._play_title.setText(f"Level {level.id} / {total}: {level.name}")
        self._hearts_label.setText("♥" * (snap.lives or 0) if snap.lives is not None else "")

        busy = snap.state is SessionState.CHECKING
        playing = snap.state is SessionState.PLAYING
        step = None
        if snap.state is SessionState.INTRO and attempt is not None and attempt.tutorial is not None:
            step = attempt.tutorial.current_step()

        self._render_selection(snap, step)
        self._render_message(snap)

        self._intro_btn.setVisible(step is not None and step.action in _INTRO_BUTTON_TEXT)
        if step is not None and step.action in _INTRO_BUTTON_TEXT:
            self._intro_btn.setText(_INTRO_BUTTON_TEXT[step.action])
        self._check_btn.setVisible(snap.state not in (SessionState.WON, SessionState.LOST))
        self._check_btn.setEnabled(playing)
        self._check_btn.setText("Checking…" if busy else "Check")
        self._reset_btn.setEnabled(not busy)
        self._reset_btn.setText("Try again" if snap.state is SessionState.LOST else "↺ Reset")
        self._next_btn.setVisible(snap.state is SessionState.WON)
        self._next_btn.setText("Finish" if snap.is_last_level else "Next →")
        self._entry.set_input_enabled(playing)
        self._stack.setCurrentWidget(self._play_screen)

    def _load_level_view(self, snap: SessionSnapshot) -> None:
        level = snap.level
        if level is None:
            return
        color = FAMILY_COLORS[level.family]
        if isinstance(level.layout, BalanceLayout):
            self._beam.set_beam(level.layout)
            self._puzzle_stack.setCurrentWidget(self._beam)
        elif not isinstance(level.layout, GridLayout):
            return
        elif level.family is Family.SMASH and isinstance(level.target, FractionTarget):
            self._smash_preview.set_grid(level.layout.rows, level.layout.cols, color)
            self._smash_preview.set_filled(range(level.target.num))
            self._entry.clear()
            self._puzzle_stack.setCurrentWidget(self._smash_page)
        else:
            self._cells.set_grid(level.layout.rows, level.layout.cols, color)
            self._puzzle_stack.setCurrentWidget(self._cells)

    def _render_selection(self, snap: SessionSnapshot, step) -> None:
        selection = snap.selection
        if isinstance(selection, SlotSelection):
            self._beam.set_selected(selection.slot)
            self._beam.set_highlight(step.target if step is not None and step.action == SELECT_SLOT else None)
        elif isinstance(selection, CellSelection):
            highlight = step.target if step is not None and step.action == TOGGLE_CELL else None
            self._cells.set_filled(selection.cells, highlight=highlight)
        elif isinstance(selection, NumericEntry):
            if step is not None and step.action == PAINT:
                self._smash_preview.set_filled((), highlight=step.target)
            elif snap.state is not SessionState.INTRO and snap.level is not None:
                target = snap.level.target
                if isinstance(target, FractionTarget):
                    self._smash_preview.set_filled(range(target.num))

    def _render_message(self, snap: SessionSnapshot) -> None:
        color = HomeColors.TEXT_SECONDARY
        text = snap.message
        if snap.state is SessionState.CHECKING:
            text = "Checking…"
        elif snap.state is SessionState.WON:
            color = HomeColors.SUCCESS
            text = f"{snap.message}\n{star_text(snap.stars_earned or 0)}"
        elif snap.last_result is not None and not snap.last_result.passed:
            color = HomeColors.ERROR
        self._message_label.setText(text)
        self._message_label.setStyleSheet(f"font-size: 16px; font-weight: 700; color: {color};")

    def closeEvent(self, event: QCloseEvent) -> None:
        """Leaving mid-attempt discards it; only completed levels were ever saved."""
        if self._session.state is not SessionState.MENU:
            logger.info("Closing with an unfinished %s attempt", self._session.state.value)
        super().closeEvent(event)
