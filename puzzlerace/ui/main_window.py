from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSizePolicy,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from puzzlerace.core.engine import GameEngine
from puzzlerace.core.errors import PuzzleRaceError
from puzzlerace.core.notifications import Notification
from puzzlerace.core.session import Area, GamePhase
from puzzlerace.core.timer import format_time
from puzzlerace.ui.colors import GameColors
from puzzlerace.ui.message_overlay import MessageOverlay
from puzzlerace.ui.models import build_domain_summaries, group_mastered, step_card
from puzzlerace.ui.step_widgets import CountdownBar, StepListWidget

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


def _card() -> QFrame:
    card = QFrame()
    card.setObjectName("card")
    card.setStyleSheet(
        f"""
        QFrame#card {{
            background: {GameColors.CARD_BG};
            border: 2px solid {GameColors.CARD_BORDER};
            border-radius: 8px;
        }}
        """
    )
    return card


def _primary_button(text: str) -> QPushButton:
    btn = QPushButton(text)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(
        f"""
        QPushButton {{
            background: {GameColors.PRIMARY};
            color: white;
            padding: 10px 20px;
            border: none;
            border-radius: 6px;
            font-weight: 600;
            font-size: 14px;
        }}
        QPushButton:hover {{ background: {GameColors.PRIMARY_LIGHT}; }}
        QPushButton:disabled {{ background: #B0BEC5; }}
        """
    )
    return btn


def _secondary_button(text: str) -> QPushButton:
    btn = QPushButton(text)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(
        f"""
        QPushButton {{
            background: {GameColors.CARD_BG};
            color: {GameColors.TEXT_PRIMARY};
            padding: 10px 20px;
            border: 1px solid {GameColors.CARD_BORDER};
            border-radius: 6px;
            font-weight: 600;
            font-size: 14px;
        }}
        QPushButton:hover {{ border-color: {GameColors.PRIMARY}; color: {GameColors.PRIMARY}; }}
        """
    )
    return btn


class MainWindow(QMainWindow):
    """Menu, play and completion screens over a :class:`GameEngine`.

    The window owns the one-second ``QTimer`` that drives ``engine.tick()``
    and redraws everything from the engine after each command; it keeps no
    game state of its own.
    """

    def __init__(self, engine: GameEngine) -> None:
        super().__init__()
        self._engine = engine
        self._domain_buttons: Dict[str, QPushButton] = {}
        self._timed_puzzle_id: Optional[str] = None

        self._stack: Optional[QStackedWidget] = None
        self._menu_screen: Optional[QWidget] = None
        self._play_screen: Optional[QWidget] = None
        self._completed_screen: Optional[QWidget] = None
        self._overlay: Optional[MessageOverlay] = None

        self._domain_details: Optional[QLabel] = None
        self._score_label: Optional[QLabel] = None
        self._domain_label: Optional[QLabel] = None
        self._mastered_label: Optional[QLabel] = None
        self._level_label: Optional[QLabel] = None
        self._stages_label: Optional[QLabel] = None
        self._time_label: Optional[QLabel] = None
        self._countdown_bar: Optional[CountdownBar] = None
        self._question_label: Optional[QLabel] = None
        self._unarranged_list: Optional[StepListWidget] = None
        self._arranged_list: Optional[StepListWidget] = None
        self._submit_button: Optional[QPushButton] = None
        self._final_score_label: Optional[QLabel] = None
        self._final_total_label: Optional[QLabel] = None
        self._final_mastered_label: Optional[QLabel] = None

        self.setWindowTitle("Workflow Puzzle Race")
        self.setMinimumSize(1000, 700)
        self._build_ui()

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(TICK_INTERVAL_MS)
        self._tick_timer.timeout.connect(self._on_tick)

        self._unsubscribe = self._engine.subscribe(self._on_notification)
        self._refresh()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        root = QWidget()
        root.setStyleSheet(f"background: {GameColors.BG}; color: {GameColors.TEXT_PRIMARY};")
        root_layout = QVBoxLayout(root)
        root_layout.setContentsMargins(20, 20, 20, 20)

        self._stack = QStackedWidget()
        self._menu_screen = self._build_menu_screen()
        self._play_screen = self._build_play_screen()
        self._completed_screen = self._build_completed_screen()
        for screen in (self._menu_screen, self._play_screen, self._completed_screen):
            self._stack.addWidget(screen)
        root_layout.addWidget(self._stack)
        self.setCentralWidget(root)

        self._overlay = MessageOverlay(root)
        self._overlay.closed.connect(self._on_overlay_closed)

    def _build_menu_screen(self) -> QWidget:
        screen = QWidget()
        outer = QVBoxLayout(screen)
        outer.addStretch(1)

        card = _card()
        card.setMaximumWidth(760)
        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 28, 32, 28)
        layout.setSpacing(14)

        title = QLabel("Workflow Puzzle Race")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 28px; font-weight: 700;")
        layout.addWidget(title)

        subtitle = QLabel("Arrange the workflow steps in the correct order!")
        subtitle.setAlignment(Qt.AlignCenter)
        subtitle.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 15px;")
        layout.addWidget(subtitle)

        how_to = QLabel(
            "• Choose a domain and start the challenge.\n"
            "• Drag the shuffled steps into the ordered area (or double-click them).\n"
            "• When every step is placed, check your solution.\n"
            "• Complete the required stages to level up and win.\n"
            "• A wrong order or running out of time ends the game."
        )
        how_to.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 13px;")
        layout.addWidget(how_to)

        domain_row = QHBoxLayout()
        domain_row.setSpacing(8)
        for name in self._engine.catalog.domain_names():
            btn = _secondary_button(name)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked=False, n=name: self._select_domain(n))
            self._domain_buttons[name] = btn
            domain_row.addWidget(btn)
        layout.addLayout(domain_row)

        self._domain_details = QLabel("")
        self._domain_details.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 13px;")
        layout.addWidget(self._domain_details)

        start_btn = _primary_button("Start Game")
        start_btn.clicked.connect(self._start_game)
        layout.addWidget(start_btn, 0, Qt.AlignCenter)

        outer.addWidget(card, 0, Qt.AlignHCenter)
        outer.addStretch(1)
        return screen

    def _build_play_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setSpacing(12)

        header = _card()
        header_layout = QVBoxLayout(header)
        header_layout.setContentsMargins(16, 12, 16, 12)

        row1 = QHBoxLayout()
        self._score_label = QLabel("")
        self._domain_label = QLabel("")
        self._domain_label.setAlignment(Qt.AlignCenter)
        self._domain_label.setStyleSheet(f"color: {GameColors.PRIMARY}; font-size: 18px; font-weight: 700;")
        self._mastered_label = QLabel("")
        self._mastered_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        row1.addWidget(self._score_label, 1)
        row1.addWidget(self._domain_label, 2)
        row1.addWidget(self._mastered_label, 1)
        header_layout.addLayout(row1)

        row2 = QHBoxLayout()
        self._level_label = QLabel("")
        self._stages_label = QLabel("")
        self._stages_label.setAlignment(Qt.AlignCenter)
        timer_box = QVBoxLayout()
        self._time_label = QLabel("")
        self._time_label.setAlignment(Qt.AlignRight | Qt.AlignVCenter)
        self._time_label.setStyleSheet("font-size: 16px; font-weight: 700;")
        self._countdown_bar = CountdownBar()
        timer_box.addWidget(self._time_label)
        timer_box.addWidget(self._countdown_bar)
        row2.addWidget(self._level_label, 1)
        row2.addWidget(self._stages_label, 1)
        row2.addLayout(timer_box, 1)
        header_layout.addLayout(row2)
        layout.addWidget(header)

        self._question_label = QLabel("")
        self._question_label.setWordWrap(True)
        self._question_label.setAlignment(Qt.AlignCenter)
        self._question_label.setStyleSheet(
            f"background: #E6EEF5; color: {GameColors.PRIMARY}; font-size: 17px;"
            " font-weight: 600; padding: 12px; border-radius: 6px;"
        )
        layout.addWidget(self._question_label)

        areas = QHBoxLayout()
        areas.setSpacing(16)
        self._unarranged_list = StepListWidget(Area.UNARRANGED)
        self._arranged_list = StepListWidget(Area.ARRANGED)
        for caption, step_list in (
            ("Unordered Workflow", self._unarranged_list),
            ("Ordered Workflow", self._arranged_list),
        ):
            column = QVBoxLayout()
            label = QLabel(caption)
            label.setStyleSheet("font-size: 15px; font-weight: 700;")
            column.addWidget(label)
            step_list.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
            step_list.stepDropped.connect(self._move_step)
            step_list.stepActivated.connect(self._move_to_other_area)
            column.addWidget(step_list, 1)
            areas.addLayout(column, 1)
        layout.addLayout(areas, 1)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self._submit_button = _primary_button("Check Solution")
        self._submit_button.clicked.connect(self._submit_solution)
        buttons.addWidget(self._submit_button)
        reset_btn = _secondary_button("↻ Reset Game")
        reset_btn.clicked.connect(self._reset_game)
        buttons.addWidget(reset_btn)
        buttons.addStretch(1)
        layout.addLayout(buttons)
        return screen

    def _build_completed_screen(self) -> QWidget:
        screen = QWidget()
        outer = QVBoxLayout(screen)
        outer.addStretch(1)

        card = _card()
        card.setMaximumWidth(640)
        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 28, 32, 28)
        layout.setSpacing(12)

        title = QLabel("🏆 Game Over!")
        title.setAlignment(Qt.AlignCenter)
        title.setStyleSheet("font-size: 28px; font-weight: 700;")
        layout.addWidget(title)

        self._final_score_label = QLabel("")
        self._final_total_label = QLabel("")
        for label in (self._final_score_label, self._final_total_label):
            label.setAlignment(Qt.AlignCenter)
            label.setStyleSheet("font-size: 17px; font-weight: 600;")
            layout.addWidget(label)

        self._final_mastered_label = QLabel("")
        self._final_mastered_label.setWordWrap(True)
        self._final_mastered_label.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 13px;")
        layout.addWidget(self._final_mastered_label)

        again_btn = _primary_button("Play Again")
        again_btn.clicked.connect(self._play_again)
        layout.addWidget(again_btn, 0, Qt.AlignCenter)

        outer.addWidget(card, 0, Qt.AlignHCenter)
        outer.addStretch(1)
        return screen

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _select_domain(self, name: str) -> None:
        self._engine.select_domain(name)
        self._refresh()

    def _start_game(self) -> None:
        try:
            self._engine.start_game()
        except PuzzleRaceError as e:
            logger.error("Cannot start game: %s", e)
            self._domain_details.setText(f"<span style=\"color: {GameColors.DANGER}\">{e}</span>")
            return
        self._refresh()

    def _move_step(self, step_id: str, from_area: str, to_area: str) -> None:
        if self._engine.move_step(step_id, from_area, to_area):
            self._refresh()

    def _move_to_other_area(self, step_id: str, from_area: str) -> None:
        source = Area.parse(from_area)
        target = Area.ARRANGED if source is Area.UNARRANGED else Area.UNARRANGED
        self._move_step(step_id, source.value, target.value)

    def _submit_solution(self) -> None:
        self._engine.submit_solution()
        self._refresh()

    def _reset_game(self) -> None:
        self._engine.reset_game()
        if self._overlay is not None:
            self._overlay.dismiss()
        self._refresh()

    def _play_again(self) -> None:
        self._engine.return_to_menu()
        self._refresh()

    def _on_tick(self) -> None:
        self._engine.tick()
        self._refresh()

    def _on_notification(self, notification: Notification) -> None:
        logger.debug("Showing %s message", notification.kind.value)
        if self._overlay is not None:
            self._overlay.show_message(notification)

    def _on_overlay_closed(self) -> None:
        self._refresh()

    def _message_showing(self) -> bool:
        return self._overlay is not None and self._overlay.isVisible()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        view = self._engine.snapshot()
        if view.phase is GamePhase.PLAYING:
            puzzle = self._engine.current_puzzle
            puzzle_id = puzzle.id if puzzle is not None else None
            # The clock waits while a message covers the board, and each new puzzle
            # restarts the interval so its first second is a full one.
            if self._message_showing():
                self._tick_timer.stop()
            elif puzzle_id != self._timed_puzzle_id or not self._tick_timer.isActive():
                self._timed_puzzle_id = puzzle_id
                self._tick_timer.start()
            self._stack.setCurrentWidget(self._play_screen)
            self._render_play(view)
        else:
            self._tick_timer.stop()
            self._timed_puzzle_id = None
            if view.phase is GamePhase.COMPLETED:
                self._stack.setCurrentWidget(self._completed_screen)
                self._render_completed(view)
            else:
                self._stack.setCurrentWidget(self._menu_screen)
                self._render_menu()

    def _render_menu(self) -> None:
        selected = self._engine.selected_domain
        for name, btn in self._domain_buttons.items():
            btn.setChecked(name == selected)
        summary = next(
            (s for s in build_domain_summaries(self._engine.catalog, selected) if s.selected),
            None,
        )
        if summary is None:
            self._domain_details.setText("")
            return
        lines = [
            f"<b>Domain details for {summary.name}</b>",
            f"Total puzzles: <b>{summary.total_puzzles}</b>",
            f"Levels to win: <b>{summary.levels_to_win}</b>",
        ]
        lines += [f"Level {level}: complete {count} stage(s)" for level, count in summary.level_requirements]
        self._domain_details.setText("<br>".join(lines))

    def _render_play(self, view) -> None:
        self._score_label.setText(f"Score: <b>{view.score}</b>")
        self._domain_label.setText(f"{view.domain_name} Workflow")
        self._mastered_label.setText(
            f"Puzzles mastered: <b>{view.total_puzzles_completed} / {view.total_stages_to_win}</b>"
        )
        self._level_label.setText(f"Level: <b>{view.current_level} / {view.levels_to_win}</b>")
        self._stages_label.setText(
            f"Stages completed: <b>{view.completed_stage_count} / {view.required_stages}</b>"
        )
        self._time_label.setText(f"⏱ {format_time(view.time_remaining)}")
        self._countdown_bar.set_fraction(view.time_fraction)
        self._question_label.setText(view.current_question)

        unarranged_ids = [s.id for s in view.unarranged]
        arranged_ids = [s.id for s in view.arranged]
        if self._list_ids(self._unarranged_list) != unarranged_ids:
            self._unarranged_list.set_steps([step_card(s) for s in view.unarranged])
        if self._list_ids(self._arranged_list) != arranged_ids:
            self._arranged_list.set_steps([step_card(s) for s in view.arranged])
        self._submit_button.setEnabled(view.can_submit)

    def _render_completed(self, view) -> None:
        self._final_score_label.setText(f"Final Score: {view.score}")
        self._final_total_label.setText(f"Total Puzzles Mastered: {view.total_puzzles_completed}")
        grouped = group_mastered(view.domain_name, self._engine.mastered_puzzles())
        lines = ["<b>Workflows you mastered:</b>"]
        for domain, questions in grouped.items():
            lines.append(f"✔ <b>{domain}</b>")
            lines += [f"&nbsp;&nbsp;• {q}" for q in questions]
        self._final_mastered_label.setText("<br>".join(lines))

    @staticmethod
    def _list_ids(step_list: StepListWidget) -> list[str]:
        return [str(step_list.item(i).data(Qt.UserRole)) for i in range(step_list.count())]

    def closeEvent(self, event) -> None:
        self._tick_timer.stop()
        self._unsubscribe()
        super().closeEvent(event)
