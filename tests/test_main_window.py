"""Tests for puzzlerace.ui.main_window – tick timer and message overlay interplay."""

from __future__ import annotations

import os
import random

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication

from puzzlerace.core.engine import GameEngine
from puzzlerace.core.notifications import NotificationKind
from puzzlerace.core.session import GamePhase
from puzzlerace.ui.main_window import MainWindow


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    return QApplication.instance() or QApplication([])


@pytest.fixture()
def window(qapp: QApplication, make_catalog):
    engine = GameEngine(make_catalog(stages_per_level=(2,), puzzle_time=30), rng=random.Random(0))
    win = MainWindow(engine)
    win.show()
    qapp.processEvents()
    yield win
    win.close()
    win.deleteLater()
    qapp.processEvents()


def _submit_correct(win: MainWindow, qapp: QApplication) -> None:
    for step in win._engine.current_puzzle.correct_steps:
        win._move_step(step.id, "unarranged", "arranged")
    win._submit_solution()
    qapp.processEvents()


class TestTickTimer:
    def test_runs_during_play(self, window: MainWindow):
        window._start_game()
        assert window._tick_timer.isActive()
        assert not window._overlay.isVisible()

    def test_stopped_in_menu(self, window: MainWindow):
        assert not window._tick_timer.isActive()

    def test_waits_while_message_covers_board(self, window: MainWindow, qapp: QApplication):
        window._start_game()
        _submit_correct(window, qapp)
        engine = window._engine
        assert engine.phase is GamePhase.PLAYING
        assert engine.last_notification.kind is NotificationKind.CORRECT
        assert window._overlay.isVisible()
        assert not window._tick_timer.isActive()
        assert engine.time_remaining == 30

    def test_resumes_when_message_closes(self, window: MainWindow, qapp: QApplication):
        window._start_game()
        _submit_correct(window, qapp)
        window._overlay.dismiss()
        assert not window._overlay.isVisible()
        assert window._tick_timer.isActive()
        assert window._engine.time_remaining == 30

    def test_stays_stopped_after_game_over_message(self, window: MainWindow, qapp: QApplication):
        window._start_game()
        puzzle = window._engine.current_puzzle
        for step in reversed(puzzle.correct_steps):
            window._move_step(step.id, "unarranged", "arranged")
        window._submit_solution()
        qapp.processEvents()
        window._overlay.dismiss()
        assert window._engine.phase is GamePhase.MENU
        assert not window._tick_timer.isActive()
