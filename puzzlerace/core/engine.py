from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from puzzlerace.core.catalog import Domain, GameCatalog, Puzzle, Step
from puzzlerace.core.errors import CatalogError, PuzzleRaceError
from puzzlerace.core.notifications import Notification, NotificationKind, Severity
from puzzlerace.core.selector import select_puzzle
from puzzlerace.core.session import GamePhase, SessionState
from puzzlerace.core.validator import is_complete, validate

logger = logging.getLogger(__name__)

Listener = Callable[[Notification], None]


@dataclass(frozen=True)
class GameView:
    """Read-only snapshot of everything the presentation layer shows."""

    phase: GamePhase
    domain_name: Optional[str]
    score: int
    current_level: int
    levels_to_win: int
    required_stages: int
    completed_stage_count: int
    total_puzzles_completed: int
    total_stages_to_win: int
    time_remaining: int
    time_fraction: float
    current_question: str
    unarranged: Tuple[Step, ...]
    arranged: Tuple[Step, ...]
    can_submit: bool
    last_notification: Optional[Notification]


class GameEngine:
    """Drives one play session: puzzle loading, submissions, levels and the clock.

    The engine is the only writer of its :class:`SessionState`. Every command
    runs to completion before returning, so a host that calls ``tick()`` and
    the player commands from one thread never sees a half-applied transition.
    Commands that do not apply in the current phase are inert.
    """

    def __init__(self, catalog: GameCatalog, rng: Optional[random.Random] = None) -> None:
        """Create an engine in the menu phase with the first domain selected."""
        self._catalog = catalog
        self._rng = rng if rng is not None else random.Random()
        self._state = SessionState(puzzle_time_seconds=catalog.puzzle_time_seconds)
        self._listeners: List[Listener] = []
        self._last_notification: Optional[Notification] = None
        self._pending: List[Notification] = []
        self._selected_domain: Optional[str] = self._default_domain()

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> GameCatalog:
        return self._catalog

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def current_level(self) -> int:
        return self._state.current_level

    @property
    def levels_to_win(self) -> int:
        return self._catalog.levels_to_win

    @property
    def required_stages(self) -> int:
        """Distinct stages needed to clear the current level."""
        return self._catalog.required_stages(self._state.current_level) or 0

    @property
    def total_stages_to_win(self) -> int:
        return self._catalog.total_stages_to_win

    @property
    def time_remaining(self) -> int:
        return self._state.time_remaining

    @property
    def time_fraction(self) -> float:
        return self._state.timer.fraction

    @property
    def current_puzzle(self) -> Optional[Puzzle]:
        return self._state.current_puzzle

    @property
    def current_question(self) -> str:
        puzzle = self._state.current_puzzle
        return puzzle.question if puzzle is not None else ""

    @property
    def unarranged(self) -> Tuple[Step, ...]:
        return tuple(self._state.unarranged)

    @property
    def arranged(self) -> Tuple[Step, ...]:
        return tuple(self._state.arranged)

    @property
    def total_puzzles_completed(self) -> int:
        return self._state.total_puzzles_completed

    @property
    def completed_puzzle_ids(self) -> frozenset[str]:
        return frozenset(self._state.completed_puzzle_ids)

    @property
    def completed_stage_count(self) -> int:
        return len(self._state.completed_stage_ids_in_level)

    @property
    def last_time_bonus(self) -> int:
        return self._state.last_time_bonus

    @property
    def last_notification(self) -> Optional[Notification]:
        return self._last_notification

    @property
    def selected_domain(self) -> Optional[str]:
        return self._selected_domain

    @property
    def domain_name(self) -> Optional[str]:
        """Domain of the session in progress (or just finished)."""
        return self._state.domain_name

    @property
    def can_submit(self) -> bool:
        puzzle = self._state.current_puzzle
        return (
            self._state.phase is GamePhase.PLAYING
            and puzzle is not None
            and is_complete(self._state.arranged, puzzle.correct_steps)
        )

    def total_puzzles_in_domain(self, name: Optional[str] = None) -> int:
        name = name or self._selected_domain
        if name is None:
            return 0
        return self._catalog.get(name).puzzle_count()

    def mastered_puzzles(self) -> List[Puzzle]:
        """Puzzles completed this session, in catalog order."""
        if self._state.domain_name is None:
            return []
        done = self._state.completed_puzzle_ids
        return [p for p in self._catalog.get(self._state.domain_name).puzzles() if p.id in done]

    def snapshot(self) -> GameView:
        return GameView(
            phase=self.phase,
            domain_name=self.domain_name,
            score=self.score,
            current_level=self.current_level,
            levels_to_win=self.levels_to_win,
            required_stages=self.required_stages,
            completed_stage_count=self.completed_stage_count,
            total_puzzles_completed=self.total_puzzles_completed,
            total_stages_to_win=self.total_stages_to_win,
            time_remaining=self.time_remaining,
            time_fraction=self.time_fraction,
            current_question=self.current_question,
            unarranged=self.unarranged,
            arranged=self.arranged,
            can_submit=self.can_submit,
            last_notification=self.last_notification,
        )

    # ------------------------------------------------------------------
    # Notification channel
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: NotificationKind, title: str, text: str, severity: Severity) -> None:
        notification = Notification(kind=kind, title=title, text=text, severity=severity)
        self._last_notification = notification
        self._pending.append(notification)

    def _flush(self) -> None:
        # Listeners run only once the command has finished mutating state.
        pending, self._pending = self._pending, []
        for notification in pending:
            for listener in list(self._listeners):
                listener(notification)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def select_domain(self, name: str) -> None:
        """Choose the domain used by :meth:`start_game` when none is given."""
        self._catalog.get(name)
        self._selected_domain = name

    def start_game(self, domain_name: Optional[str] = None) -> None:
        """Begin a fresh session at level 1.

        Raises :class:`UnknownDomainError` for unknown names and
        :class:`CatalogError` when the domain has no stages or the level
        configuration does not cover every level; the session is left as it
        was in both cases.
        """
        if self._state.phase is not GamePhase.MENU:
            logger.debug("start_game ignored in phase %s", self._state.phase.value)
            return
        name = domain_name or self._selected_domain
        if name is None:
            raise CatalogError("No domain available to play")
        domain = self._catalog.get(name)
        if not domain.stages:
            raise CatalogError(f"Domain {name!r} has no stages")
        missing = self._catalog.missing_levels()
        if missing:
            raise CatalogError(f"Level stage configuration is missing levels {missing}")

        self._selected_domain = name
        self._state.reset()
        self._state.domain_name = name
        self._state.phase = GamePhase.PLAYING
        self._last_notification = None
        logger.info("Started game in domain %r", name)
        self._load_next_puzzle()
        self._flush()

    def move_step(self, step_id: str, from_area: Any, to_area: Any) -> bool:
        """Apply a drop: move ``step_id`` from one area to the end of the other."""
        if self._state.phase is not GamePhase.PLAYING:
            return False
        moved = self._state.move(step_id, from_area, to_area)
        if not moved:
            logger.debug("Ignored move of %r from %s to %s", step_id, from_area, to_area)
        return moved

    def submit_solution(self) -> Optional[bool]:
        """Check the arranged steps.

        Returns True or False for a judged submission and None when the
        command was inert (not playing, or steps still left to place).
        """
        puzzle = self._state.current_puzzle
        if puzzle is None or not self.can_submit:
            logger.debug("Submit ignored: arrangement incomplete or not playing")
            return None
        correct = validate(self._state.arranged, puzzle.correct_steps)
        if correct:
            self._on_correct(puzzle)
        else:
            self._on_incorrect(puzzle)
        self._flush()
        return correct

    def tick(self) -> None:
        """Advance the puzzle clock by one second; called by the host scheduler."""
        if self._state.phase is not GamePhase.PLAYING:
            return
        if self._state.timer.tick():
            logger.info("Time ran out on puzzle %r", self.current_puzzle.id if self.current_puzzle else None)
            self._end_session(GamePhase.MENU)
            self._notify(
                NotificationKind.TIMEOUT,
                "Time's Up!",
                "You ran out of time. Game Over!",
                Severity.ERROR,
            )
            self._flush()

    def reset_game(self) -> None:
        """Return to the menu with every counter at its initial value."""
        self._state.reset()
        self._last_notification = None
        self._selected_domain = self._default_domain()
        self._pending = []
        logger.info("Game reset")

    def return_to_menu(self) -> None:
        """Leave the completion screen, keeping the final figures until the next start."""
        if self._state.phase is GamePhase.COMPLETED:
            self._state.phase = GamePhase.MENU

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _default_domain(self) -> Optional[str]:
        return self._catalog.domains[0].name if self._catalog.domains else None

    def _domain(self) -> Domain:
        if self._state.domain_name is None:
            raise PuzzleRaceError("No domain is being played")
        return self._catalog.get(self._state.domain_name)

    def _load_next_puzzle(self) -> None:
        level = self._state.current_level
        puzzle = select_puzzle(
            self._domain(),
            level,
            self._state.completed_puzzle_ids,
            self._catalog.level_stage_config,
            self._rng,
        )
        if puzzle is None:
            logger.info("Puzzle pool exhausted for level %d", level)
            self._end_session(GamePhase.MENU)
            self._notify(
                NotificationKind.POOL_EXHAUSTED,
                "No More Puzzles Available in this Level!",
                f"You've exhausted all unique puzzles in Level {level}'s workflows"
                " before completing enough stages to advance.",
                Severity.WARNING,
            )
            return
        self._state.load_puzzle(puzzle)
        logger.debug("Loaded puzzle %r from stage %r", puzzle.id, puzzle.stage_id)

    def _on_correct(self, puzzle: Puzzle) -> None:
        state = self._state
        scoring = self._catalog.scoring
        bonus = scoring.time_bonus(state.time_remaining)
        state.last_time_bonus = bonus
        state.score += scoring.correct_points
        if scoring.apply_time_bonus:
            state.score += bonus
        state.completed_puzzle_ids.add(puzzle.id)
        state.total_puzzles_completed += 1
        state.completed_stage_ids_in_level.add(puzzle.stage_id)
        logger.info("Puzzle %r solved; score %d", puzzle.id, state.score)

        level = state.current_level
        required = self._catalog.required_stages(level) or 0
        if len(state.completed_stage_ids_in_level) < required:
            self._notify(
                NotificationKind.CORRECT,
                "Correct Order!",
                "Excellent! Proceeding to the next challenge.",
                Severity.SUCCESS,
            )
            self._load_next_puzzle()
            return

        if level >= self._catalog.levels_to_win:
            self._end_session(GamePhase.COMPLETED)
            logger.info("Domain %r completed with score %d", state.domain_name, state.score)
            self._notify(
                NotificationKind.WIN,
                "Congratulations, Winner!",
                f"You've mastered all levels in {state.domain_name} with a final score of {state.score}!",
                Severity.SUCCESS,
            )
            return

        state.current_level = level + 1
        state.completed_stage_ids_in_level = set()
        logger.info("Advanced to level %d", state.current_level)
        self._notify(
            NotificationKind.LEVEL_UP,
            "Level Complete!",
            f"You've completed Level {level}! Advancing to Level {level + 1}.",
            Severity.INFO,
        )
        self._load_next_puzzle()

    def _on_incorrect(self, puzzle: Puzzle) -> None:
        state = self._state
        state.score = max(0, state.score - self._catalog.scoring.incorrect_penalty)
        logger.info("Wrong order for puzzle %r; score %d", puzzle.id, state.score)
        self._end_session(GamePhase.MENU)
        self._notify(
            NotificationKind.INCORRECT,
            "Incorrect Order!",
            "Oops! The workflow is incorrect. Game Over.",
            Severity.ERROR,
        )

    def _end_session(self, phase: GamePhase) -> None:
        self._state.phase = phase
        self._state.clear_puzzle()
        self._state.timer.stop()
