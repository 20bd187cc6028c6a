from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Set

from puzzlerace.core.catalog import Puzzle, Step
from puzzlerace.core.timer import Countdown


class GamePhase(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    COMPLETED = "completed"


class Area(str, Enum):
    """The two drop areas a step can live in."""

    UNARRANGED = "unarranged"
    ARRANGED = "arranged"

    @classmethod
    def parse(cls, value: Any) -> "Area":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        if name == "shuffled":
            return cls.UNARRANGED
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown area: {value!r}") from None


@dataclass
class SessionState:
    """Mutable record of one play session.

    ``unarranged`` and ``arranged`` together always hold exactly the steps of
    ``current_puzzle`` (both are empty when there is none). Steps only travel
    between them through :meth:`move`.
    """

    puzzle_time_seconds: int
    domain_name: Optional[str] = None
    phase: GamePhase = GamePhase.MENU
    score: int = 0
    current_level: int = 1
    completed_puzzle_ids: Set[str] = field(default_factory=set)
    completed_stage_ids_in_level: Set[str] = field(default_factory=set)
    total_puzzles_completed: int = 0
    current_puzzle: Optional[Puzzle] = None
    unarranged: List[Step] = field(default_factory=list)
    arranged: List[Step] = field(default_factory=list)
    last_time_bonus: int = 0
    timer: Countdown = field(init=False)

    def __post_init__(self) -> None:
        self.timer = Countdown(self.puzzle_time_seconds)

    @property
    def time_remaining(self) -> int:
        return self.timer.remaining

    def reset(self) -> None:
        """Return every field to its initial value and cancel the countdown."""
        self.domain_name = None
        self.phase = GamePhase.MENU
        self.score = 0
        self.current_level = 1
        self.completed_puzzle_ids = set()
        self.completed_stage_ids_in_level = set()
        self.total_puzzles_completed = 0
        self.last_time_bonus = 0
        self.clear_puzzle()
        self.timer.rewind()

    def load_puzzle(self, puzzle: Puzzle) -> None:
        """Lay out a fresh puzzle and restart the countdown for it."""
        self.current_puzzle = puzzle
        self.unarranged = list(puzzle.shuffled_steps)
        self.arranged = []
        self.timer.restart(self.puzzle_time_seconds)

    def clear_puzzle(self) -> None:
        self.current_puzzle = None
        self.unarranged = []
        self.arranged = []

    def buffer(self, area: Area) -> List[Step]:
        return self.arranged if area is Area.ARRANGED else self.unarranged

    def move(self, step_id: str, from_area: Any, to_area: Any) -> bool:
        """Move one step to the end of the other area.

        Returns False, leaving both areas untouched, when the areas are the
        same or the step is not in ``from_area``.
        """
        source_area = Area.parse(from_area)
        target_area = Area.parse(to_area)
        if source_area is target_area:
            return False
        source = self.buffer(source_area)
        for i, step in enumerate(source):
            if step.id == step_id:
                self.buffer(target_area).append(source.pop(i))
                return True
        return False

    def is_arrangement_complete(self) -> bool:
        if self.current_puzzle is None:
            return False
        return len(self.arranged) == len(self.current_puzzle.correct_steps)
