"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from puzzlerace.core.catalog import GameCatalog, Puzzle, Step
from puzzlerace.ui.colors import phase_color


@dataclass
class DomainSummary:
    """Menu details for one domain: size, level requirements, and selection."""

    name: str
    total_puzzles: int
    levels_to_win: int
    level_requirements: List[Tuple[int, int]]
    selected: bool = False


@dataclass(frozen=True)
class StepCard:
    """Display fields for a step shown in either drop area."""

    step_id: str
    title: str
    description: str
    phase_label: str
    color: str


def build_domain_summaries(catalog: GameCatalog, selected: Optional[str]) -> List[DomainSummary]:
    requirements = sorted(catalog.level_stage_config.items())
    return [
        DomainSummary(
            name=domain.name,
            total_puzzles=domain.puzzle_count(),
            levels_to_win=catalog.levels_to_win,
            level_requirements=list(requirements),
            selected=domain.name == selected,
        )
        for domain in catalog.domains
    ]


def step_card(step: Step) -> StepCard:
    return StepCard(
        step_id=step.id,
        title=step.title,
        description=step.description,
        phase_label=step.phase.value,
        color=phase_color(step.phase),
    )


def group_mastered(domain_name: Optional[str], puzzles: List[Puzzle]) -> Dict[str, List[str]]:
    """Questions of the mastered puzzles keyed by domain, for the completion screen."""
    if not domain_name or not puzzles:
        return {}
    return {domain_name: [p.question for p in puzzles]}
