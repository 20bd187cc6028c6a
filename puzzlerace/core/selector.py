from __future__ import annotations

import random
from typing import AbstractSet, List, Mapping, Optional, Tuple

from puzzlerace.core.catalog import Domain, Puzzle, Stage
from puzzlerace.core.errors import CatalogError


def level_stage_range(level: int, level_stage_config: Mapping[int, int]) -> Tuple[int, int]:
    """Half-open ``(start, end)`` stage indices that make up ``level``.

    Levels are 1-indexed, contiguous slices of the domain's stage list: level
    N starts where level N-1 ends.
    """
    if level < 1:
        raise ValueError(f"Levels start at 1, got {level}")
    try:
        start = sum(level_stage_config[n] for n in range(1, level))
        end = start + level_stage_config[level]
    except KeyError as e:
        raise CatalogError(f"Level{e.args[0]} is missing from the level stage configuration") from None
    return start, end


def stages_for_level(domain: Domain, level: int, level_stage_config: Mapping[int, int]) -> Tuple[Stage, ...]:
    start, end = level_stage_range(level, level_stage_config)
    return domain.stages[start:end]


def select_puzzle(
    domain: Domain,
    level: int,
    completed_puzzle_ids: AbstractSet[str],
    level_stage_config: Mapping[int, int],
    rng: Optional[random.Random] = None,
) -> Optional[Puzzle]:
    """Pick a random puzzle from the level's stages that has not been completed.

    Returns None once the level's pool is exhausted.
    """
    available: List[Puzzle] = [
        puzzle
        for stage in stages_for_level(domain, level, level_stage_config)
        for puzzle in stage.puzzles
        if puzzle.id not in completed_puzzle_ids
    ]
    if not available:
        return None
    return (rng or random).choice(available)
