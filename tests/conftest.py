"""Shared builders for content documents used across the test modules."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Sequence

import pytest

from puzzlerace.core.catalog import GameCatalog, parse_catalog


def build_content(
    stages_per_level: Sequence[int] = (1, 1),
    puzzles_per_stage: int = 1,
    steps_per_puzzle: int = 3,
    puzzle_time: int = 30,
    domain_stages: Optional[int] = None,
    scoring: Optional[Dict[str, Any]] = None,
    domain_name: str = "Lending",
) -> Dict[str, Any]:
    """Content document with stages ``s1..sN``, puzzles ``sI-pJ`` and steps ``sI-pJ-kK``.

    Shuffled steps are the correct steps reversed. ``domain_stages`` overrides
    how many stages the domain actually holds.
    """
    n_stages = sum(stages_per_level) if domain_stages is None else domain_stages
    stages = []
    for i in range(1, n_stages + 1):
        puzzles = []
        for j in range(1, puzzles_per_stage + 1):
            pid = f"s{i}-p{j}"
            steps = [
                {"id": f"{pid}-k{k}", "title": f"Step {k}", "description": f"{pid} step {k}", "phase": "execution"}
                for k in range(1, steps_per_puzzle + 1)
            ]
            puzzles.append(
                {
                    "id": pid,
                    "question": f"Order {pid}",
                    "correctSteps": steps,
                    "shuffledSteps": list(reversed(steps)),
                }
            )
        stages.append({"id": f"s{i}", "puzzles": puzzles})
    content: Dict[str, Any] = {
        "puzzleTimeSeconds": puzzle_time,
        "levelsToWin": len(stages_per_level),
        "levelStageConfig": {f"Level{n}": count for n, count in enumerate(stages_per_level, start=1)},
        "domains": [{"name": domain_name, "stages": stages}],
    }
    if scoring is not None:
        content["scoring"] = scoring
    return content


@pytest.fixture()
def make_catalog() -> Callable[..., GameCatalog]:
    """Factory fixture: ``make_catalog(**build_content_kwargs)``."""

    def _make(**kwargs: Any) -> GameCatalog:
        return parse_catalog(build_content(**kwargs), source="test")

    return _make
