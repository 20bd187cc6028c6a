from __future__ import annotations

from typing import Sequence

from puzzlerace.core.catalog import Step


def is_complete(arranged: Sequence[Step], correct_steps: Sequence[Step]) -> bool:
    """True once every step has been placed in the arranged area."""
    return len(arranged) == len(correct_steps)


def validate(arranged: Sequence[Step], correct_steps: Sequence[Step]) -> bool:
    """Check an arrangement against the canonical order, position by position.

    There is no partial credit: any length mismatch or any misplaced step is
    a wrong answer.
    """
    if not is_complete(arranged, correct_steps):
        return False
    return all(a.id == b.id for a, b in zip(arranged, correct_steps))
