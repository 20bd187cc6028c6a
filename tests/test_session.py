"""Tests for puzzlerace.core.session – session record and arrangement buffers."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from puzzlerace.core.catalog import Puzzle
from puzzlerace.core.session import Area, GamePhase, SessionState


@pytest.fixture()
def puzzle(make_catalog) -> Puzzle:
    return make_catalog(steps_per_puzzle=4).get("Lending").stages[0].puzzles[0]


@pytest.fixture()
def state(puzzle: Puzzle) -> SessionState:
    s = SessionState(puzzle_time_seconds=30)
    s.load_puzzle(puzzle)
    return s


def _ids(steps) -> list[str]:
    return [s.id for s in steps]


# ---------------------------------------------------------------------------
# Area
# ---------------------------------------------------------------------------

class TestArea:
    def test_parse_names(self):
        assert Area.parse("arranged") is Area.ARRANGED
        assert Area.parse(" Unarranged ") is Area.UNARRANGED

    def test_parse_shuffled_alias(self):
        assert Area.parse("shuffled") is Area.UNARRANGED

    def test_parse_member(self):
        assert Area.parse(Area.ARRANGED) is Area.ARRANGED

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown area"):
            Area.parse("trash")


# ---------------------------------------------------------------------------
# SessionState – initial values and reset
# ---------------------------------------------------------------------------

class TestSessionStateLifecycle:
    def test_initial_values(self):
        s = SessionState(puzzle_time_seconds=30)
        assert s.phase is GamePhase.MENU
        assert s.score == 0
        assert s.current_level == 1
        assert s.completed_puzzle_ids == set()
        assert s.completed_stage_ids_in_level == set()
        assert s.total_puzzles_completed == 0
        assert s.current_puzzle is None
        assert s.unarranged == [] and s.arranged == []
        assert s.time_remaining == 30
        assert not s.timer.running

    def test_load_puzzle(self, state: SessionState, puzzle: Puzzle):
        assert state.current_puzzle is puzzle
        assert _ids(state.unarranged) == _ids(puzzle.shuffled_steps)
        assert state.arranged == []
        assert state.timer.running
        assert state.time_remaining == 30

    def test_load_puzzle_restarts_timer(self, state: SessionState, puzzle: Puzzle):
        for _ in range(10):
            state.timer.tick()
        state.load_puzzle(puzzle)
        assert state.time_remaining == 30

    def test_reset(self, state: SessionState):
        state.score = 40
        state.current_level = 2
        state.completed_puzzle_ids.add("x")
        state.completed_stage_ids_in_level.add("s1")
        state.total_puzzles_completed = 4
        state.phase = GamePhase.PLAYING
        state.timer.tick()
        state.reset()
        assert state.phase is GamePhase.MENU
        assert state.score == 0
        assert state.current_level == 1
        assert state.completed_puzzle_ids == set()
        assert state.completed_stage_ids_in_level == set()
        assert state.total_puzzles_completed == 0
        assert state.current_puzzle is None
        assert state.time_remaining == 30
        assert not state.timer.running

    def test_clear_puzzle_empties_buffers(self, state: SessionState):
        state.clear_puzzle()
        assert state.current_puzzle is None
        assert state.unarranged == [] and state.arranged == []


# ---------------------------------------------------------------------------
# SessionState.move
# ---------------------------------------------------------------------------

class TestMove:
    def test_move_appends_to_end(self, state: SessionState):
        first, second = state.unarranged[2].id, state.unarranged[0].id
        assert state.move(first, "unarranged", "arranged")
        assert state.move(second, Area.UNARRANGED, Area.ARRANGED)
        assert _ids(state.arranged) == [first, second]
        assert first not in _ids(state.unarranged)

    def test_move_back(self, state: SessionState):
        step_id = state.unarranged[0].id
        state.move(step_id, "unarranged", "arranged")
        assert state.move(step_id, "arranged", "unarranged")
        assert _ids(state.unarranged)[-1] == step_id
        assert state.arranged == []

    def test_same_area_is_noop(self, state: SessionState):
        before = _ids(state.unarranged)
        assert not state.move(before[0], "unarranged", "unarranged")
        assert _ids(state.unarranged) == before

    def test_step_not_in_source_is_noop(self, state: SessionState):
        step_id = state.unarranged[0].id
        assert not state.move(step_id, "arranged", "unarranged")
        assert state.arranged == []
        assert len(state.unarranged) == 4

    def test_unknown_step_is_noop(self, state: SessionState):
        assert not state.move("ghost", "unarranged", "arranged")
        assert state.arranged == []

    def test_unknown_area_raises(self, state: SessionState):
        with pytest.raises(ValueError):
            state.move(state.unarranged[0].id, "unarranged", "bin")

    def test_arrangement_complete(self, state: SessionState):
        assert not state.is_arrangement_complete()
        for step_id in _ids(state.unarranged):
            state.move(step_id, "unarranged", "arranged")
        assert state.is_arrangement_complete()

    def test_no_puzzle_never_complete(self):
        assert not SessionState(puzzle_time_seconds=30).is_arrangement_complete()

    @pytest.mark.parametrize("seed", range(5))
    def test_random_moves_keep_every_step_exactly_once(self, state: SessionState, puzzle: Puzzle, seed: int):
        rng = random.Random(seed)
        all_ids = _ids(puzzle.correct_steps) + ["ghost"]
        areas = ["unarranged", "arranged"]
        expected = Counter(_ids(puzzle.correct_steps))
        for _ in range(200):
            state.move(rng.choice(all_ids), rng.choice(areas), rng.choice(areas))
            assert Counter(_ids(state.unarranged) + _ids(state.arranged)) == expected
