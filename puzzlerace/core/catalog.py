from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from puzzlerace.core.errors import CatalogError, UnknownDomainError

logger = logging.getLogger(__name__)

CONTENT_ENV_VAR = "PUZZLERACE_CONTENT"

_LEVEL_KEY_RE = re.compile(r"^Level(\d+)$")


class StepPhase(str, Enum):
    INITIATION = "initiation"
    EXECUTION = "execution"
    SETTLEMENT = "settlement"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "StepPhase":
        """Map a raw phase string to a phase; anything unrecognised is OTHER."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Step:
    id: str
    title: str
    description: str = ""
    phase: StepPhase = StepPhase.OTHER


@dataclass(frozen=True)
class Puzzle:
    id: str
    question: str
    correct_steps: Tuple[Step, ...]
    shuffled_steps: Tuple[Step, ...]
    stage_id: str

    @property
    def step_ids(self) -> frozenset[str]:
        return frozenset(step.id for step in self.correct_steps)


@dataclass(frozen=True)
class Stage:
    id: str
    puzzles: Tuple[Puzzle, ...]


@dataclass(frozen=True)
class Domain:
    name: str
    stages: Tuple[Stage, ...]

    def puzzle_count(self) -> int:
        return sum(len(stage.puzzles) for stage in self.stages)

    def puzzles(self) -> List[Puzzle]:
        """All puzzles of the domain in catalog order."""
        return [puzzle for stage in self.stages for puzzle in stage.puzzles]


@dataclass(frozen=True)
class ScoringRules:
    """Points awarded and taken per submission.

    The time bonus is always computed as ``time_remaining // time_bonus_divisor``
    but only counts towards the score when ``apply_time_bonus`` is set.
    """

    correct_points: int = 10
    incorrect_penalty: int = 50
    time_bonus_divisor: int = 10
    apply_time_bonus: bool = False

    def time_bonus(self, time_remaining: int) -> int:
        return max(0, int(time_remaining)) // self.time_bonus_divisor


@dataclass(frozen=True)
class GameCatalog:
    """Immutable content resource: game settings plus the domain hierarchy."""

    puzzle_time_seconds: int
    levels_to_win: int
    level_stage_config: Dict[int, int]
    domains: Tuple[Domain, ...]
    scoring: ScoringRules = field(default_factory=ScoringRules)

    def domain_names(self) -> List[str]:
        return [domain.name for domain in self.domains]

    def get(self, name: str) -> Domain:
        for domain in self.domains:
            if domain.name == name:
                return domain
        raise UnknownDomainError(name)

    def required_stages(self, level: int) -> Optional[int]:
        return self.level_stage_config.get(level)

    def missing_levels(self) -> List[int]:
        return [n for n in range(1, self.levels_to_win + 1) if n not in self.level_stage_config]

    @property
    def total_stages_to_win(self) -> int:
        return sum(self.level_stage_config.get(n, 0) for n in range(1, self.levels_to_win + 1))


def default_content_path() -> Path:
    """Content file named by ``PUZZLERACE_CONTENT``, else the packaged game data."""
    override = os.environ.get(CONTENT_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent.parent / "data" / "game.yaml"


class CatalogRepository:
    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else default_content_path()
        self._catalog = self._load_catalog()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def catalog(self) -> GameCatalog:
        return self._catalog

    def all(self) -> List[Domain]:
        return list(self._catalog.domains)

    def get(self, name: str) -> Domain:
        return self._catalog.get(name)

    def _load_catalog(self) -> GameCatalog:
        if not self._path.exists():
            raise FileNotFoundError(f"Content file not found: {self._path}")
        # YAML is a superset of JSON, so .json resources load the same way.
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        catalog = parse_catalog(raw, source=self._path.name)
        logger.info(
            "Loaded %d domain(s) from %s (%d levels to win)",
            len(catalog.domains),
            self._path,
            catalog.levels_to_win,
        )
        return catalog


def parse_catalog(raw: Any, source: str = "<content>") -> GameCatalog:
    """Build a :class:`GameCatalog` from the decoded content document.

    Raises :class:`CatalogError` on the first malformed entry; nothing is
    silently repaired except unknown step phases, which load as ``other``.
    """
    if not raw or not isinstance(raw, dict):
        raise CatalogError(f"{source}: expected a mapping with 'domains' and game settings")

    puzzle_time = _positive_int(raw, "puzzleTimeSeconds", source)
    levels_to_win = _positive_int(raw, "levelsToWin", source)
    level_config = _parse_level_config(raw.get("levelStageConfig"), levels_to_win, source)
    scoring = _parse_scoring(raw.get("scoring"), source)

    raw_domains = raw.get("domains")
    if not isinstance(raw_domains, list) or not raw_domains:
        raise CatalogError(f"{source}: 'domains' must be a non-empty list")

    domains: List[Domain] = []
    seen_names: set[str] = set()
    for i, raw_domain in enumerate(raw_domains):
        domain = _parse_domain(raw_domain, f"{source}: domains[{i}]")
        if domain.name in seen_names:
            raise CatalogError(f"{source}: duplicate domain name {domain.name!r}")
        seen_names.add(domain.name)
        domains.append(domain)

    catalog = GameCatalog(
        puzzle_time_seconds=puzzle_time,
        levels_to_win=levels_to_win,
        level_stage_config=level_config,
        domains=tuple(domains),
        scoring=scoring,
    )
    for domain in catalog.domains:
        if len(domain.stages) < catalog.total_stages_to_win:
            logger.warning(
                "Domain %r has %d stage(s) but %d are needed to win; it cannot be completed",
                domain.name,
                len(domain.stages),
                catalog.total_stages_to_win,
            )
    return catalog


def _positive_int(raw: Mapping[str, Any], key: str, where: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise CatalogError(f"{where}: missing or invalid '{key}' (expected a positive integer)")
    return value


def _text(raw: Mapping[str, Any], key: str, where: str, required: bool = True) -> str:
    value = raw.get(key)
    if value is None and not required:
        return ""
    if not isinstance(value, (str, int)) or not str(value).strip():
        raise CatalogError(f"{where}: missing or invalid '{key}'")
    return str(value).strip()


def _parse_level_config(raw: Any, levels_to_win: int, source: str) -> Dict[int, int]:
    if not isinstance(raw, dict) or not raw:
        raise CatalogError(f"{source}: 'levelStageConfig' must be a non-empty mapping")
    config: Dict[int, int] = {}
    for key, value in raw.items():
        m = _LEVEL_KEY_RE.match(str(key))
        if not m:
            raise CatalogError(f"{source}: levelStageConfig key {key!r} is not of the form 'Level<N>'")
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise CatalogError(f"{source}: levelStageConfig[{key!r}] must be a positive integer")
        config[int(m.group(1))] = value
    expected = set(range(1, levels_to_win + 1))
    if set(config) != expected:
        missing = sorted(expected - set(config))
        extra = sorted(set(config) - expected)
        raise CatalogError(
            f"{source}: levelStageConfig must define Level1..Level{levels_to_win} exactly"
            f" (missing {missing}, unexpected {extra})"
        )
    return config


def _parse_scoring(raw: Any, source: str) -> ScoringRules:
    if raw is None:
        return ScoringRules()
    if not isinstance(raw, dict):
        raise CatalogError(f"{source}: 'scoring' must be a mapping")
    defaults = ScoringRules()
    values: Dict[str, Any] = {}
    for key, attr in (
        ("correctPoints", "correct_points"),
        ("incorrectPenalty", "incorrect_penalty"),
        ("timeBonusDivisor", "time_bonus_divisor"),
    ):
        value = raw.get(key, getattr(defaults, attr))
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise CatalogError(f"{source}: scoring.{key} must be a non-negative integer")
        values[attr] = value
    if values["time_bonus_divisor"] == 0:
        raise CatalogError(f"{source}: scoring.timeBonusDivisor must be greater than zero")
    apply_bonus = raw.get("applyTimeBonus", defaults.apply_time_bonus)
    if not isinstance(apply_bonus, bool):
        raise CatalogError(f"{source}: scoring.applyTimeBonus must be true or false")
    return ScoringRules(apply_time_bonus=apply_bonus, **values)


def _parse_domain(raw: Any, where: str) -> Domain:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a mapping")
    name = _text(raw, "name", where)
    raw_stages = raw.get("stages")
    if raw_stages is None:
        raw_stages = []
    if not isinstance(raw_stages, list):
        raise CatalogError(f"{where}: 'stages' must be a list")

    stages: List[Stage] = []
    stage_ids: set[str] = set()
    puzzle_ids: set[str] = set()
    for i, raw_stage in enumerate(raw_stages):
        stage = _parse_stage(raw_stage, f"{where}.stages[{i}]")
        if stage.id in stage_ids:
            raise CatalogError(f"{where}: duplicate stage id {stage.id!r}")
        stage_ids.add(stage.id)
        for puzzle in stage.puzzles:
            if puzzle.id in puzzle_ids:
                raise CatalogError(f"{where}: duplicate puzzle id {puzzle.id!r}")
            puzzle_ids.add(puzzle.id)
        stages.append(stage)
    return Domain(name=name, stages=tuple(stages))


def _parse_stage(raw: Any, where: str) -> Stage:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a mapping")
    stage_id = _text(raw, "id", where)
    raw_puzzles = raw.get("puzzles")
    if not isinstance(raw_puzzles, list):
        raise CatalogError(f"{where}: 'puzzles' must be a list")
    if not raw_puzzles:
        logger.warning("%s: stage %r has no puzzles", where, stage_id)
    puzzles = tuple(
        _parse_puzzle(raw_puzzle, stage_id, f"{where}.puzzles[{i}]")
        for i, raw_puzzle in enumerate(raw_puzzles)
    )
    return Stage(id=stage_id, puzzles=puzzles)


def _parse_step(raw: Any, where: str) -> Step:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a step mapping")
    return Step(
        id=_text(raw, "id", where),
        title=_text(raw, "title", where),
        description=_text(raw, "description", where, required=False),
        phase=StepPhase.parse(raw.get("phase", StepPhase.OTHER.value)),
    )


def _parse_puzzle(raw: Any, stage_id: str, where: str) -> Puzzle:
    if not isinstance(raw, dict):
        raise CatalogError(f"{where}: expected a mapping")
    puzzle_id = _text(raw, "id", where)
    question = _text(raw, "question", where)

    declared_stage = raw.get("stageId")
    if declared_stage is not None and str(declared_stage) != stage_id:
        raise CatalogError(f"{where}: stageId {declared_stage!r} does not match enclosing stage {stage_id!r}")

    raw_correct = raw.get("correctSteps")
    if not isinstance(raw_correct, list) or not raw_correct:
        raise CatalogError(f"{where}: 'correctSteps' must be a non-empty list")
    correct = tuple(_parse_step(s, f"{where}.correctSteps[{i}]") for i, s in enumerate(raw_correct))
    by_id: Dict[str, Step] = {}
    for step in correct:
        if step.id in by_id:
            raise CatalogError(f"{where}: duplicate step id {step.id!r} in 'correctSteps'")
        by_id[step.id] = step

    raw_shuffled = raw.get("shuffledSteps")
    if not isinstance(raw_shuffled, list):
        raise CatalogError(f"{where}: 'shuffledSteps' must be a list")
    shuffled: List[Step] = []
    for i, entry in enumerate(raw_shuffled):
        step_where = f"{where}.shuffledSteps[{i}]"
        step_id = str(entry.get("id", "")).strip() if isinstance(entry, dict) else str(entry).strip()
        step = by_id.get(step_id)
        if step is None:
            raise CatalogError(f"{step_where}: step {step_id!r} is not one of the correct steps")
        if isinstance(entry, dict) and _parse_step(entry, step_where) != step:
            raise CatalogError(f"{step_where}: step {step_id!r} differs from its entry in 'correctSteps'")
        shuffled.append(step)

    if sorted(s.id for s in shuffled) != sorted(by_id):
        raise CatalogError(f"{where}: 'shuffledSteps' is not a permutation of 'correctSteps'")

    return Puzzle(
        id=puzzle_id,
        question=question,
        correct_steps=correct,
        shuffled_steps=tuple(shuffled),
        stage_id=stage_id,
    )
