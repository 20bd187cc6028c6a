"""Transient messages emitted alongside state transitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    CORRECT = "correct"
    LEVEL_UP = "level_up"
    WIN = "win"
    INCORRECT = "incorrect"
    TIMEOUT = "timeout"
    POOL_EXHAUSTED = "pool_exhausted"


class Severity(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    text: str
    severity: Severity
