"""Per-puzzle countdown driven by an external scheduler."""

from __future__ import annotations

from typing import Optional


class Countdown:
    """Whole-second countdown that never owns a clock.

    The host calls :meth:`tick` once per second. The countdown reports expiry
    exactly once and never drops below zero; :meth:`restart`, :meth:`stop` and :meth:`rewind`
    cancel whatever countdown was in progress.
    """

    def __init__(self, duration: int) -> None:
        if duration < 0:
            raise ValueError("duration must not be negative")
        self._duration = duration
        self._remaining = duration
        self._running = False
        self._expired = False

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def fraction(self) -> float:
        """Remaining share of the duration, 1.0 when full and 0.0 when spent."""
        if self._duration <= 0:
            return 0.0
        return self._remaining / self._duration

    def restart(self, duration: Optional[int] = None) -> None:
        """Start a fresh countdown, optionally with a new duration."""
        if duration is not None:
            if duration < 0:
                raise ValueError("duration must not be negative")
            self._duration = duration
        self._remaining = self._duration
        self._expired = False
        self._running = True

    def stop(self) -> None:
        """Cancel the countdown without firing, keeping the remaining time."""
        self._running = False

    def rewind(self) -> None:
        """Cancel the countdown and put it back to its full duration."""
        self._running = False
        self._expired = False
        self._remaining = self._duration

    def tick(self) -> bool:
        """Advance one second. Returns True only on the tick that reaches zero."""
        if not self._running:
            return False
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._running = False
            self._expired = True
            return True
        return False


def format_time(seconds: int) -> str:
    """Format seconds as ``m:ss``."""
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"
