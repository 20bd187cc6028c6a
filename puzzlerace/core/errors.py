"""Exceptions raised by the puzzle race core."""

from __future__ import annotations


class PuzzleRaceError(Exception):
    """Base class for errors raised by the game core."""


class CatalogError(PuzzleRaceError, ValueError):
    """Raised when the content resource is malformed or cannot be played."""


class UnknownDomainError(PuzzleRaceError, KeyError):
    """Raised when a domain name is not present in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown domain: {self.name!r}"
