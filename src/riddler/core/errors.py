"""Exception hierarchy shared by the riddle game core."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class RiddlerError(RuntimeError):
    """Base class for every error raised by the game core."""


class GuardianUnavailable(RiddlerError):
    """Raised when a turn aborts because the completion service failed."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is None:
            return base
        return f"{base}: {self.cause}"


class PersistenceError(RiddlerError):
    """Raised when the save slot could not be written.

    The in-memory session still holds the mutation; ``result`` carries whatever
    the interrupted turn would have returned so callers can keep playing.
    """

    def __init__(self, message: str, *, path: Optional[Path] = None, result: Any = None) -> None:
        super().__init__(message)
        self.path = path
        self.result = result


class CorruptSave(RiddlerError):
    """Raised when an existing save slot cannot be parsed."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class InvalidIntent(RiddlerError):
    """Raised when an intent is not valid for the current controller state."""

    def __init__(self, message: str, *, state: Any = None, intent: Any = None) -> None:
        super().__init__(message)
        self.state = state
        self.intent = intent


__all__ = [
    "CorruptSave",
    "GuardianUnavailable",
    "InvalidIntent",
    "PersistenceError",
    "RiddlerError",
]
