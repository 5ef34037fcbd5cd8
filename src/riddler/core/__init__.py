"""Core game logic and data structures."""

from . import errors, scoring, transcript, session, persistence, guardian, fsm

__all__ = ["errors", "fsm", "guardian", "persistence", "scoring", "session", "transcript"]
