"""Core package for the Ancient Guardian riddle game."""

from .core import errors, fsm, guardian, persistence, scoring, session, transcript
from .core.errors import CorruptSave, GuardianUnavailable, InvalidIntent, PersistenceError, RiddlerError
from .core.fsm import ControllerResult, Intent, SessionController, State
from .core.guardian import Guardian, GuessResult
from .core.persistence import SaveSlot
from .core.scoring import compute_score
from .core.session import Session
from .core.transcript import Role, Transcript, Turn
from .providers import CompletionProvider, ProviderFactory, ServiceError

__version__ = "0.1.0"

__all__ = [
    "CompletionProvider",
    "ControllerResult",
    "CorruptSave",
    "Guardian",
    "GuardianUnavailable",
    "GuessResult",
    "Intent",
    "InvalidIntent",
    "PersistenceError",
    "ProviderFactory",
    "RiddlerError",
    "Role",
    "SaveSlot",
    "ServiceError",
    "Session",
    "SessionController",
    "State",
    "Transcript",
    "Turn",
    "compute_score",
    "errors",
    "fsm",
    "guardian",
    "persistence",
    "scoring",
    "session",
    "transcript",
]
