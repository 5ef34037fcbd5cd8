"""Single-slot save file with atomic replacement."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import List, Literal

import orjson
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import CorruptSave, PersistenceError
from .session import Session
from .transcript import Transcript

LOGGER = structlog.get_logger(__name__)

DEFAULT_SAVE_PATH = Path("riddler_save.json")
TEMP_SUFFIX = ".tmp"


class TurnRecord(BaseModel):
    """One transcript entry as stored on disk."""

    model_config = ConfigDict(extra="forbid", strict=True)

    role: Literal["user", "assistant"]
    text: str


class SaveDocument(BaseModel):
    """Shape of the save file. Any mismatch is treated as corruption."""

    model_config = ConfigDict(extra="forbid", strict=True)

    difficulty: int = Field(..., ge=0, le=2)
    current_riddle: str
    attempts: int = Field(..., ge=0)
    hints_used: int = Field(..., ge=0)
    history: List[TurnRecord]
    score: int = Field(..., ge=0)
    date_started: datetime

    @field_validator("history")
    @classmethod
    def _history_in_pairs(cls, history: List[TurnRecord]) -> List[TurnRecord]:
        if len(history) % 2:
            raise ValueError("history must hold complete user/assistant pairs")
        for index, record in enumerate(history):
            expected = "user" if index % 2 == 0 else "assistant"
            if record.role != expected:
                raise ValueError(f"history turn {index} should be {expected}, got {record.role}")
        return history

    @classmethod
    def from_session(cls, session: Session) -> "SaveDocument":
        return cls(
            difficulty=session.difficulty,
            current_riddle=session.current_riddle,
            attempts=session.attempts,
            hints_used=session.hints_used,
            history=[TurnRecord(**record) for record in session.transcript.to_records()],
            score=session.score,
            date_started=session.started_at,
        )

    def to_session(self) -> Session:
        return Session(
            difficulty=self.difficulty,
            current_riddle=self.current_riddle,
            attempts=self.attempts,
            hints_used=self.hints_used,
            score=self.score,
            transcript=Transcript.from_records(record.model_dump() for record in self.history),
            started_at=self.date_started,
        )


def encode_session(session: Session) -> bytes:
    """Serialize a session into the save file format."""

    document = SaveDocument.from_session(session)
    payload = document.model_dump(mode="json")
    payload["date_started"] = session.started_at.isoformat()
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)


def decode_session(raw: bytes) -> Session:
    """Parse save file bytes. Raises ``ValueError`` on any shape mismatch."""

    try:
        document = SaveDocument.model_validate_json(raw)
    except ValidationError as exc:
        raise ValueError(f"save file does not match the expected shape: {exc.error_count()} error(s)") from exc
    return document.to_session()


class SaveSlot:
    """The one durable location holding the most recently saved session."""

    def __init__(self, path: Path | str = DEFAULT_SAVE_PATH) -> None:
        self.path = Path(path)

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + TEMP_SUFFIX)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, session: Session) -> Path:
        """Write ``session`` next to the slot, then atomically swap it in.

        A crash at any point leaves the slot holding either the previous or the
        new content, never a partial file.
        """

        try:
            data = encode_session(session)
        except (TypeError, ValueError) as exc:
            LOGGER.error("save.encode_failed", path=str(self.path), error=str(exc))
            raise PersistenceError(f"Could not serialize game for {self.path}: {exc}", path=self.path) from exc

        temp_path = self.temp_path
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
        except OSError as exc:
            LOGGER.error("save.failed", path=str(self.path), error=str(exc))
            self._discard_temp()
            raise PersistenceError(f"Could not save game to {self.path}: {exc}", path=self.path) from exc

        LOGGER.info("save.written", path=str(self.path), bytes=len(data), **session.summary())
        return self.path

    def load(self) -> Session:
        """Return the saved session, or a default one when nothing is saved."""

        if not self.path.exists():
            LOGGER.info("save.missing", path=str(self.path))
            return Session()

        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise CorruptSave(f"Could not read save file {self.path}: {exc}", path=self.path) from exc

        try:
            session = decode_session(raw)
        except ValueError as exc:
            LOGGER.warning("save.corrupt", path=str(self.path), error=str(exc))
            raise CorruptSave(f"Save file {self.path} is corrupt: {exc}", path=self.path) from exc

        LOGGER.info("save.loaded", path=str(self.path), **session.summary())
        return session

    def clear(self) -> bool:
        """Delete the slot. Returns whether anything was removed."""

        removed = False
        if self.path.exists():
            self.path.unlink()
            removed = True
        self._discard_temp()
        LOGGER.info("save.cleared", path=str(self.path), removed=removed)
        return removed

    def _discard_temp(self) -> None:
        try:
            self.temp_path.unlink(missing_ok=True)
        except OSError:  # pragma: no cover - best effort cleanup
            LOGGER.warning("save.temp_cleanup_failed", path=str(self.temp_path))
