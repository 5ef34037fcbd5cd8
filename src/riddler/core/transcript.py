"""Append-only dialogue transcript replayed to the guardian on every turn."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Tuple


class Role(str, Enum):
    """Speaker of a transcript turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Turn:
    """Single role-tagged utterance."""

    role: Role
    text: str

    def to_record(self) -> Dict[str, str]:
        return {"role": self.role.value, "text": self.text}


class Transcript:
    """Ordered record of every turn exchanged with the guardian.

    Turns can only be added at the end. Guardian interaction always writes a
    prompt and its reply together through :meth:`record_exchange`, so the
    transcript length stays even.
    """

    __slots__ = ("_turns",)

    def __init__(self, turns: Iterable[Turn] = ()) -> None:
        self._turns: List[Turn] = list(turns)

    # Mutation -------------------------------------------------------------------

    def append(self, role: Role | str, text: str) -> Turn:
        turn = Turn(role=Role(role), text=str(text))
        self._turns.append(turn)
        return turn

    def record_exchange(self, prompt: str, reply: str) -> Tuple[Turn, Turn]:
        """Append a user prompt immediately followed by the assistant reply."""

        return self.append(Role.USER, prompt), self.append(Role.ASSISTANT, reply)

    # Read access ----------------------------------------------------------------

    def snapshot(self) -> Tuple[Turn, ...]:
        """Read-only copy handed to the completion service."""

        return tuple(self._turns)

    def is_empty(self) -> bool:
        return not self._turns

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transcript):
            return NotImplemented
        return self._turns == other._turns

    def __repr__(self) -> str:
        return f"Transcript(turns={len(self._turns)})"

    # Serialization --------------------------------------------------------------

    def to_records(self) -> List[Dict[str, str]]:
        return [turn.to_record() for turn in self._turns]

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "Transcript":
        """Rebuild a transcript from ``{"role", "text"}`` mappings.

        Raises ``ValueError`` for unknown roles.
        """

        turns = [Turn(role=Role(record["role"]), text=str(record["text"])) for record in records]
        return cls(turns)
