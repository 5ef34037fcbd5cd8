from typing import List, Sequence, Tuple

import pytest

from riddler.core.fsm import SessionController
from riddler.core.guardian import Guardian
from riddler.core.persistence import SaveSlot
from riddler.core.transcript import Turn
from riddler.providers.providers import CompletionProvider, ServiceError


class ScriptedProvider(CompletionProvider):
    """Replays queued replies and records every call it receives."""

    def __init__(self, replies: Sequence[str] = ()) -> None:
        self.replies: List[str] = list(replies)
        self.calls: List[Tuple[str, Tuple[Turn, ...]]] = []
        self.fail_next = False
        self.closed = False

    def queue(self, *replies: str) -> "ScriptedProvider":
        self.replies.extend(replies)
        return self

    def complete(self, prompt, history):
        self.calls.append((prompt, tuple(history)))
        if self.fail_next:
            self.fail_next = False
            raise ServiceError("quota exceeded")
        if not self.replies:
            raise ServiceError("no scripted reply left")
        return self.replies.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def save_path(tmp_path):
    return tmp_path / "riddler_save.json"


@pytest.fixture
def slot(save_path):
    return SaveSlot(save_path)


@pytest.fixture
def guardian(provider, slot):
    return Guardian(provider, slot)


@pytest.fixture
def controller(guardian, slot):
    return SessionController(guardian, slot)
