"""Completion provider abstraction for the guardian."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from ..core.errors import RiddlerError
from ..core.transcript import Turn


class ServiceError(RiddlerError):
    """Raised when the completion service is unreachable or rejects a call."""


class CompletionProvider(ABC):
    """Stateless text completion capability.

    Every call is self-contained: ``history`` is the full transcript so far and
    ``prompt`` the new user message. Implementations must not keep
    conversational state between calls.
    """

    @abstractmethod
    def complete(self, prompt: str, history: Sequence[Turn]) -> str:
        """Return the assistant's reply or raise :class:`ServiceError`."""

    def close(self) -> None:
        """Release any underlying connections."""

    def __enter__(self) -> "CompletionProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def build_messages(preamble: str | None, prompt: str, history: Sequence[Turn]) -> List[Dict[str, str]]:
    """Render a chat-completions message list from the transcript."""

    messages: List[Dict[str, str]] = []
    if preamble:
        messages.append({"role": "system", "content": preamble})
    messages.extend({"role": turn.role.value, "content": turn.text} for turn in history)
    messages.append({"role": "user", "content": prompt})
    return messages


class ProviderFactory:
    """Factory for creating completion provider instances."""

    _providers: Dict[str, type[CompletionProvider]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type[CompletionProvider]) -> None:
        """Register a provider class with the factory."""
        cls._providers[name] = provider_class

    @classmethod
    def create(cls, provider_name: str, **kwargs: Any) -> CompletionProvider:
        """Create a provider instance by name."""
        if provider_name not in cls._providers:
            raise ServiceError(f"Unknown provider: {provider_name}")

        provider_class = cls._providers[provider_name]
        return provider_class(**kwargs)

    @classmethod
    def list_providers(cls) -> List[str]:
        """List all registered provider names."""
        return list(cls._providers.keys())
