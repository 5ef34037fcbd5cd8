"""Completion providers backing the guardian."""

from . import openai_chat, providers
from .openai_chat import OpenAIChatProvider, OpenRouterProvider
from .providers import CompletionProvider, ProviderFactory, ServiceError

__all__ = [
    "CompletionProvider",
    "OpenAIChatProvider",
    "OpenRouterProvider",
    "ProviderFactory",
    "ServiceError",
    "openai_chat",
    "providers",
]
