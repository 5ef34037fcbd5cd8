"""OpenAI-compatible chat completion providers for the guardian."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Sequence

import structlog
from dotenv import load_dotenv
from openai import OpenAI

from ..core.transcript import Turn
from .providers import CompletionProvider, ProviderFactory, ServiceError, build_messages

load_dotenv()

LOGGER = structlog.get_logger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.9
DEFAULT_TIMEOUT = 60.0
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenAIChatProvider(CompletionProvider):
    """Thin wrapper around chat completions that replays the full transcript."""

    api_key_env = "OPENAI_API_KEY"
    default_base_url: Optional[str] = None

    def __init__(
        self,
        *,
        preamble: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        **kwargs: Any,
    ) -> None:
        self.api_key = api_key or os.getenv(self.api_key_env)
        if not self.api_key:
            raise ServiceError(f"{self.api_key_env} is not set")

        self.preamble = preamble
        self.model = model
        self.temperature = temperature
        self.base_url = (base_url or self.default_base_url or "").rstrip("/") or None
        self.timeout = timeout

        self._client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            default_headers=self._build_default_headers() or None,
            **kwargs,
        )

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        self._client.close()

    def complete(self, prompt: str, history: Sequence[Turn]) -> str:
        logger = LOGGER.bind(model=self.model, history_turns=len(history))
        messages = build_messages(self.preamble, prompt, history)

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except Exception as exc:
            logger.error("completion.api_error", error=str(exc))
            raise ServiceError(f"Completion API error: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        if not choices or choices[0].message is None:
            logger.error("completion.empty_response")
            raise ServiceError("Completion response did not include a message")
        content = choices[0].message.content
        if content is None:
            logger.error("completion.missing_content")
            raise ServiceError("Completion response did not include any content")

        usage = getattr(response, "usage", None)
        logger.info(
            "completion.success",
            usage=usage.model_dump() if usage is not None else None,
            reply_chars=len(content),
        )
        return content

    def _build_default_headers(self) -> Dict[str, str]:
        return {}


class OpenRouterProvider(OpenAIChatProvider):
    """Same wire protocol routed through OpenRouter."""

    api_key_env = "OPENROUTER_API_KEY"
    default_base_url = OPENROUTER_BASE_URL

    def __init__(self, *, app_name: Optional[str] = None, site_url: Optional[str] = None, **kwargs: Any) -> None:
        self.app_name = app_name or os.getenv("OPENROUTER_APP_NAME")
        self.site_url = site_url or os.getenv("OPENROUTER_SITE_URL")
        super().__init__(**kwargs)

    def _build_default_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.app_name:
            headers["X-Title"] = self.app_name
        if self.site_url:
            headers["HTTP-Referer"] = self.site_url
        return headers


ProviderFactory.register("openai", OpenAIChatProvider)
ProviderFactory.register("openrouter", OpenRouterProvider)
