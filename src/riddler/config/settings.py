"""Runtime configuration for the guardian and the save slot."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import orjson

from ..core.guardian import GUARDIAN_PREAMBLE
from ..core.persistence import DEFAULT_SAVE_PATH
from ..providers.openai_chat import DEFAULT_MODEL, DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT

DEFAULT_CONFIG_PATH = Path("config/riddler.local.json")
DEFAULT_PROVIDER = "openai"

ENV_OVERRIDES: Dict[str, str] = {
    "RIDDLER_PROVIDER": "provider",
    "RIDDLER_MODEL": "model",
    "RIDDLER_SAVE_PATH": "save_path",
}


@dataclass(slots=True)
class GuardianConfig:
    """Provider and persistence settings."""

    provider: str = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT
    base_url: Optional[str] = None
    preamble: str = GUARDIAN_PREAMBLE
    save_path: Path = DEFAULT_SAVE_PATH

    def provider_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for :meth:`ProviderFactory.create`."""

        kwargs: Dict[str, Any] = {
            "preamble": self.preamble,
            "model": self.model,
            "temperature": self.temperature,
            "timeout": self.timeout,
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return kwargs


def _as_float(key: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config value '{key}' must be a number, got {value!r}") from exc


def load_config(path: Path = DEFAULT_CONFIG_PATH, *, environ: Optional[Dict[str, str]] = None) -> GuardianConfig:
    """Load configuration from disk, falling back to defaults.

    Environment variables (``RIDDLER_PROVIDER``, ``RIDDLER_MODEL`` and
    ``RIDDLER_SAVE_PATH``) take precedence over the file.
    """

    config = GuardianConfig()
    if path.exists():
        data = orjson.loads(path.read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        config = _apply(config, data)

    env = os.environ if environ is None else environ
    overrides = {attr: env[name] for name, attr in ENV_OVERRIDES.items() if env.get(name)}
    if overrides:
        config = _apply(config, overrides)
    return config


def _apply(config: GuardianConfig, data: Dict[str, Any]) -> GuardianConfig:
    updates: Dict[str, Any] = {}
    if data.get("provider"):
        updates["provider"] = str(data["provider"])
    if data.get("model"):
        updates["model"] = str(data["model"])
    if "temperature" in data:
        updates["temperature"] = _as_float("temperature", data["temperature"])
    if "timeout" in data:
        updates["timeout"] = _as_float("timeout", data["timeout"])
    if "base_url" in data:
        updates["base_url"] = str(data["base_url"]) if data["base_url"] else None
    if data.get("preamble"):
        updates["preamble"] = str(data["preamble"])
    if data.get("save_path"):
        updates["save_path"] = Path(data["save_path"])
    # Any other keys are ignored
    return replace(config, **updates)
