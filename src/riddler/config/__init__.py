"""Configuration loading."""

from . import settings
from .settings import GuardianConfig, load_config

__all__ = ["GuardianConfig", "load_config", "settings"]
