"""Service modules for the command line."""

from . import cli

__all__ = ["cli"]
