"""CLI commands."""

from . import config, main, vm

__all__ = ["config", "main", "vm"]
