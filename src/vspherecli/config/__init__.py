"""Configuration management."""

from .manager import Config, ConfigManager
from ..models.config import AuthConfig, ProfileConfig

__all__ = ["AuthConfig", "Config", "ConfigManager", "ProfileConfig"]
