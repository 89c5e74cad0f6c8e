"""Connection profiles for vspherecli.

Profiles live in ``~/.config/vspherecli/config.yaml``. The password or
session id of each profile is stored age-encrypted (see :mod:`vspherecli.crypto`);
a secret written by hand in plaintext is encrypted the next time the file is
loaded.
"""

import os
from pathlib import Path

import pyrage
import yaml
from pydantic import BaseModel, Field

from ..api.exceptions import ConfigError
from ..crypto import decrypt, encrypt, is_encrypted
from ..models.config import ProfileConfig

_SECRET_FIELDS = ("password", "session_id")


class Config(BaseModel):
    """Contents of the config file."""

    default_profile: str | None = None
    profiles: dict[str, ProfileConfig] = Field(default_factory=dict)


class ConfigManager:
    """Read and write vspherecli profiles."""

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or Path.home() / ".config" / "vspherecli"
        self.config_file = self.config_dir / "config.yaml"
        self.identity_file = self.config_dir / ".age-identity"
        self._config: Config | None = None

    def exists(self) -> bool:
        return self.config_file.exists()

    def load(self) -> Config:
        """Load the config file, decrypting secrets.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        if not self.exists():
            raise ConfigError(
                f"Configuration file not found at {self.config_file}. "
                "Run 'vspherecli config add' to create one."
            )

        try:
            data = yaml.safe_load(self.config_file.read_text()) or {}
            config = Config.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to load config: {e}")

        if self._reveal_secrets(config):
            self.save(config)
        self._config = config
        return config

    def save(self, config: Config) -> None:
        """Write the config file with secrets encrypted.

        The file is replaced atomically and is only readable by the owner.

        Raises:
            ConfigError: If the file cannot be written
        """
        data = config.model_dump(exclude_none=True)
        for profile in data["profiles"].values():
            auth = profile["auth"]
            for field in _SECRET_FIELDS:
                if auth.get(field):
                    auth[field] = encrypt(auth[field], self.identity_file)

        tmp_file = self.config_file.with_suffix(".tmp")
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(self.config_dir, 0o700)
            tmp_file.write_text(yaml.safe_dump(data, default_flow_style=False))
            os.chmod(tmp_file, 0o600)
            os.replace(tmp_file, self.config_file)
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}")
        self._config = config

    def get(self) -> Config:
        """Return the loaded config, loading it on first use."""
        if self._config is None:
            self.load()
        return self._config

    def _require(self, config: Config, name: str) -> ProfileConfig:
        if name not in config.profiles:
            available = ", ".join(config.profiles) or "none"
            raise ConfigError(f"Profile '{name}' not found. Available profiles: {available}")
        return config.profiles[name]

    def get_profile(self, name: str | None = None) -> ProfileConfig:
        """Return the named profile, or the default one when name is None.

        Raises:
            ConfigError: If there is no such profile or no default is set
        """
        config = self.get()
        if name is None:
            name = config.default_profile
            if name is None:
                raise ConfigError("No default profile set. Use --profile to specify one.")
        return self._require(config, name)

    def add_profile(self, name: str, profile: ProfileConfig) -> None:
        """Store a profile. The first profile stored becomes the default."""
        config = self.get() if self.exists() else Config()
        config.profiles[name] = profile
        config.default_profile = config.default_profile or name
        self.save(config)

    def remove_profile(self, name: str) -> None:
        """Delete a profile, moving the default to the next remaining one."""
        config = self.get()
        self._require(config, name)
        del config.profiles[name]
        if config.default_profile == name:
            config.default_profile = next(iter(config.profiles), None)
        self.save(config)

    def set_default_profile(self, name: str) -> None:
        config = self.get()
        self._require(config, name)
        config.default_profile = name
        self.save(config)

    def list_profiles(self) -> list[str]:
        return list(self.get().profiles)

    def _reveal_secrets(self, config: Config) -> bool:
        """Decrypt secrets in place. Returns True if any was stored in plaintext."""
        plaintext = False
        for name, profile in config.profiles.items():
            for field in _SECRET_FIELDS:
                value = getattr(profile.auth, field)
                if not value:
                    continue
                if is_encrypted(value):
                    try:
                        setattr(profile.auth, field, decrypt(value, self.identity_file))
                    except (pyrage.DecryptError, ValueError) as e:
                        raise ConfigError(f"Cannot decrypt {field} of profile '{name}': {e}")
                else:
                    plaintext = True
        return plaintext
