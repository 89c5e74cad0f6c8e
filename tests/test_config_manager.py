import pytest
import yaml

from vspherecli.api.exceptions import ConfigError
from vspherecli.config import AuthConfig, ConfigManager, ProfileConfig
from vspherecli.crypto import AGE_PREFIX


@pytest.fixture
def manager(tmp_path):
    return ConfigManager(config_dir=tmp_path / "vspherecli")


def _profile(host: str, password: str = "secret") -> ProfileConfig:
    return ProfileConfig(
        host=host,
        auth=AuthConfig(type="password", user="administrator@vsphere.local", password=password),
    )


def test_missing_config_file(manager):
    with pytest.raises(ConfigError, match="config add"):
        manager.load()


def test_first_profile_becomes_default(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com"))
    manager.add_profile("prod", _profile("vc-prod.example.com"))

    reloaded = ConfigManager(config_dir=manager.config_dir)

    assert reloaded.get().default_profile == "lab"
    assert reloaded.get_profile().host == "vc-lab.example.com"
    assert reloaded.get_profile("prod").host == "vc-prod.example.com"
    assert reloaded.list_profiles() == ["lab", "prod"]


def test_secrets_are_encrypted_on_disk(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com", password="hunter2"))

    raw = yaml.safe_load(manager.config_file.read_text())
    stored = raw["profiles"]["lab"]["auth"]["password"]

    assert stored.startswith(AGE_PREFIX)
    assert "hunter2" not in manager.config_file.read_text()
    assert ConfigManager(config_dir=manager.config_dir).get_profile("lab").auth.password == "hunter2"


def test_plaintext_secret_is_reencrypted_on_load(manager):
    manager.config_dir.mkdir(parents=True)
    manager.config_file.write_text(yaml.safe_dump({
        "default_profile": "lab",
        "profiles": {
            "lab": {
                "host": "vc-lab.example.com",
                "auth": {"type": "session", "user": "svc", "session_id": "abc123"},
            }
        },
    }))

    profile = manager.get_profile()

    assert profile.auth.session_id == "abc123"
    raw = yaml.safe_load(manager.config_file.read_text())
    assert raw["profiles"]["lab"]["auth"]["session_id"].startswith(AGE_PREFIX)


def test_unknown_profile(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com"))

    with pytest.raises(ConfigError, match="Profile 'prod' not found"):
        manager.get_profile("prod")


def test_remove_default_profile_moves_default(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com"))
    manager.add_profile("prod", _profile("vc-prod.example.com"))

    manager.remove_profile("lab")

    assert manager.get().default_profile == "prod"
    with pytest.raises(ConfigError):
        manager.remove_profile("lab")


def test_set_default_profile(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com"))
    manager.add_profile("prod", _profile("vc-prod.example.com"))

    manager.set_default_profile("prod")

    assert ConfigManager(config_dir=manager.config_dir).get().default_profile == "prod"


def test_invalid_auth_type_rejected():
    with pytest.raises(ValueError):
        AuthConfig(type="token", user="svc")


def test_password_required_for_password_auth():
    with pytest.raises(ValueError, match="password required"):
        AuthConfig(type="password", user="svc")


def test_undecryptable_secret_is_a_config_error(manager):
    manager.config_dir.mkdir(parents=True)
    manager.config_file.write_text(yaml.safe_dump({
        "default_profile": "lab",
        "profiles": {
            "lab": {
                "host": "vc-lab.example.com",
                "auth": {"type": "password", "user": "svc", "password": AGE_PREFIX + "garbage"},
            }
        },
    }))

    with pytest.raises(ConfigError, match="Cannot decrypt password of profile 'lab'"):
        manager.load()


def test_save_restricts_permissions(manager):
    manager.add_profile("lab", _profile("vc-lab.example.com"))

    assert manager.config_file.stat().st_mode & 0o777 == 0o600
    assert manager.config_dir.stat().st_mode & 0o777 == 0o700
    assert not manager.config_file.with_suffix(".tmp").exists()


def test_legacy_output_section_is_ignored(manager):
    manager.config_dir.mkdir(parents=True)
    manager.config_file.write_text(yaml.safe_dump({
        "default_profile": "lab",
        "output": {"format": "table", "colors": True},
        "profiles": {
            "lab": {
                "host": "vc-lab.example.com",
                "auth": {"type": "session", "user": "svc", "session_id": "abc123"},
            }
        },
    }))

    assert manager.get_profile().host == "vc-lab.example.com"
    assert "output" not in yaml.safe_load(manager.config_file.read_text())
