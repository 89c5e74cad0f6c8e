import pytest

from vspherecli.models.config import AuthConfig, ProfileConfig
from vspherecli.models.customization import CustomizationSpecItem


@pytest.fixture
def profile_config():
    return ProfileConfig(
        host="vcenter.example.com",
        verify_ssl=False,
        auth=AuthConfig(type="password", user="administrator@vsphere.local", password="secret"),
    )


class FakeSpecManager:
    """Stands in for the client's customization spec lookups."""

    def __init__(self, specs: dict[str, CustomizationSpecItem] | None = None):
        self.specs = specs or {}
        self.calls: list[tuple[str, str]] = []

    async def customization_spec_exists(self, name: str) -> bool:
        self.calls.append(("exists", name))
        return name in self.specs

    async def get_customization_spec(self, name: str) -> CustomizationSpecItem:
        self.calls.append(("get", name))
        return self.specs[name]


@pytest.fixture
def spec_manager():
    return FakeSpecManager()
