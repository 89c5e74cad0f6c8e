import asyncio

import pytest

from vspherecli.api.exceptions import NetworkError, SpecNotFoundError, UsageError, ValidationError
from vspherecli.customize import (
    apply_options,
    build_adapter_settings,
    new_spec,
    parse_windows_time_zone,
    resolve_spec,
)
from vspherecli.models.customization import (
    AdapterMapping,
    CustomizationSpec,
    CustomizationSpecItem,
    CustomizeOptions,
    DhcpIpGenerator,
    FixedIp,
    FixedName,
    IPSettings,
    LinuxPrep,
    PrefixName,
    Sysprep,
    VirtualMachineName,
)


def _stored_spec(identity, nics: int) -> CustomizationSpec:
    return CustomizationSpec(
        identity=identity,
        nic_setting_map=[
            AdapterMapping(adapter=IPSettings(ip=DhcpIpGenerator())) for _ in range(nics)
        ],
    )


# ── new_spec ─────────────────────────────────────────────────────────────


def test_new_spec_linux_allocates_one_slot_per_ip():
    spec = new_spec("Linux", 2)

    assert isinstance(spec.identity, LinuxPrep)
    assert isinstance(spec.identity.host_name, VirtualMachineName)
    assert len(spec.nic_setting_map) == 2
    assert spec.global_ip_settings.dns_server_list == []


def test_new_spec_windows_uses_sysprep():
    spec = new_spec("Windows", 0)

    assert isinstance(spec.identity, Sysprep)
    assert isinstance(spec.identity.user_data.computer_name, VirtualMachineName)
    assert spec.nic_setting_map == []


@pytest.mark.parametrize("kind", ["linux", "Solaris", ""])
def test_new_spec_rejects_unknown_type(kind):
    with pytest.raises(UsageError):
        new_spec(kind, 1)


def test_default_kind_is_linux():
    spec = new_spec(CustomizeOptions().kind, 0)
    assert isinstance(spec.identity, LinuxPrep)


# ── resolve_spec ─────────────────────────────────────────────────────────


def test_resolve_spec_without_name_builds_new_spec(spec_manager):
    options = CustomizeOptions(ip=["dhcp", "10.0.0.5"], kind="Windows")

    spec = asyncio.run(resolve_spec(spec_manager, options))

    assert isinstance(spec.identity, Sysprep)
    assert len(spec.nic_setting_map) == 2
    assert spec_manager.calls == []


def test_resolve_spec_missing_name_fails_before_fetch(spec_manager):
    with pytest.raises(SpecNotFoundError) as exc:
        asyncio.run(resolve_spec(spec_manager, CustomizeOptions(), "web-template"))

    assert "web-template" in str(exc.value)
    assert "does not exist" in str(exc.value)
    assert spec_manager.calls == [("exists", "web-template")]


def test_resolve_spec_fetches_stored_spec(spec_manager):
    stored = _stored_spec(LinuxPrep(domain="example.com"), 1)
    spec_manager.specs["web-template"] = CustomizationSpecItem(name="web-template", spec=stored)

    spec = asyncio.run(resolve_spec(spec_manager, CustomizeOptions(kind="bogus"), "web-template"))

    assert spec is stored
    assert spec_manager.calls == [("exists", "web-template"), ("get", "web-template")]


def test_resolve_spec_propagates_lookup_errors(spec_manager):
    async def unreachable(name):
        raise NetworkError("Network error: connection refused")

    spec_manager.customization_spec_exists = unreachable

    with pytest.raises(NetworkError, match="connection refused"):
        asyncio.run(resolve_spec(spec_manager, CustomizeOptions(), "web-template"))

    assert spec_manager.calls == []


# ── build_adapter_settings ───────────────────────────────────────────────


def test_build_adapter_settings_uneven_lists():
    options = CustomizeOptions(
        ip=["10.0.0.5", "dhcp", "10.0.1.5"],
        netmask=["255.255.255.0"],
        mac=["00:50:56:be:dd:f8", "00:50:56:be:60:cf"],
        gateway=["10.0.0.1,10.0.0.2"],
        dns_server=[],
    )

    records = build_adapter_settings(options)

    assert [r.ip for r in records] == ["10.0.0.5", "dhcp", "10.0.1.5"]
    assert [r.netmask for r in records] == ["255.255.255.0", None, None]
    assert [r.mac for r in records] == ["00:50:56:be:dd:f8", "00:50:56:be:60:cf", None]
    assert [r.gateways for r in records] == [["10.0.0.1", "10.0.0.2"], None, None]
    assert [r.dns_servers for r in records] == [None, None, None]


def test_build_adapter_settings_matches_positional_lists_for_all_lengths():
    for n_ip in range(4):
        for n_other in range(5):
            options = CustomizeOptions(
                ip=[f"10.0.0.{i}" for i in range(n_ip)],
                netmask=[f"255.255.{i}.0" for i in range(n_other)],
                mac=[f"00:00:00:00:00:0{i}" for i in range(n_other)],
                gateway=[f"10.0.{i}.1,10.0.{i}.254" for i in range(n_other)],
                dns_server=[f"10.1.{i}.53" for i in range(n_other)],
            )

            records = build_adapter_settings(options)

            assert len(records) == n_ip
            for i, record in enumerate(records):
                assert record.ip == options.ip[i]
                present = i < n_other
                assert record.netmask == (options.netmask[i] if present else None)
                assert record.mac == (options.mac[i] if present else None)
                assert record.gateways == (
                    [f"10.0.{i}.1", f"10.0.{i}.254"] if present else None
                )
                assert record.dns_servers == ([f"10.1.{i}.53"] if present else None)


def test_build_adapter_settings_extra_entries_are_ignored():
    options = CustomizeOptions(ip=["dhcp"], netmask=["255.0.0.0", "255.255.0.0"])

    records = build_adapter_settings(options)

    assert len(records) == 1
    assert records[0].netmask == "255.0.0.0"


# ── apply_options ────────────────────────────────────────────────────────


def test_too_many_ips_fails_without_mutation():
    spec = _stored_spec(LinuxPrep(), 1)
    before = spec.model_dump()
    options = CustomizeOptions(ip=["10.0.0.5", "10.0.0.6", "dhcp"], domain="example.com")

    with pytest.raises(ValidationError) as exc:
        apply_options(spec, options, "web-template")

    message = str(exc.value)
    assert "3 --ip specified" in message
    assert "'web-template'" in message
    assert "1 adapter" in message
    assert spec.model_dump() == before


def test_only_ip_adapters_are_touched():
    spec = _stored_spec(LinuxPrep(), 3)
    options = CustomizeOptions(ip=["10.0.0.5", "10.0.0.6"], netmask=["255.255.255.0"])

    apply_options(spec, options, "web-template")

    assert spec.nic_setting_map[0].adapter.ip == FixedIp(ip_address="10.0.0.5")
    assert spec.nic_setting_map[0].adapter.subnet_mask == "255.255.255.0"
    assert spec.nic_setting_map[1].adapter.ip == FixedIp(ip_address="10.0.0.6")
    assert spec.nic_setting_map[1].adapter.subnet_mask is None
    assert isinstance(spec.nic_setting_map[2].adapter.ip, DhcpIpGenerator)


def test_dhcp_and_fixed_ip_generators():
    spec = new_spec("Linux", 2)

    apply_options(spec, CustomizeOptions(ip=["dhcp", "10.0.0.5"]))

    dhcp = spec.nic_setting_map[0].adapter.ip
    fixed = spec.nic_setting_map[1].adapter.ip
    assert isinstance(dhcp, DhcpIpGenerator)
    assert not hasattr(dhcp, "ip_address")
    assert isinstance(fixed, FixedIp)
    assert fixed.ip_address == "10.0.0.5"


def test_mac_and_gateways_are_set_per_adapter():
    spec = new_spec("Linux", 2)
    options = CustomizeOptions(
        ip=["10.0.0.178", "10.0.0.162"],
        mac=["00:50:56:be:dd:f8", "00:50:56:be:60:cf"],
        gateway=["10.0.0.1,10.0.0.2"],
    )

    apply_options(spec, options)

    assert spec.nic_setting_map[0].mac_address == "00:50:56:be:dd:f8"
    assert spec.nic_setting_map[1].mac_address == "00:50:56:be:60:cf"
    assert spec.nic_setting_map[0].adapter.gateway == ["10.0.0.1", "10.0.0.2"]
    assert spec.nic_setting_map[1].adapter.gateway == []


def test_linux_global_dns_appends_every_entry():
    spec = _stored_spec(LinuxPrep(), 1)
    spec.global_ip_settings.dns_server_list = ["192.168.1.1"]

    apply_options(spec, CustomizeOptions(ip=["dhcp"], dns_server=["8.8.8.8,8.8.4.4", "1.1.1.1"]))

    assert spec.global_ip_settings.dns_server_list == [
        "192.168.1.1", "8.8.8.8", "8.8.4.4", "1.1.1.1",
    ]
    assert spec.nic_setting_map[0].adapter.dns_server_list == []


def test_windows_dns_goes_to_adapters_only():
    spec = new_spec("Windows", 2)

    apply_options(spec, CustomizeOptions(ip=["10.0.0.5", "dhcp"], dns_server=["8.8.8.8,8.8.4.4"]))

    assert spec.global_ip_settings.dns_server_list == []
    assert spec.nic_setting_map[0].adapter.dns_server_list == ["8.8.8.8", "8.8.4.4"]
    assert spec.nic_setting_map[1].adapter.dns_server_list == []


def test_domain_by_identity():
    linux = new_spec("Linux", 0)
    windows = new_spec("Windows", 0)

    apply_options(linux, CustomizeOptions(domain="example.com"))
    apply_options(windows, CustomizeOptions(domain="corp.example.com"))

    assert linux.identity.domain == "example.com"
    assert windows.identity.identification.join_domain == "corp.example.com"


def test_prefix_and_host_name():
    prefixed = new_spec("Linux", 0)
    apply_options(prefixed, CustomizeOptions(prefix="demo"))
    assert prefixed.identity.host_name == PrefixName(base="demo")

    named = new_spec("Windows", 0)
    apply_options(named, CustomizeOptions(prefix="demo", host_name="web01"))
    assert named.identity.user_data.computer_name == FixedName(name="web01")


def test_auto_login_is_windows_only():
    spec = new_spec("Linux", 0)

    with pytest.raises(ValidationError, match="Windows only"):
        apply_options(spec, CustomizeOptions(auto_login=3))


def test_auto_login_on_windows():
    spec = new_spec("Windows", 0)

    apply_options(spec, CustomizeOptions(auto_login=3))

    assert spec.identity.gui_unattended.auto_logon is True
    assert spec.identity.gui_unattended.auto_logon_count == 3


def test_linux_time_zone_is_verbatim():
    spec = new_spec("Linux", 0)

    apply_options(spec, CustomizeOptions(tz="America/New_York"))

    assert spec.identity.time_zone == "America/New_York"


def test_windows_time_zone_is_hex_index():
    spec = new_spec("Windows", 0)

    apply_options(spec, CustomizeOptions(tz="035"))

    assert spec.identity.gui_unattended.time_zone == 0x35


def test_windows_time_zone_rejects_non_hex():
    spec = new_spec("Windows", 0)

    with pytest.raises(ValidationError, match="Converting --tz='ZZZ'"):
        apply_options(spec, CustomizeOptions(tz="ZZZ"))


@pytest.mark.parametrize("tz", ["0x35", " 35 ", "3_5", "", "+"])
def test_windows_time_zone_requires_plain_hex_digits(tz):
    with pytest.raises(ValidationError, match="Converting --tz="):
        parse_windows_time_zone(tz)


def test_windows_time_zone_range():
    assert parse_windows_time_zone("-80000000") == -(2**31)
    with pytest.raises(ValidationError):
        parse_windows_time_zone("80000000")


def test_apply_options_returns_same_spec():
    spec = new_spec("Linux", 0)
    assert apply_options(spec, CustomizeOptions()) is spec
