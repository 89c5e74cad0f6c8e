"""Map customize command options onto a guest customization spec.

The identity of a spec is either a :class:`LinuxPrep` or a :class:`Sysprep`.
General settings (domain, host name, time zone) live in a different place
for each variant, so they go through the ``set_*`` helpers below rather than
being assigned directly.

Network options arrive as parallel lists (``--ip``, ``--netmask``, ``--mac``,
``--gateway``, ``--dns-server``) where index *i* of every list describes the
*i*-th adapter. :func:`build_adapter_settings` folds them into one record per
adapter before anything touches the spec.
"""

import re
from typing import TYPE_CHECKING

from .api.exceptions import SpecNotFoundError, UsageError, ValidationError
from .models.customization import (
    AdapterMapping,
    AdapterSettings,
    CustomizationSpec,
    CustomizeOptions,
    DhcpIpGenerator,
    FixedIp,
    FixedName,
    HostNameGenerator,
    LinuxPrep,
    PrefixName,
    Sysprep,
    UserData,
    VirtualMachineName,
)

if TYPE_CHECKING:
    from .api.client import VSphereClient

DHCP = "dhcp"
KINDS = ("Linux", "Windows")

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_HEX_RE = re.compile(r"[+-]?[0-9A-Fa-f]+")


def new_spec(kind: str, nic_count: int) -> CustomizationSpec:
    """Create an empty spec for the given customization type.

    Args:
        kind: Customization type, ``Linux`` or ``Windows``
        nic_count: Number of adapter slots to allocate

    Returns:
        New customization spec

    Raises:
        UsageError: If kind is not a known customization type
    """
    if kind == "Linux":
        identity = LinuxPrep(host_name=VirtualMachineName())
    elif kind == "Windows":
        identity = Sysprep(user_data=UserData(computer_name=VirtualMachineName()))
    else:
        raise UsageError(
            f"Invalid customization type '{kind}' (expected one of: {', '.join(KINDS)})"
        )

    return CustomizationSpec(
        identity=identity,
        nic_setting_map=[AdapterMapping() for _ in range(nic_count)],
    )


async def resolve_spec(
    client: "VSphereClient", options: CustomizeOptions, name: str | None = None
) -> CustomizationSpec:
    """Get the spec to customize: a new one, or a stored one by name.

    Args:
        client: Connected vSphere client
        options: Customize options
        name: Stored customization spec name

    Returns:
        Customization spec to mutate

    Raises:
        UsageError: If no name is given and the customization type is unknown
        SpecNotFoundError: If the named spec does not exist
    """
    if not name:
        return new_spec(options.kind, len(options.ip))

    if not await client.customization_spec_exists(name):
        raise SpecNotFoundError(name)

    item = await client.get_customization_spec(name)
    return item.spec


def _split(value: str) -> list[str]:
    return value.split(",")


def build_adapter_settings(options: CustomizeOptions) -> list[AdapterSettings]:
    """Assemble one settings record per ``--ip`` entry.

    Lists shorter than ``ip`` leave the matching fields unset.

    Args:
        options: Customize options

    Returns:
        Adapter settings in adapter order
    """
    records = []
    for i, ip in enumerate(options.ip):
        records.append(
            AdapterSettings(
                ip=ip,
                netmask=options.netmask[i] if i < len(options.netmask) else None,
                mac=options.mac[i] if i < len(options.mac) else None,
                gateways=_split(options.gateway[i]) if i < len(options.gateway) else None,
                dns_servers=_split(options.dns_server[i]) if i < len(options.dns_server) else None,
            )
        )
    return records


def is_windows(spec: CustomizationSpec) -> bool:
    """Check whether the spec carries a Windows (sysprep) identity."""
    return isinstance(spec.identity, Sysprep)


def set_domain(spec: CustomizationSpec, domain: str) -> None:
    """Set the domain to join (Windows) or the DNS domain (Linux)."""
    identity = spec.identity
    if isinstance(identity, Sysprep):
        identity.identification.join_domain = domain
    else:
        identity.domain = domain


def set_host_name(spec: CustomizationSpec, generator: HostNameGenerator) -> None:
    """Set the computer name (Windows) or host name (Linux) generator."""
    identity = spec.identity
    if isinstance(identity, Sysprep):
        identity.user_data.computer_name = generator
    else:
        identity.host_name = generator


def parse_windows_time_zone(tz: str) -> int:
    """Parse a Microsoft time zone index given in hex.

    Args:
        tz: Hex index, e.g. ``035`` for Eastern Standard Time

    Returns:
        Time zone index

    Raises:
        ValidationError: If the value is not a signed 32-bit hex integer
    """
    if not _HEX_RE.fullmatch(tz):
        raise ValidationError(f"Converting --tz='{tz}': invalid hex time zone index")
    value = int(tz, 16)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValidationError(f"Converting --tz='{tz}': value out of range")
    return value


def set_time_zone(spec: CustomizationSpec, tz: str) -> None:
    """Set the time zone: hex index (Windows) or tz database name (Linux)."""
    identity = spec.identity
    if isinstance(identity, Sysprep):
        identity.gui_unattended.time_zone = parse_windows_time_zone(tz)
    else:
        identity.time_zone = tz


def set_auto_logon(spec: CustomizationSpec, count: int) -> None:
    """Enable administrator auto-logon. Windows only.

    Raises:
        ValidationError: If the spec has a Linux identity
    """
    identity = spec.identity
    if not isinstance(identity, Sysprep):
        raise ValidationError("Option '--auto-login' is Windows only")
    identity.gui_unattended.auto_logon = True
    identity.gui_unattended.auto_logon_count = count


def apply_adapter(nic: AdapterMapping, settings: AdapterSettings, windows: bool) -> None:
    """Apply one adapter settings record to an adapter slot.

    Args:
        nic: Adapter slot of the spec
        settings: Settings assembled from the options
        windows: Whether per-adapter DNS servers apply
    """
    if settings.ip == DHCP:
        nic.adapter.ip = DhcpIpGenerator()
    else:
        nic.adapter.ip = FixedIp(ip_address=settings.ip)

    if settings.netmask is not None:
        nic.adapter.subnet_mask = settings.netmask
    if settings.mac is not None:
        nic.mac_address = settings.mac
    if settings.gateways is not None:
        nic.adapter.gateway = settings.gateways
    # Windows configures DNS per adapter, Linux through the global settings
    if windows and settings.dns_servers is not None:
        nic.adapter.dns_server_list = settings.dns_servers


def apply_options(
    spec: CustomizationSpec, options: CustomizeOptions, name: str | None = None
) -> CustomizationSpec:
    """Apply customize options to a spec in place.

    Args:
        spec: Customization spec to mutate
        options: Customize options
        name: Stored spec name, used in error messages

    Returns:
        The same spec, mutated

    Raises:
        ValidationError: If more ``--ip`` values than adapters are given, if
            auto-logon is requested for Linux, or if a Windows time zone
            is not a hex index
    """
    if len(options.ip) > len(spec.nic_setting_map):
        raise ValidationError(
            f"{len(options.ip)} --ip specified, spec '{name or ''}' has "
            f"{len(spec.nic_setting_map)} adapter(s)"
        )

    windows = is_windows(spec)

    if options.domain:
        set_domain(spec, options.domain)

    if options.dns_server and not windows:
        for entry in options.dns_server:
            spec.global_ip_settings.dns_server_list.extend(_split(entry))

    if options.prefix:
        set_host_name(spec, PrefixName(base=options.prefix))

    if options.host_name:
        set_host_name(spec, FixedName(name=options.host_name))

    if options.auto_login != 0:
        set_auto_logon(spec, options.auto_login)

    if options.tz:
        set_time_zone(spec, options.tz)

    for nic, settings in zip(spec.nic_setting_map, build_adapter_settings(options)):
        apply_adapter(nic, settings, windows)

    return spec
