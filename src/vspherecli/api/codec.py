"""Conversion between customization models and vSphere REST payloads."""

import ipaddress
from typing import Any

from .exceptions import APIError, ValidationError
from ..models.customization import (
    AdapterMapping,
    CustomizationSpec,
    CustomizationSpecInfo,
    CustomizationSpecItem,
    DhcpIpGenerator,
    FixedIp,
    FixedName,
    GlobalIPSettings,
    GuiUnattended,
    Identification,
    IPSettings,
    LinuxPrep,
    PrefixName,
    Sysprep,
    UnassignedIpGenerator,
    UserData,
    UserInputIpGenerator,
    UserInputName,
    VirtualMachineName,
)


def netmask_to_prefix(netmask: str) -> int:
    """Convert a dotted netmask to a prefix length.

    Args:
        netmask: Netmask, e.g. 255.255.255.0

    Returns:
        Prefix length, e.g. 24

    Raises:
        ValidationError: If the netmask is not a valid IPv4 netmask
    """
    try:
        return ipaddress.IPv4Network(f"0.0.0.0/{netmask}").prefixlen
    except ValueError:
        raise ValidationError(f"Invalid netmask '{netmask}'")


def prefix_to_netmask(prefix: int) -> str:
    """Convert a prefix length to a dotted netmask."""
    return str(ipaddress.IPv4Network(f"0.0.0.0/{prefix}").netmask)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ── Encoding ─────────────────────────────────────────────────────────────


def _encode_host_name(generator: Any) -> dict[str, Any]:
    if isinstance(generator, FixedName):
        return {"type": "FIXED", "fixed_name": generator.name}
    if isinstance(generator, PrefixName):
        return {"type": "PREFIX", "prefix": generator.base}
    return {"type": generator.type}


def _encode_identity(identity: LinuxPrep | Sysprep) -> dict[str, Any]:
    if isinstance(identity, LinuxPrep):
        return {
            "linux_config": _drop_none({
                "hostname": _encode_host_name(identity.host_name),
                "domain": identity.domain,
                "time_zone": identity.time_zone,
                "script_text": identity.script_text,
            })
        }

    ident = identity.identification
    if ident.join_domain:
        domain = _drop_none({
            "type": "DOMAIN",
            "domain": ident.join_domain,
            "domain_username": ident.domain_admin,
        })
    else:
        domain = {"type": "WORKGROUP", "workgroup": ident.join_workgroup or "WORKGROUP"}

    gui = identity.gui_unattended
    user = identity.user_data
    sysprep = {
        "gui_unattended": _drop_none({
            "auto_logon": gui.auto_logon,
            "auto_logon_count": gui.auto_logon_count,
            "time_zone": gui.time_zone,
        }),
        "user_data": _drop_none({
            "computer_name": _encode_host_name(user.computer_name),
            "full_name": user.full_name,
            "organization": user.org_name,
            "product_key": user.product_id,
        }),
        "domain": domain,
    }
    return {"windows_config": _drop_none({"reboot": identity.reboot, "sysprep": sysprep})}


def _encode_adapter(nic: AdapterMapping, windows: bool) -> dict[str, Any]:
    settings = nic.adapter
    adapter: dict[str, Any] = {}

    if settings.ip is not None:
        ipv4: dict[str, Any] = {"type": settings.ip.type}
        if isinstance(settings.ip, FixedIp):
            ipv4["ip_address"] = settings.ip.ip_address
            if settings.subnet_mask:
                ipv4["prefix"] = netmask_to_prefix(settings.subnet_mask)
        if settings.gateway:
            ipv4["gateways"] = list(settings.gateway)
        adapter["ipv4"] = ipv4

    if windows and (settings.dns_server_list or settings.dns_domain):
        adapter["windows"] = _drop_none({
            "dns_servers": list(settings.dns_server_list) or None,
            "dns_domain": settings.dns_domain,
        })

    return _drop_none({"mac_address": nic.mac_address, "adapter": adapter})


def spec_to_api(spec: CustomizationSpec) -> dict[str, Any]:
    """Encode a customization spec as a REST payload.

    Args:
        spec: Customization spec

    Returns:
        JSON-serializable dict

    Raises:
        ValidationError: If an adapter netmask is invalid
    """
    windows = isinstance(spec.identity, Sysprep)
    return {
        "configuration_spec": _encode_identity(spec.identity),
        "global_DNS_settings": {
            "dns_servers": list(spec.global_ip_settings.dns_server_list),
            "dns_suffix_list": list(spec.global_ip_settings.dns_suffix_list),
        },
        "interfaces": [_encode_adapter(nic, windows) for nic in spec.nic_setting_map],
    }


# ── Decoding ─────────────────────────────────────────────────────────────


def _decode_host_name(data: dict[str, Any] | None) -> Any:
    data = data or {}
    kind = data.get("type", "VIRTUAL_MACHINE")
    if kind == "FIXED":
        return FixedName(name=data.get("fixed_name", ""))
    if kind == "PREFIX":
        return PrefixName(base=data.get("prefix", ""))
    if kind == "USER_INPUT_REQUIRED":
        return UserInputName()
    return VirtualMachineName()


def _decode_identity(data: dict[str, Any]) -> LinuxPrep | Sysprep:
    if data.get("windows_config"):
        config = data["windows_config"]
        sysprep = config.get("sysprep") or {}
        gui = sysprep.get("gui_unattended") or {}
        user = sysprep.get("user_data") or {}
        domain = sysprep.get("domain") or {}
        return Sysprep(
            reboot=config.get("reboot"),
            gui_unattended=GuiUnattended(
                auto_logon=gui.get("auto_logon", False),
                auto_logon_count=gui.get("auto_logon_count", 0),
                time_zone=gui.get("time_zone"),
            ),
            user_data=UserData(
                computer_name=_decode_host_name(user.get("computer_name")),
                full_name=user.get("full_name") or "",
                org_name=user.get("organization") or "",
                product_id=user.get("product_key") or "",
            ),
            identification=Identification(
                join_domain=domain.get("domain") if domain.get("type") == "DOMAIN" else None,
                join_workgroup=domain.get("workgroup"),
                domain_admin=domain.get("domain_username"),
            ),
        )

    if data.get("linux_config"):
        config = data["linux_config"]
        return LinuxPrep(
            host_name=_decode_host_name(config.get("hostname")),
            domain=config.get("domain"),
            time_zone=config.get("time_zone"),
            script_text=config.get("script_text"),
        )

    raise APIError("Customization spec has neither a Linux nor a Windows configuration")


_IP_GENERATORS = {
    "DHCP": DhcpIpGenerator,
    "UNASSIGNED": UnassignedIpGenerator,
    "USER_INPUT_REQUIRED": UserInputIpGenerator,
}


def _decode_adapter(data: dict[str, Any]) -> AdapterMapping:
    adapter = data.get("adapter") or {}
    ipv4 = adapter.get("ipv4") or {}
    windows = adapter.get("windows") or {}

    ip = None
    subnet_mask = None
    kind = ipv4.get("type")
    if kind == "STATIC":
        ip = FixedIp(ip_address=ipv4.get("ip_address", ""))
        if ipv4.get("prefix") is not None:
            subnet_mask = prefix_to_netmask(ipv4["prefix"])
    elif kind in _IP_GENERATORS:
        ip = _IP_GENERATORS[kind]()

    return AdapterMapping(
        mac_address=data.get("mac_address"),
        adapter=IPSettings(
            ip=ip,
            subnet_mask=subnet_mask,
            gateway=ipv4.get("gateways") or [],
            dns_server_list=windows.get("dns_servers") or [],
            dns_domain=windows.get("dns_domain"),
        ),
    )


def spec_from_api(data: dict[str, Any]) -> CustomizationSpec:
    """Decode a REST customization spec payload.

    Args:
        data: ``spec`` object of a customization spec response

    Returns:
        Customization spec

    Raises:
        APIError: If the payload has no identity configuration
    """
    dns = data.get("global_DNS_settings") or {}
    return CustomizationSpec(
        identity=_decode_identity(data.get("configuration_spec") or {}),
        global_ip_settings=GlobalIPSettings(
            dns_server_list=dns.get("dns_servers") or [],
            dns_suffix_list=dns.get("dns_suffix_list") or [],
        ),
        nic_setting_map=[_decode_adapter(i) for i in data.get("interfaces") or []],
    )


def spec_item_from_api(name: str, data: dict[str, Any]) -> CustomizationSpecItem:
    """Decode a stored customization spec response."""
    return CustomizationSpecItem(
        name=data.get("name", name),
        description=data.get("description"),
        spec=spec_from_api(data.get("spec") or {}),
    )


def spec_info_from_api(data: dict[str, Any]) -> CustomizationSpecInfo:
    """Decode an entry of the customization spec listing."""
    return CustomizationSpecInfo(
        name=data["name"],
        description=data.get("description"),
        os_type=data.get("OS_type"),
        last_modified=data.get("last_modified"),
    )
