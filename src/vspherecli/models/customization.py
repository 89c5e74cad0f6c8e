"""Guest customization models."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


# Host name generators


class VirtualMachineName(BaseModel):
    """Use the virtual machine name as the guest host name."""

    type: Literal["VIRTUAL_MACHINE"] = "VIRTUAL_MACHINE"


class FixedName(BaseModel):
    """Fixed guest host name."""

    type: Literal["FIXED"] = "FIXED"
    name: str


class PrefixName(BaseModel):
    """Host name built from a prefix plus a unique suffix."""

    type: Literal["PREFIX"] = "PREFIX"
    base: str


class UserInputName(BaseModel):
    """Host name supplied by the user when the spec is applied."""

    type: Literal["USER_INPUT_REQUIRED"] = "USER_INPUT_REQUIRED"


HostNameGenerator = Annotated[
    Union[VirtualMachineName, FixedName, PrefixName, UserInputName],
    Field(discriminator="type"),
]


# IP address generators


class DhcpIpGenerator(BaseModel):
    """Obtain the adapter address from DHCP."""

    type: Literal["DHCP"] = "DHCP"


class FixedIp(BaseModel):
    """Static adapter address."""

    type: Literal["STATIC"] = "STATIC"
    ip_address: str


class UnassignedIpGenerator(BaseModel):
    """Leave the adapter without an IPv4 address."""

    type: Literal["UNASSIGNED"] = "UNASSIGNED"


class UserInputIpGenerator(BaseModel):
    """Address supplied by the user when the spec is applied."""

    type: Literal["USER_INPUT_REQUIRED"] = "USER_INPUT_REQUIRED"


IpGenerator = Annotated[
    Union[DhcpIpGenerator, FixedIp, UnassignedIpGenerator, UserInputIpGenerator],
    Field(discriminator="type"),
]


# Network settings


class IPSettings(BaseModel):
    """Per-adapter IP settings."""

    ip: IpGenerator | None = None
    subnet_mask: str | None = None
    gateway: list[str] = Field(default_factory=list)
    dns_server_list: list[str] = Field(default_factory=list)
    dns_domain: str | None = None


class AdapterMapping(BaseModel):
    """Settings for one virtual network adapter."""

    mac_address: str | None = None
    adapter: IPSettings = Field(default_factory=IPSettings)


class GlobalIPSettings(BaseModel):
    """Settings shared by all adapters."""

    dns_server_list: list[str] = Field(default_factory=list)
    dns_suffix_list: list[str] = Field(default_factory=list)


# Identity variants


class LinuxPrep(BaseModel):
    """Linux guest identity."""

    type: Literal["LINUX"] = "LINUX"
    host_name: HostNameGenerator = Field(default_factory=VirtualMachineName)
    domain: str | None = None
    time_zone: str | None = None
    script_text: str | None = None


class GuiUnattended(BaseModel):
    """Sysprep unattended settings."""

    auto_logon: bool = False
    auto_logon_count: int = 0
    time_zone: int | None = None


class UserData(BaseModel):
    """Sysprep user data."""

    computer_name: HostNameGenerator = Field(default_factory=VirtualMachineName)
    full_name: str = ""
    org_name: str = ""
    product_id: str = ""


class Identification(BaseModel):
    """Sysprep domain or workgroup membership."""

    join_domain: str | None = None
    join_workgroup: str | None = "WORKGROUP"
    domain_admin: str | None = None


class Sysprep(BaseModel):
    """Windows guest identity."""

    type: Literal["WINDOWS"] = "WINDOWS"
    gui_unattended: GuiUnattended = Field(default_factory=GuiUnattended)
    user_data: UserData = Field(default_factory=UserData)
    identification: Identification = Field(default_factory=Identification)
    reboot: str | None = None


Identity = Annotated[Union[LinuxPrep, Sysprep], Field(discriminator="type")]


class CustomizationSpec(BaseModel):
    """Guest customization specification."""

    identity: Identity
    global_ip_settings: GlobalIPSettings = Field(default_factory=GlobalIPSettings)
    nic_setting_map: list[AdapterMapping] = Field(default_factory=list)


class CustomizationSpecItem(BaseModel):
    """Customization specification stored on the server."""

    name: str
    description: str | None = None
    spec: CustomizationSpec


class CustomizationSpecInfo(BaseModel):
    """Summary entry of a stored customization specification."""

    name: str
    description: str | None = None
    os_type: str | None = None
    last_modified: str | None = None


# Command options


class CustomizeOptions(BaseModel):
    """Options for customizing a VM."""

    auto_login: int = Field(0, description="Windows auto-logon count")
    prefix: str | None = Field(None, description="Host name generator prefix")
    tz: str | None = Field(None, description="Time zone (hex index on Windows)")
    domain: str | None = Field(None, description="Domain name")
    host_name: str | None = Field(None, description="Host name")
    mac: list[str] = Field(default_factory=list, description="MAC addresses")
    ip: list[str] = Field(default_factory=list, description="IP addresses or 'dhcp'")
    gateway: list[str] = Field(default_factory=list, description="Gateways, comma-separated")
    netmask: list[str] = Field(default_factory=list, description="Netmasks")
    dns_server: list[str] = Field(default_factory=list, description="DNS servers, comma-separated")
    kind: str = Field("Linux", description="Customization type (Linux|Windows)")


class AdapterSettings(BaseModel):
    """Settings for one adapter, assembled from the positional option lists."""

    ip: str
    netmask: str | None = None
    mac: str | None = None
    gateways: list[str] | None = None
    dns_servers: list[str] | None = None
