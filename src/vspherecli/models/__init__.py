"""Data models."""

from .config import AuthConfig, ProfileConfig
from .customization import (
    AdapterMapping,
    AdapterSettings,
    CustomizationSpec,
    CustomizationSpecInfo,
    CustomizationSpecItem,
    CustomizeOptions,
    DhcpIpGenerator,
    FixedIp,
    FixedName,
    GlobalIPSettings,
    IPSettings,
    LinuxPrep,
    PrefixName,
    Sysprep,
    VirtualMachineName,
)
from .vm import TaskStatus, VMSummary

__all__ = [
    "AdapterMapping",
    "AdapterSettings",
    "AuthConfig",
    "CustomizationSpec",
    "CustomizationSpecInfo",
    "CustomizationSpecItem",
    "CustomizeOptions",
    "DhcpIpGenerator",
    "FixedIp",
    "FixedName",
    "GlobalIPSettings",
    "IPSettings",
    "LinuxPrep",
    "PrefixName",
    "ProfileConfig",
    "Sysprep",
    "TaskStatus",
    "VMSummary",
    "VirtualMachineName",
]
