"""
Host facts schema.

Strongly typed contract between inspectors and renderers.
Inspectors produce these models once; renderers only read them.
"""

import ipaddress
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


FALLBACK_NAMESERVER = "8.8.8.8"
BY_UUID_DIR = "/dev/disk/by-uuid"

_FROZEN = {"frozen": True, "extra": "forbid"}


# --- Host profile ---


class Provider(str, Enum):
    GENERIC = "generic"
    HETZNERCLOUD = "hetznercloud"
    DIGITALOCEAN = "digitalocean"
    AMAZON = "amazon"


class HostProfile(BaseModel):
    """Firmware, architecture and hosting provider. Detected once at start."""

    provider: Provider = Provider.GENERIC
    is_efi: bool
    is_x86_64: bool
    hostname: str = ""
    domain: str = ""

    model_config = _FROZEN


# --- Boot target ---


class EfiTarget(BaseModel):
    """ESP referenced by its stable /dev/disk/by-uuid alias."""

    kind: Literal["efi"] = "efi"
    esp_device_id: str

    model_config = _FROZEN

    @field_validator("esp_device_id")
    @classmethod
    def _by_uuid_only(cls, v: str) -> str:
        # Device nodes like /dev/vda1 may be renumbered after the rootfs swap.
        if not v.startswith(BY_UUID_DIR + "/"):
            raise ValueError(f"ESP must be referenced by {BY_UUID_DIR}/*, got {v!r}")
        return v


class LegacyTarget(BaseModel):
    """Whole disk that GRUB is installed to on BIOS hosts."""

    kind: Literal["legacy"] = "legacy"
    grub_device_path: str

    model_config = _FROZEN


BootTarget = Annotated[Union[EfiTarget, LegacyTarget], Field(discriminator="kind")]


# --- Root filesystem ---


class RootFsInfo(BaseModel):
    source_device: str
    fs_type: str

    model_config = _FROZEN


# --- Swap ---


class ExistingSwap(BaseModel):
    """Block-device swap already active on the host; reused by the new system."""

    kind: Literal["existing"] = "existing"
    device_path: str

    model_config = _FROZEN


class EphemeralSwapFile(BaseModel):
    """Install-time swap file. Never persisted into rendered configuration."""

    kind: Literal["ephemeral"] = "ephemeral"
    path: str = "/tmp/nixinfect.swp"
    size_mb: int = 512

    model_config = _FROZEN


class NoSwap(BaseModel):
    """No disk swap; the rendered system relies on zram swap."""

    kind: Literal["none"] = "none"

    model_config = _FROZEN


SwapPlan = Annotated[Union[ExistingSwap, EphemeralSwapFile, NoSwap], Field(discriminator="kind")]


# --- Network ---


class IpAddress(BaseModel):
    address: str
    prefix_length: int

    model_config = _FROZEN


def is_loopback(address: str) -> bool:
    """True for 127.0.0.0/8 and ::1. Unparseable entries are not loopback."""
    try:
        return ipaddress.ip_address(address.split("%", 1)[0]).is_loopback
    except ValueError:
        return False


class NetworkSnapshot(BaseModel):
    """Static network settings of the primary interface, in discovery order."""

    primary_interface_name: str
    ipv4_addresses: List[IpAddress] = Field(default_factory=list)
    ipv6_addresses: List[IpAddress] = Field(default_factory=list)
    gateway4: Optional[str] = None
    gateway6: Optional[str] = None
    nameservers: List[str] = Field(default_factory=list)
    uses_predictable_naming: bool = False
    mac_address: Optional[str] = None

    model_config = _FROZEN

    @field_validator("nameservers")
    @classmethod
    def _replace_loopback(cls, v: List[str]) -> List[str]:
        # A resolver on loopback belongs to the old userland (systemd-resolved,
        # dnsmasq) and will not exist in the new system.
        return [FALLBACK_NAMESERVER if is_loopback(ns) else ns for ns in v]


# --- Root facts ---


class HostFacts(BaseModel):
    """
    Everything the renderers need, collected in one pass.
    Serialized as host-facts.json for --from-facts re-renders.
    """

    profile: HostProfile
    boot: BootTarget
    rootfs: RootFsInfo
    swap: SwapPlan
    network: NetworkSnapshot
    authorized_keys: List[str] = Field(default_factory=list)

    model_config = _FROZEN


class RenderedConfig(BaseModel):
    """Rendered file contents keyed by path relative to the output directory."""

    files: Dict[str, str] = Field(default_factory=dict)

    model_config = _FROZEN
