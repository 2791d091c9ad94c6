"""
Boot-mode inspector: locate the ESP on EFI hosts or the boot disk on BIOS hosts.

EFI hosts get the ESP as a /dev/disk/by-uuid alias; legacy hosts get the first
conventional whole-disk node that exists.
"""

import json
import os
import sys
from pathlib import Path
from typing import Optional, Union

from ..errors import UnsupportedBootConfiguration
from ..executor import Executor
from ..schema import BY_UUID_DIR, EfiTarget, HostProfile, LegacyTarget
from .rootfs import strip_fsroot

_DEBUG = bool(os.environ.get("NIXINFECT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[nixinfect] boot: {msg}", file=sys.stderr)


ESP_MOUNT_CANDIDATES = ("/boot/EFI", "/boot/efi", "/boot")

# virtio, SCSI/SATA, Xen, NVMe
LEGACY_BOOT_DISKS = ("/dev/vda", "/dev/sda", "/dev/xvda", "/dev/nvme0n1")


def _host_path(host_root: Path, path: str) -> Path:
    return Path(host_root) / path.lstrip("/")


def _mount_of(executor: Executor, path: str) -> Optional[dict]:
    """The filesystem containing path, as {"target", "source"}; None if findmnt fails."""
    r = executor(["findmnt", "--json", "--nofsroot", "--output", "TARGET,SOURCE", "--target", path])
    if r.returncode != 0 or not r.stdout.strip():
        _debug(f"findmnt --target {path} exited {r.returncode}")
        return None
    try:
        filesystems = json.loads(r.stdout).get("filesystems") or []
    except (ValueError, AttributeError):
        _debug(f"unparseable findmnt output for {path}")
        return None
    return filesystems[0] if filesystems else None


def find_esp_source(host_root: Path, executor: Executor) -> Optional[str]:
    """Device backing the first candidate directory that is itself a mount point."""
    for candidate in ESP_MOUNT_CANDIDATES:
        if not _host_path(host_root, candidate).is_dir():
            continue
        fs = _mount_of(executor, candidate)
        if fs and fs.get("target") == candidate and fs.get("source"):
            source = strip_fsroot(fs["source"])
            _debug(f"ESP mounted at {candidate} from {source}")
            return source
    return None


def resolve_by_uuid(host_root: Path, device: str) -> Optional[str]:
    """Return the /dev/disk/by-uuid alias whose target is device, if any."""
    by_uuid = _host_path(host_root, BY_UUID_DIR)
    try:
        aliases = sorted(by_uuid.iterdir())
    except (PermissionError, OSError):
        return None
    wanted = os.path.realpath(_host_path(host_root, device))
    for alias in aliases:
        if os.path.realpath(alias) == wanted:
            return f"{BY_UUID_DIR}/{alias.name}"
    return None


def find_legacy_disk(host_root: Path) -> Optional[str]:
    for dev in LEGACY_BOOT_DISKS:
        if _host_path(host_root, dev).exists():
            return dev
    return None


def run(
    host_root: Path,
    executor: Executor,
    profile: HostProfile,
) -> Union[EfiTarget, LegacyTarget]:
    host_root = Path(host_root)
    if profile.is_efi:
        source = find_esp_source(host_root, executor)
        if not source:
            raise UnsupportedBootConfiguration(
                "EFI firmware detected but none of "
                f"{', '.join(ESP_MOUNT_CANDIDATES)} is a mount point"
            )
        esp_id = resolve_by_uuid(host_root, source)
        if not esp_id:
            raise UnsupportedBootConfiguration(
                f"ESP {source} has no alias under {BY_UUID_DIR}"
            )
        return EfiTarget(esp_device_id=esp_id)

    disk = find_legacy_disk(host_root)
    if not disk:
        raise UnsupportedBootConfiguration(
            f"Legacy BIOS boot but no boot disk found among {', '.join(LEGACY_BOOT_DISKS)}"
        )
    _debug(f"legacy boot disk {disk}")
    return LegacyTarget(grub_device_path=disk)
