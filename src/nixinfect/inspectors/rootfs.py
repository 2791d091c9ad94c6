"""Root filesystem inspector: source device and type of the live / mount."""

import json

from ..errors import ProbeFailure
from ..executor import Executor, require
from ..schema import RootFsInfo

# --nofsroot: btrfs subvolumes and bind mounts would otherwise print /dev/vda5[/root]
FINDMNT_ROOT = ["findmnt", "--json", "--nofsroot", "--output", "SOURCE,FSTYPE", "--mountpoint", "/"]


def strip_fsroot(source: str) -> str:
    """Drop a trailing ``[/subvol]`` suffix from a findmnt SOURCE value."""
    if source.endswith("]") and "[" in source:
        return source[:source.index("[")]
    return source


def run(executor: Executor) -> RootFsInfo:
    r = require(executor, FINDMNT_ROOT)
    try:
        filesystems = json.loads(r.stdout).get("filesystems") or []
    except (ValueError, AttributeError):
        filesystems = []
    if not filesystems or not filesystems[0].get("source") or not filesystems[0].get("fstype"):
        raise ProbeFailure(FINDMNT_ROOT, r.returncode, message="Cannot determine root filesystem from findmnt output")
    fs = filesystems[0]
    return RootFsInfo(source_device=strip_fsroot(fs["source"]), fs_type=fs["fstype"])
