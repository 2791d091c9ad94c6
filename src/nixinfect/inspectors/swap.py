"""
Swap inspector: decide how the install and the rendered system get swap.

Only reads `swapon --show`; the ephemeral swap file itself is created by
nixinfect.swapfile.ephemeral_swap so that removal is always scoped.
"""

import os
import sys
from typing import List, Tuple, Union

from ..errors import ProbeFailure
from ..executor import NOT_FOUND, Executor
from ..schema import EphemeralSwapFile, ExistingSwap, NoSwap

_DEBUG = bool(os.environ.get("NIXINFECT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[nixinfect] swap: {msg}", file=sys.stderr)


SWAPON_SHOW = ["swapon", "--show=NAME,TYPE", "--raw", "--noheadings"]
EPHEMERAL_SWAP_PATH = "/tmp/nixinfect.swp"
EPHEMERAL_SWAP_MB = 512


def _parse_swapon(stdout: str) -> List[Tuple[str, str]]:
    """Parse `swapon --show=NAME,TYPE --raw --noheadings` into (name, type) pairs."""
    entries = []
    for line in stdout.splitlines():
        parts = line.split()
        if not parts:
            continue
        entries.append((parts[0], parts[1] if len(parts) > 1 else ""))
    return entries


def is_block_device_swap(name: str) -> bool:
    """A /dev node that is not compressed RAM (zram)."""
    return name.startswith("/dev/") and not name.startswith("/dev/zram")


def active_swap(executor: Executor) -> List[Tuple[str, str]]:
    r = executor(SWAPON_SHOW)
    if r.returncode == NOT_FOUND:
        raise ProbeFailure(SWAPON_SHOW, r.returncode, r.stderr)
    if r.returncode != 0 and not r.stdout.strip():
        # No swap configured or no /proc/swaps entries.
        _debug(f"swapon exited {r.returncode} with no entries")
        return []
    return _parse_swapon(r.stdout)


def run(
    executor: Executor,
    swap_disabled: bool = False,
    need_headroom: bool = True,
) -> Union[ExistingSwap, EphemeralSwapFile, NoSwap]:
    entries = active_swap(executor)
    for name, kind in entries:
        if is_block_device_swap(name):
            _debug(f"reusing {kind or 'swap'} {name}")
            return ExistingSwap(device_path=name)
        _debug(f"ignoring swap entry {name} ({kind})")
    if entries or swap_disabled or not need_headroom:
        # zram or file-backed swap already gives the install headroom.
        return NoSwap()
    return EphemeralSwapFile(path=EPHEMERAL_SWAP_PATH, size_mb=EPHEMERAL_SWAP_MB)
