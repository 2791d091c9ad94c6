"""
Inspectors produce structured facts about the live host.
Each inspector receives host_root and/or an executor and returns one part of HostFacts.
Stages run in a fixed order; each takes only the results it depends on.
"""

from pathlib import Path
from typing import Optional

from ..executor import Executor, make_executor
from ..schema import HostFacts

from .host import run as run_host
from .boot import run as run_boot
from .rootfs import run as run_rootfs
from .swap import run as run_swap
from .network import run as run_network
from .ssh_keys import run as run_ssh_keys


def run_all(
    host_root: Path,
    executor: Optional[Executor] = None,
    provider: Optional[str] = None,
    swap_disabled: bool = False,
    sudo_user: Optional[str] = None,
) -> HostFacts:
    """Run all inspectors and return the immutable facts."""
    host_root = Path(host_root)
    if executor is None:
        executor = make_executor()

    profile = run_host(host_root, executor, provider_override=provider)
    boot = run_boot(host_root, executor, profile)
    rootfs = run_rootfs(executor)
    swap = run_swap(executor, swap_disabled=swap_disabled)
    network = run_network(host_root, executor)
    keys = run_ssh_keys(host_root, sudo_user=sudo_user)

    return HostFacts(
        profile=profile,
        boot=boot,
        rootfs=rootfs,
        swap=swap,
        network=network,
        authorized_keys=keys,
    )
