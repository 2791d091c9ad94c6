import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from nixinfect.executor import RunResult
from nixinfect.inspectors.network import IP_LINK
from nixinfect.inspectors.rootfs import FINDMNT_ROOT
from nixinfect.inspectors.swap import SWAPON_SHOW

FIXTURES = Path(__file__).parent / "fixtures"


def ok(stdout: str = "") -> RunResult:
    return RunResult(stdout=stdout, stderr="", returncode=0)


def fixture(name: str) -> str:
    return (FIXTURES / name).read_text()


def findmnt_target(path: str) -> Tuple[str, ...]:
    return ("findmnt", "--json", "--nofsroot", "--output", "TARGET,SOURCE", "--target", path)


def default_responses() -> Dict[Tuple[str, ...], RunResult]:
    """Canned output of a Hetzner-like VM: eth0, /dev/sda1 root, no swap."""
    return {
        ("uname", "-m"): ok("x86_64\n"),
        ("hostname", "-s"): ok("web1\n"),
        ("hostname", "-d"): ok("example.com\n"),
        tuple(FINDMNT_ROOT): ok(fixture("findmnt_root.json")),
        findmnt_target("/boot/efi"): ok(fixture("findmnt_boot_efi.json")),
        findmnt_target("/boot"): ok(fixture("findmnt_boot_on_root.json")),
        tuple(SWAPON_SHOW): ok(""),
        tuple(IP_LINK): ok(fixture("ip_link.json")),
        ("ip", "-json", "address", "show", "dev", "eth0"): ok(fixture("ip_addr_eth0.json")),
        ("ip", "-json", "route", "show", "default", "dev", "eth0"): ok(fixture("ip_route_eth0.json")),
        ("ip", "-json", "-6", "route", "show", "default", "dev", "eth0"): ok(fixture("ip6_route_eth0.json")),
    }


class FixtureExecutor:
    """Executor returning canned output keyed by the exact argv; records every call."""

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], RunResult]] = None):
        self.responses = default_responses()
        if responses:
            self.responses.update(responses)
        self.calls: List[List[str]] = []

    def __call__(self, cmd, *, cwd=None) -> RunResult:
        self.calls.append(list(cmd))
        r = self.responses.get(tuple(cmd))
        if r is None:
            return RunResult(stdout="", stderr="unknown command", returncode=1)
        return r

    def ran(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if c and c[0] == program]


@pytest.fixture
def fixture_executor() -> FixtureExecutor:
    return FixtureExecutor()


def _touch(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()


def build_host_root(root: Path, efi: bool = True, disks: Tuple[str, ...] = ("sda", "sda1", "sda15")) -> Path:
    """Minimal host tree: device nodes, by-uuid aliases, resolv.conf, root's keys."""
    for disk in disks:
        _touch(root / "dev" / disk)
    by_uuid = root / "dev/disk/by-uuid"
    by_uuid.mkdir(parents=True, exist_ok=True)
    if "sda1" in disks:
        os.symlink("../../sda1", by_uuid / "0f3e7a52-62b1-4c36-9d57-a5b1c1d7e4a2")
    if "sda15" in disks:
        os.symlink("../../sda15", by_uuid / "8C4E-1F0A")
    (root / "etc").mkdir(parents=True, exist_ok=True)
    (root / "etc/resolv.conf").write_text(fixture("resolv.conf"))
    (root / "root/.ssh").mkdir(parents=True, exist_ok=True)
    (root / "root/.ssh/authorized_keys").write_text(fixture("authorized_keys"))
    (root / "boot").mkdir(parents=True, exist_ok=True)
    if efi:
        (root / "sys/firmware/efi").mkdir(parents=True)
        (root / "boot/efi").mkdir(parents=True)
    return root


@pytest.fixture
def efi_host(tmp_path) -> Path:
    return build_host_root(tmp_path / "host", efi=True)


@pytest.fixture
def legacy_host(tmp_path) -> Path:
    return build_host_root(tmp_path / "host", efi=False)
