"""
Network inspector: static settings of the primary interface.

The primary interface is the first non-loopback link in `ip link` order.
Multi-NIC hosts are not disambiguated. Addresses keep discovery order since
the first one is treated as primary by the rendered module.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from ..errors import ProbeFailure
from ..executor import Executor, require
from ..schema import IpAddress, NetworkSnapshot

_DEBUG = bool(os.environ.get("NIXINFECT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[nixinfect] network: {msg}", file=sys.stderr)


IP_LINK = ["ip", "-json", "link", "show"]


def _load_json(stdout: str) -> List[Any]:
    try:
        data = json.loads(stdout) if stdout.strip() else []
    except ValueError:
        return []
    return data if isinstance(data, list) else []


def _is_loopback_link(link: dict) -> bool:
    return link.get("link_type") == "loopback" or "LOOPBACK" in (link.get("flags") or [])


def primary_link(executor: Executor) -> dict:
    links = _load_json(require(executor, IP_LINK).stdout)
    for link in links:
        if link.get("ifname") and not _is_loopback_link(link):
            return link
    raise ProbeFailure(IP_LINK, 0, message="No non-loopback network interface found")


def _addresses(executor: Executor, ifname: str) -> List[dict]:
    cmd = ["ip", "-json", "address", "show", "dev", ifname]
    entries = _load_json(require(executor, cmd).stdout)
    addr_info: List[dict] = []
    for entry in entries:
        addr_info.extend(entry.get("addr_info") or [])
    return addr_info


def _collect(addr_info: List[dict], family: str) -> List[IpAddress]:
    result = []
    for a in addr_info:
        if a.get("family") != family or not a.get("local"):
            continue
        # fe80::/10 is regenerated by the kernel; only routable addresses are configured.
        if family == "inet6" and a.get("scope") == "link":
            continue
        result.append(IpAddress(address=a["local"], prefix_length=int(a.get("prefixlen", 0))))
    return result


def default_gateway(executor: Executor, ifname: str, ipv6: bool = False) -> Optional[str]:
    """Gateway of the default route on ifname; None when absent or unqueryable."""
    cmd = ["ip", "-json"] + (["-6"] if ipv6 else []) + ["route", "show", "default", "dev", ifname]
    r = executor(cmd)
    if r.returncode != 0:
        _debug(f"{' '.join(cmd)} exited {r.returncode}")
        return None
    for route in _load_json(r.stdout):
        if route.get("gateway"):
            return route["gateway"]
    return None


def read_nameservers(host_root: Path) -> List[str]:
    """nameserver entries from etc/resolv.conf in file order (loopback rewritten by the schema)."""
    resolv = Path(host_root) / "etc/resolv.conf"
    try:
        lines = resolv.read_text().splitlines()
    except (PermissionError, OSError):
        _debug(f"cannot read {resolv}")
        return []
    servers = []
    for line in lines:
        parts = line.split("#", 1)[0].split()
        if len(parts) >= 2 and parts[0] == "nameserver":
            servers.append(parts[1])
    return servers


def uses_predictable_naming(ifname: str) -> bool:
    """eth* is the kernel's legacy sequential naming; anything else is predictable."""
    return not ifname.startswith("eth")


def run(
    host_root: Path,
    executor: Executor,
) -> NetworkSnapshot:
    link = primary_link(executor)
    ifname = link["ifname"]
    addr_info = _addresses(executor, ifname)
    snapshot = NetworkSnapshot(
        primary_interface_name=ifname,
        ipv4_addresses=_collect(addr_info, "inet"),
        ipv6_addresses=_collect(addr_info, "inet6"),
        gateway4=default_gateway(executor, ifname),
        gateway6=default_gateway(executor, ifname, ipv6=True),
        nameservers=read_nameservers(host_root),
        uses_predictable_naming=uses_predictable_naming(ifname),
        mac_address=link.get("address") or None,
    )
    _debug(
        f"{ifname}: {len(snapshot.ipv4_addresses)} ipv4, {len(snapshot.ipv6_addresses)} ipv6, "
        f"gw4={snapshot.gateway4} gw6={snapshot.gateway6}"
    )
    return snapshot
