"""Host profile inspector: firmware mode, architecture, hostname and hosting provider."""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..errors import NixInfectError
from ..executor import Executor, require
from ..schema import HostProfile, Provider

_DEBUG = bool(os.environ.get("NIXINFECT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[nixinfect] host: {msg}", file=sys.stderr)


ProviderCheck = Callable[[Path], bool]


def _any_exists(*paths: str) -> ProviderCheck:
    """Presence-only marker check; file contents are never parsed."""
    def check(host_root: Path) -> bool:
        return any((host_root / p).exists() for p in paths)
    return check


# Evaluated in order; the first positive match wins.
PROVIDER_CHECKS: List[Tuple[Provider, ProviderCheck]] = [
    (Provider.DIGITALOCEAN, _any_exists("etc/digitalocean", "opt/digitalocean")),
    (Provider.HETZNERCLOUD, _any_exists("etc/hetzner-build")),
    (Provider.AMAZON, _any_exists("etc/ec2_version", "etc/amazon-linux-release")),
]


def detect_provider(
    host_root: Path,
    override: Optional[str] = None,
    checks: Optional[List[Tuple[Provider, ProviderCheck]]] = None,
) -> Provider:
    """Explicit override first, then marker checks, then generic."""
    if override:
        try:
            return Provider(override)
        except ValueError:
            choices = ", ".join(p.value for p in Provider)
            raise NixInfectError(f"Unknown provider {override!r} (expected one of: {choices})") from None
    for provider, check in (PROVIDER_CHECKS if checks is None else checks):
        if check(Path(host_root)):
            _debug(f"provider marker matched: {provider.value}")
            return provider
    return Provider.GENERIC


def is_efi(host_root: Path) -> bool:
    return (Path(host_root) / "sys/firmware/efi").is_dir()


def _hostname_part(executor: Executor, flag: str) -> str:
    # Missing domain is common; hostname -d exits non-zero on some systems.
    r = executor(["hostname", flag])
    if r.returncode != 0:
        _debug(f"hostname {flag} exited {r.returncode}")
        return ""
    return r.stdout.strip()


def run(
    host_root: Path,
    executor: Executor,
    provider_override: Optional[str] = None,
) -> HostProfile:
    host_root = Path(host_root)
    machine = require(executor, ["uname", "-m"]).stdout.strip()
    profile = HostProfile(
        provider=detect_provider(host_root, provider_override),
        is_efi=is_efi(host_root),
        is_x86_64=machine == "x86_64",
        hostname=_hostname_part(executor, "-s"),
        domain=_hostname_part(executor, "-d"),
    )
    _debug(f"efi={profile.is_efi} machine={machine} provider={profile.provider.value}")
    return profile
