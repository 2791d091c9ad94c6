"""SSH key inspector: root's authorized keys, carried over so the host stays reachable."""

import re
from pathlib import Path
from typing import List, Optional

_KEY_TYPE = re.compile(r"^(sk-ssh|sk-ecdsa|ssh|ecdsa)-\S+$")


def _strip_options(line: str) -> Optional[str]:
    """'<options> <type> <key> [comment]' -> '<type> <key> [comment]'."""
    parts = line.split()
    for i, part in enumerate(parts):
        if _KEY_TYPE.match(part) and i + 1 < len(parts):
            return " ".join(parts[i:])
    return None


def parse_authorized_keys(text: str) -> List[str]:
    keys = []
    for line in text.splitlines():
        line = line.replace("\r", "").strip()
        if not line or line.startswith("#"):
            continue
        key = _strip_options(line)
        if key:
            keys.append(key)
    return keys


def run(host_root: Path, sudo_user: Optional[str] = None) -> List[str]:
    """Keys from the first readable, non-empty authorized_keys candidate."""
    host_root = Path(host_root)
    candidates = ["root/.ssh/authorized_keys"]
    if sudo_user and sudo_user != "root":
        candidates.append(f"home/{sudo_user}/.ssh/authorized_keys")
    for rel in candidates:
        try:
            keys = parse_authorized_keys((host_root / rel).read_text())
        except (PermissionError, OSError):
            continue
        if keys:
            return keys
    return []
