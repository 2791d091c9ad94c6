"""Nix literal helpers registered as jinja2 filters."""

import re

_BARE_ATTR = re.compile(r"^[A-Za-z_][A-Za-z0-9_'-]*$")


def nix_string(value) -> str:
    """Double-quoted Nix string with backslash, quote and interpolation escaped."""
    s = str(value).replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{s}"'


def nix_bool(value) -> str:
    return "true" if value else "false"


def nix_attr(name: str) -> str:
    """Attribute name, quoted when it is not a plain identifier (e.g. eth0.100)."""
    return name if _BARE_ATTR.match(name) else nix_string(name)


def nix_list(values) -> str:
    """Single-line list of Nix strings: [ "a" "b" ] or [ ]."""
    items = [nix_string(v) for v in values]
    return f"[ {' '.join(items)} ]" if items else "[ ]"
