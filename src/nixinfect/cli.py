"""Command-line interface."""

import argparse
import os
from pathlib import Path
from typing import List, Optional

from .executor import DEFAULT_TIMEOUT
from .renderers.configuration import DEFAULT_STATE_VERSION
from .schema import Provider

TRUE_VALUES = ("1", "true", "yes", "on")


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in TRUE_VALUES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nixinfect",
        description="Inspect a running Linux host and generate equivalent NixOS configuration.",
    )
    parser.add_argument(
        "--host-root",
        type=Path,
        default=Path("/"),
        help="Root of the host filesystem for file-based checks (default: /)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("/etc/nixos"),
        help="Directory the NixOS modules are written to (default: /etc/nixos)",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=os.environ.get("PROVIDER") or None,
        help="Hosting provider; autodetected from marker files when omitted (env: PROVIDER)",
    )
    parser.add_argument(
        "--no-swap",
        action="store_true",
        default=env_flag("NO_SWAP"),
        help="Never create a temporary swap file during installation (env: NO_SWAP)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing configuration.nix in the output directory",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the rendered modules to stdout instead of writing them",
    )
    parser.add_argument(
        "--save-facts",
        type=Path,
        default=None,
        help="Also write the collected host facts as JSON to this path",
    )
    parser.add_argument(
        "--from-facts",
        type=Path,
        default=None,
        help="Skip inspection and render from a facts JSON file",
    )
    parser.add_argument(
        "--state-version",
        default=DEFAULT_STATE_VERSION,
        help=f"system.stateVersion of the generated configuration (default: {DEFAULT_STATE_VERSION})",
    )
    parser.add_argument(
        "--command-timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds before an inspection command is abandoned (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--install-command",
        default=None,
        help="Command run after the modules are written, while install-time swap is active",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
