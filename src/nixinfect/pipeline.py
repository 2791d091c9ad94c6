"""
Snapshot persistence and atomic writes of rendered configuration.

Every rendered file is staged as a temporary file in the destination directory
and only renamed into place once all of them were written, so an interrupted
run never leaves a half-written module at its canonical path. A failed rename
removes the remaining temporaries and any file the run had newly created.
"""

import os
import tempfile
from pathlib import Path
from typing import List, Tuple

from .errors import NixInfectError
from .schema import HostFacts, RenderedConfig

MAIN_CONFIG = "configuration.nix"


class ConfigurationExists(NixInfectError):
    """The destination already holds a NixOS configuration."""


def save_facts(facts: HostFacts, path: Path) -> None:
    """Serialize facts to JSON (atomically)."""
    _atomic_write(Path(path), facts.model_dump_json(indent=2) + "\n")


def load_facts(path: Path) -> HostFacts:
    """Load facts from a JSON file written by save_facts."""
    return HostFacts.model_validate_json(Path(path).read_text())


def _stage(dest: Path, content: str) -> Path:
    fd, tmp = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    os.chmod(tmp, 0o644)
    return Path(tmp)


def _atomic_write(dest: Path, content: str) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    os.replace(_stage(dest, content), dest)


def write_config(rendered: RenderedConfig, output_dir: Path, overwrite: bool = False) -> List[Path]:
    """
    Write all rendered files under output_dir. Raises ConfigurationExists when
    configuration.nix is already present and overwrite is False.
    """
    output_dir = Path(output_dir)
    if not overwrite and (output_dir / MAIN_CONFIG).exists():
        raise ConfigurationExists(
            f"{output_dir / MAIN_CONFIG} already exists; pass --overwrite to replace it"
        )
    output_dir.mkdir(parents=True, exist_ok=True)

    staged: List[Tuple[Path, Path]] = []
    try:
        for name in sorted(rendered.files):
            dest = output_dir / name
            dest.parent.mkdir(parents=True, exist_ok=True)
            staged.append((_stage(dest, rendered.files[name]), dest))
    except BaseException:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise

    # Files that did not exist before are removed again if a later rename fails.
    fresh = {dest for _, dest in staged if not dest.exists()}
    written: List[Path] = []
    try:
        for tmp, dest in staged:
            os.replace(tmp, dest)
            written.append(dest)
    except BaseException:
        for tmp, dest in staged:
            if tmp.exists():
                tmp.unlink()
            elif dest in fresh:
                dest.unlink(missing_ok=True)
        raise
    return written
