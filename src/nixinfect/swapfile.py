"""
Install-time swap file lifecycle.

The swap file only exists inside the ``ephemeral_swap`` scope: it is switched
off and deleted on normal exit, on error and on KeyboardInterrupt alike.

``EphemeralSwapFile.path`` names the directory and the name pattern; the actual
file gets a fresh unique name so nothing already on disk is overwritten or
removed.
"""

import os
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from .executor import Executor, require
from .schema import EphemeralSwapFile, ExistingSwap, NoSwap

_DEBUG = bool(os.environ.get("NIXINFECT_DEBUG", ""))


def _debug(msg: str) -> None:
    if _DEBUG:
        print(f"[nixinfect] swapfile: {msg}", file=sys.stderr)


def _reserve(plan: EphemeralSwapFile) -> str:
    """Exclusively create an empty file next to plan.path and return its name."""
    template = Path(plan.path)
    fd, path = tempfile.mkstemp(prefix=f"{template.stem}.", suffix=template.suffix, dir=template.parent)
    os.close(fd)
    return path


def _activate(path: str, size_mb: int, executor: Executor) -> None:
    require(executor, ["dd", "if=/dev/zero", f"of={path}", "bs=1M", f"count={size_mb}"])
    require(executor, ["chmod", "0600", path])
    require(executor, ["mkswap", path])
    require(executor, ["swapon", path])


def _release(path: str, executor: Executor, activated: bool) -> None:
    if activated:
        r = executor(["swapoff", path])
        if r.returncode != 0:
            print(f"Warning: swapoff {path} failed: {r.stderr.strip()}", file=sys.stderr)
    try:
        Path(path).unlink()
        _debug(f"removed {path}")
    except FileNotFoundError:
        pass


@contextmanager
def ephemeral_swap(
    plan: Union[ExistingSwap, EphemeralSwapFile, NoSwap],
    executor: Executor,
) -> Iterator[Union[ExistingSwap, EphemeralSwapFile, NoSwap]]:
    """
    Create and enable a swap file for EphemeralSwapFile plans; no-op otherwise.

    Yields the plan with ``path`` set to the file actually in use.
    """
    if not isinstance(plan, EphemeralSwapFile):
        yield plan
        return
    path = _reserve(plan)
    activated = False
    try:
        _activate(path, plan.size_mb, executor)
        activated = True
        _debug(f"enabled {plan.size_mb}MiB swap at {path}")
        yield plan.model_copy(update={"path": path})
    finally:
        _release(path, executor, activated)
