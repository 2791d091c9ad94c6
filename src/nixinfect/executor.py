"""
Running host commands.

Everything nixinfect learns from the live system through a program (findmnt,
ip, swapon, hostname) goes through an ``Executor``. Tests hand the inspectors
a fake that answers from fixture files.
"""

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .errors import ProbeFailure

DEFAULT_TIMEOUT = 60.0

# Return codes for outcomes where the program never produced one.
TIMED_OUT = -1
NOT_FOUND = 127


@dataclass
class RunResult:
    stdout: str
    stderr: str
    returncode: int


class Executor(Protocol):
    def __call__(self, cmd: List[str], *, cwd: Optional[str] = None) -> RunResult:
        ...


def _text(output) -> str:
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output or ""


def subprocess_executor(
    cmd: List[str],
    *,
    cwd: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
) -> RunResult:
    """Run cmd with captured text output; timeouts and missing programs become return codes."""
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        return RunResult(_text(e.stdout), f"Command timed out after {e.timeout}s", TIMED_OUT)
    except FileNotFoundError:
        return RunResult("", f"{cmd[0]}: command not found", NOT_FOUND)
    return RunResult(_text(proc.stdout), _text(proc.stderr), proc.returncode)


def make_executor(timeout: Optional[float] = DEFAULT_TIMEOUT) -> Executor:
    def run(cmd: List[str], *, cwd: Optional[str] = None) -> RunResult:
        return subprocess_executor(cmd, cwd=cwd, timeout=timeout)
    return run


def require(executor: Executor, cmd: List[str]) -> RunResult:
    """Run cmd and raise ProbeFailure unless it exits 0."""
    r = executor(cmd)
    if r.returncode != 0:
        raise ProbeFailure(cmd, r.returncode, r.stderr)
    return r
