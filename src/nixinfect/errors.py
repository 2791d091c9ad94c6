"""Fatal error taxonomy. Every error here aborts the run before anything is written."""

from typing import List, Optional


class NixInfectError(Exception):
    """Base class for errors reported to the user as ``Error: <message>``."""


class UnsupportedBootConfiguration(NixInfectError):
    """No resolvable ESP (EFI) or conventional boot disk (legacy BIOS)."""


class ProbeFailure(NixInfectError):
    """A required inspection command is missing or failed unexpectedly."""

    def __init__(self, cmd: List[str], returncode: int, stderr: Optional[str] = "", message: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        if not message:
            message = f"`{' '.join(self.cmd)}` exited {returncode}"
            if self.stderr:
                message += f": {self.stderr}"
        super().__init__(message)


class RenderError(NixInfectError):
    """A field required for synthesis is absent. Indicates a probe bug."""
