"""Host platform detection."""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# uname prefixes reported by POSIX emulation layers on Windows
_WINDOWS_PREFIXES = ("MINGW", "MSYS", "CYGWIN")


def normalize(system: str) -> str:
    """Collapse the various Windows POSIX-layer identifiers into 'Windows'."""
    if system.upper().startswith(_WINDOWS_PREFIXES):
        return "Windows"
    return system


@dataclass(frozen=True)
class Host:
    """The machine shim-make is invoked on."""

    system: str

    @property
    def needs_vm(self) -> bool:
        """True when builds must run inside a Linux VM."""
        return self.system == "Darwin"


def detect() -> Host:
    host = Host(system=normalize(platform.system()))
    logger.debug("Detected host '%s' (needs_vm=%s)", host.system, host.needs_vm)
    return host
