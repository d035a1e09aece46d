"""Exception hierarchy for shim-make."""

from __future__ import annotations

import shlex
from collections.abc import Sequence


class ShimMakeError(Exception):
    """Base class for failures reported to the user."""


class UsageError(ShimMakeError):
    """Bad or missing command-line arguments."""


class PreconditionError(ShimMakeError):
    """An expected external resource is absent or wrong."""


class ConfigError(ShimMakeError, ValueError):
    """Invalid configuration or blueprint definition."""


class CommandError(ShimMakeError):
    """An external command could not be run or exited non-zero."""

    def __init__(
        self,
        argv: Sequence[str],
        returncode: int,
        *,
        message: str | None = None,
        stderr: str = "",
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        if message is None:
            message = f"'{shlex.join(self.argv)}' returned non-zero exit code {returncode}"
            if stderr.strip():
                message = f"{message}: {stderr.strip()}"
        super().__init__(message)
