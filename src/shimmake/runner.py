"""Command runners — execute argument vectors locally or inside a multipass VM."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import CommandError

logger = logging.getLogger(__name__)

type Arg = str | os.PathLike[str]


@dataclass
class CommandResult:
    """Outcome of a finished external command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Runs commands on some execution target."""

    def __init__(self, *, echo: bool = False) -> None:
        self.echo = echo

    @abstractmethod
    def wrap(self, argv: list[str], cwd: Path | None) -> tuple[list[str], Path | None]:
        """Translate a target command into the host argv and host working directory."""

    @abstractmethod
    def which(self, tool: str) -> bool:
        """Whether `tool` can be found on the execution target."""

    def run(
        self,
        argv: Sequence[Arg],
        *,
        cwd: Path | None = None,
        check: bool = True,
        capture: bool = False,
    ) -> CommandResult:
        """Run a command, raising CommandError on failure when `check` is set.

        Without `check`, a command that cannot be started at all is reported
        as a failed result with return code 127, like a shell would.
        """
        cmd, workdir = self.wrap([os.fspath(arg) for arg in argv], cwd)
        logger.log(logging.INFO if self.echo else logging.DEBUG, "+ %s", shlex.join(cmd))
        try:
            result = self._execute(cmd, workdir, capture=capture)
        except CommandError as exc:
            if check:
                raise
            logger.debug("%s", exc)
            return CommandResult(cmd, exc.returncode, stderr=str(exc))
        if check and not result.ok:
            raise CommandError(cmd, result.returncode, stderr=result.stderr)
        return result

    def _execute(self, cmd: list[str], cwd: Path | None, *, capture: bool) -> CommandResult:
        try:
            proc = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise CommandError(cmd, 127, message=f"cannot run '{cmd[0]}': {exc.strerror}") from exc
        return CommandResult(cmd, proc.returncode, proc.stdout or "", proc.stderr or "")


class LocalRunner(CommandRunner):
    """Runs commands directly on this machine.

    The working directory is scoped to the child process, so the caller's
    directory is the same after the command whether it succeeded or not.
    """

    def wrap(self, argv: list[str], cwd: Path | None) -> tuple[list[str], Path | None]:
        return argv, cwd

    def which(self, tool: str) -> bool:
        return shutil.which(tool) is not None

    def __repr__(self) -> str:
        return "LocalRunner()"


class MultipassRunner(CommandRunner):
    """Runs commands inside a named multipass instance via `multipass exec`."""

    def __init__(self, instance: str, *, echo: bool = False) -> None:
        super().__init__(echo=echo)
        self.instance = instance

    def wrap(self, argv: list[str], cwd: Path | None) -> tuple[list[str], Path | None]:
        cmd = ["multipass", "exec", self.instance]
        if cwd is not None:
            cmd += ["--working-directory", os.fspath(cwd)]
        return [*cmd, "--", *argv], None

    def which(self, tool: str) -> bool:
        return self.run(["which", tool], check=False, capture=True).ok

    def __repr__(self) -> str:
        return f"MultipassRunner(instance={self.instance!r})"
