"""Runtime execution context for an operation."""

from __future__ import annotations

from .host import Host
from .runner import CommandRunner


class Context[P]:
    """Runtime state passed through the requirement chain.

    `runner` executes build commands on the execution target (this machine or
    the VM); `host_runner` always executes on this machine.
    """

    def __init__(
        self,
        target: P,
        *,
        host: Host,
        runner: CommandRunner,
        host_runner: CommandRunner | None = None,
        dry_run: bool = False,
    ) -> None:
        self.target = target
        self.host = host
        self.runner = runner
        self.host_runner = host_runner if host_runner is not None else runner
        self.dry_run = dry_run
