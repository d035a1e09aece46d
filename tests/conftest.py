"""Shared fixtures: a recording command runner and context helpers."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from shimmake.config import ShimConfig
from shimmake.context import Context
from shimmake.host import Host
from shimmake.runner import CommandResult, CommandRunner

type Response = tuple[int, str] | Callable[[list[str], Path | None], tuple[int, str]]


class FakeRunner(CommandRunner):
    """Records every command; answers from `responses` keyed by argv prefix."""

    def __init__(self, responses: dict[tuple[str, ...], Response] | None = None, tools: Sequence[str] = ()):
        super().__init__()
        self.responses = dict(responses or {})
        self.tools = set(tools)
        self.calls: list[list[str]] = []
        self.cwds: list[Path | None] = []

    def wrap(self, argv, cwd):
        return argv, cwd

    def which(self, tool):
        return tool in self.tools

    def _execute(self, cmd, cwd, *, capture):
        self.calls.append(cmd)
        self.cwds.append(cwd)
        for prefix in sorted(self.responses, key=len, reverse=True):
            if tuple(cmd[: len(prefix)]) == prefix:
                response = self.responses[prefix]
                returncode, stdout = response(cmd, cwd) if callable(response) else response
                return CommandResult(cmd, returncode, stdout)
        return CommandResult(cmd, 0, "")

    def ran(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)


@pytest.fixture
def config(tmp_path) -> ShimConfig:
    return ShimConfig(
        output_root=tmp_path / "root",
        source_root=tmp_path / "shim",
        mount_point=tmp_path / "mnt",
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_ctx(config, runner):
    def _make_ctx(
        *,
        system: str = "Linux",
        target: ShimConfig | None = None,
        host_runner: FakeRunner | None = None,
        dry_run: bool = False,
    ) -> Context[ShimConfig]:
        return Context(
            target if target is not None else config,
            host=Host(system=system),
            runner=runner,
            host_runner=host_runner,
            dry_run=dry_run,
        )

    return _make_ctx


def make_source_tree(path: Path, make_defaults: str = "") -> Path:
    """Create a minimal shim checkout on disk."""
    path.mkdir(parents=True, exist_ok=True)
    (path / "Makefile").write_text("all:\n")
    (path / "Make.defaults").write_text(make_defaults)
    return path
