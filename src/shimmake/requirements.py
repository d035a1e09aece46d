"""Concrete requirements used to prepare a shim build environment."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from . import multipass
from .config import ShimConfig
from .context import Context
from .errors import ConfigError, PreconditionError, ShimMakeError
from .requirement import Requirement, requirement

logger = logging.getLogger(__name__)


@requirement("multipass")
@dataclass
class Multipass(Requirement[ShimConfig]):
    """The multipass VM manager, installed with Homebrew."""

    cask: str = "multipass"

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return ctx.host_runner.which("multipass")

    def apply(self, ctx: Context[ShimConfig]) -> None:
        ctx.host_runner.run(["brew", "install", "--cask", self.cask])

    def __str__(self) -> str:
        return "multipass"


@requirement("instance")
@dataclass
class Instance(Requirement[ShimConfig]):
    """A launched multipass instance."""

    name: str
    launch_args: list[str] = field(default_factory=list)

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return multipass.info(ctx.host_runner, self.name) is not None

    def apply(self, ctx: Context[ShimConfig]) -> None:
        ctx.host_runner.run(["multipass", "launch", "-n", self.name, *self.launch_args])

    def __str__(self) -> str:
        return f"instance {self.name}"


@requirement("directory")
@dataclass
class Directory(Requirement[ShimConfig]):
    """A directory on this machine."""

    path: str

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return Path(self.path).is_dir()

    def apply(self, ctx: Context[ShimConfig]) -> None:
        try:
            Path(self.path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ShimMakeError(f"cannot create {self.path}: {exc.strerror}") from exc

    def remove(self, ctx: Context[ShimConfig]) -> None:
        try:
            shutil.rmtree(self.path)
        except OSError as exc:
            raise ShimMakeError(f"cannot remove {self.path}: {exc.strerror}") from exc

    def __str__(self) -> str:
        return f"directory {self.path}"


@requirement("share")
@dataclass
class Share(Requirement[ShimConfig]):
    """A local directory mounted into a multipass instance."""

    source: str
    instance: str
    target: str | None = None

    @property
    def destination(self) -> str:
        return self.target if self.target is not None else self.source

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        details = multipass.info(ctx.host_runner, self.instance)
        return details is not None and Path(self.destination) in multipass.mounts(details)

    def apply(self, ctx: Context[ShimConfig]) -> None:
        ctx.host_runner.run(["multipass", "mount", self.source, f"{self.instance}:{self.destination}"])

    def __str__(self) -> str:
        return f"share {self.source} -> {self.instance}:{self.destination}"


@requirement("source")
@dataclass
class SourceTree(Requirement[ShimConfig]):
    """A git checkout of the upstream project, with submodules."""

    path: str
    url: str
    slug: str

    def exists(self, ctx: Context[ShimConfig]) -> bool:
        path = Path(self.path)
        if not path.is_dir():
            return False
        result = ctx.host_runner.run(["git", "remote", "-v"], cwd=path, capture=True)
        if self.slug not in result.stdout:
            raise PreconditionError(f"Directory {path} is present, but does not contain {self.slug}")
        return True

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return self.exists(ctx)

    def apply(self, ctx: Context[ShimConfig]) -> None:
        ctx.host_runner.run(["git", "clone", self.url, self.path])
        ctx.host_runner.run(["git", "submodule", "update", "--init"], cwd=Path(self.path))

    def __str__(self) -> str:
        return f"source {self.slug} at {self.path}"


@requirement("patch")
@dataclass
class Patch(Requirement[ShimConfig]):
    """A text edit to a file, detected by the presence of `marker`.

    Either replaces every occurrence of `search` with `replace`, or appends
    the `append` line.
    """

    file: str
    marker: str
    search: str | None = None
    replace: str | None = None
    append: str | None = None

    def __post_init__(self) -> None:
        if (self.append is None) == (self.search is None or self.replace is None):
            raise ConfigError(f"patch of {self.file} needs either search and replace, or append")

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        path = Path(self.file)
        if not path.is_file():
            return False
        return self.marker in self._read(path)

    def apply(self, ctx: Context[ShimConfig]) -> None:
        path = Path(self.file)
        if not path.is_file():
            raise PreconditionError(f"{path} does not exist")
        text = self._read(path)
        if self.append is not None:
            if text and not text.endswith("\n"):
                text += "\n"
            text += self.append + "\n"
        else:
            if self.search not in text:
                raise PreconditionError(f"'{self.search}' not found in {path}")
            text = text.replace(self.search, self.replace)
        try:
            path.write_text(text)
        except OSError as exc:
            raise ShimMakeError(f"cannot write {path}: {exc.strerror}") from exc

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text()
        except OSError as exc:
            raise ShimMakeError(f"cannot read {path}: {exc.strerror}") from exc

    def __str__(self) -> str:
        return f"patch {self.file} ({self.marker})"


@requirement("packages")
@dataclass
class Packages(Requirement[ShimConfig]):
    """Build toolchain packages on the execution target, detected by looking for `compiler`."""

    compiler: str
    packages: list[str] = field(default_factory=list)

    def equals(self, ctx: Context[ShimConfig]) -> bool:
        return ctx.runner.which(self.compiler)

    def apply(self, ctx: Context[ShimConfig]) -> None:
        ctx.runner.run(["sudo", "apt-get", "update"])
        ctx.runner.run(["sudo", "apt-get", "install", "-y", *self.packages])

    def __str__(self) -> str:
        return f"packages {' '.join(self.packages)}"
