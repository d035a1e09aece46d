"""Invocation configuration — defaults, optional HCL file, then flag overrides."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import hcl
from .errors import ConfigError

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"([^/:]+/[^/]+?)(?:\.git)?/?$")


class ShimConfig(BaseModel):
    """Paths and build settings for one invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    output_root: Path = Path("~/shim_root")
    source_root: Path = Path("~/shim_source")
    instance: str = "oc-shim"
    upstream: str = "https://github.com/rhboot/shim.git"

    efi_dir: str = "OC"
    os_label: str = "OpenCore"
    default_loader: str = "\\\\\\\\OpenCore.efi"
    security_policy: str = "1"

    compiler: str = "gcc"
    packages: list[str] = Field(default_factory=lambda: ["gcc", "make", "git", "libelf-dev"])

    mount_point: Path = Path("~/shim_mount")
    remote_dir: str = "/home/ubuntu"
    remote_user: str = "ubuntu"
    identity_file: Path | None = None

    @field_validator("output_root", "source_root", "mount_point", "identity_file")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @property
    def upstream_slug(self) -> str:
        """The `owner/repo` part of the upstream URL."""
        match = _SLUG_PATTERN.search(self.upstream)
        return match.group(1) if match else self.upstream


def load_config(file: str | Path | None = None, **overrides: Any) -> ShimConfig:
    """Build the configuration: defaults, then `file`, then non-None `overrides`."""
    data: dict[str, Any] = {}
    if file is not None:
        data.update(hcl.load(file, context={"env": dict(os.environ)}))
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        config = ShimConfig(**data)
    except ValidationError as exc:
        source = file if file is not None else "arguments"
        raise ConfigError(f"{source}: {exc}") from exc
    logger.debug("Using configuration %s", config)
    return config
