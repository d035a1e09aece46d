"""Queries against the multipass VM manager."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .errors import ShimMakeError
from .runner import CommandRunner

logger = logging.getLogger(__name__)


def info(runner: CommandRunner, instance: str) -> dict[str, Any] | None:
    """Return `multipass info` for one instance, or None if it does not exist."""
    result = runner.run(["multipass", "info", instance, "--format", "json"], check=False, capture=True)
    if not result.ok:
        logger.debug("No multipass instance '%s'", instance)
        return None
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ShimMakeError(f"Unreadable output from 'multipass info {instance}': {exc}") from exc
    return data.get("info", {}).get(instance)


def mounts(details: dict[str, Any]) -> set[Path]:
    """Target paths currently mounted into the instance."""
    return {Path(target) for target in details.get("mounts", {})}


def ipv4(details: dict[str, Any]) -> str | None:
    """First IPv4 address of the instance, if it has one."""
    addresses = details.get("ipv4") or []
    return addresses[0] if addresses else None
