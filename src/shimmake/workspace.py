"""Workspace — parsed blueprints and projects, resolved on access."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from .blueprints import Blueprint
from .errors import ConfigError
from .projects import Project
from .requirement import Requirement, _requirement_registry
from .strategy import Absent, Ensure, Present, Strategy

logger = logging.getLogger(__name__)

_STRATEGY_MAP: dict[str, type[Strategy]] = {
    "present": Present,
    "ensure": Ensure,
    "absent": Absent,
}


def _decode_requirement(name: str, attrs: dict[str, Any]) -> Requirement:
    """Decode a requirement block into an instance using the registry."""
    if name not in _requirement_registry:
        raise ConfigError(f"Unknown requirement type: '{name}'")
    req_cls = _requirement_registry[name]
    logger.debug("Decoding requirement '%s' -> %s", name, req_cls.__name__)
    try:
        return req_cls(**attrs)
    except TypeError as exc:
        raise ConfigError(f"Invalid '{name}' block: {exc}") from exc


def _parse_ops(block_data: dict[str, Any]) -> list[Strategy]:
    """Parse strategy blocks (present/ensure/absent) from a blueprint or project block.

    Structure of parsed strategy blocks:
        {"present": [{"directory": {"path": "/x"}}, ...], ...}

    Blocks are grouped by strategy, so a blueprint that mixes strategies runs
    all `present` blocks first, then `ensure`, then `absent`.
    """
    ops: list[Strategy] = []
    for strategy_name, strategy_cls in _STRATEGY_MAP.items():
        for req_block in block_data.get(strategy_name, []):
            for req_name, attrs in req_block.items():
                ops.append(strategy_cls(_decode_requirement(req_name, dict(attrs))))
    return ops


def _resolve_blueprint(
    name: str,
    pending: dict[str, dict[str, Any]],
    resolved: dict[str, Blueprint],
    resolving: set[str],
) -> Blueprint:
    """Recursively resolve a single blueprint, handling includes."""
    if name in resolved:
        return resolved[name]
    if name in resolving:
        raise ConfigError(f"Circular include detected: '{name}'")
    if name not in pending:
        raise ConfigError(f"Unknown blueprint: '{name}'")
    logger.debug("Resolving blueprint '%s'", name)
    resolving.add(name)

    bp_data = pending[name]
    ops: list[Strategy] = []

    # included blueprints run before the blueprint's own blocks
    for include_name in bp_data.get("include", []):
        logger.debug("Blueprint '%s' includes '%s'", name, include_name)
        ops.extend(_resolve_blueprint(include_name, pending, resolved, resolving).ops)

    ops.extend(_parse_ops(bp_data))

    bp = Blueprint(name=name, description=bp_data.get("description", ""), ops=ops)
    resolved[name] = bp
    resolving.discard(name)
    return bp


def _build_project(name: str, data: dict[str, Any], blueprints: dict[str, Blueprint]) -> Project:
    """Build a single Project from parsed data."""
    logger.debug("Building project '%s'", name)
    proj_blueprints: list[Blueprint] = []
    for bp_name in data.get("use", []):
        if bp_name not in blueprints:
            raise ConfigError(f"Project '{name}' references unknown blueprint: '{bp_name}'")
        proj_blueprints.append(blueprints[bp_name])

    inline_ops = _parse_ops(data)
    if inline_ops:
        proj_blueprints.append(Blueprint(name=f"{name}:inline", ops=inline_ops))

    return Project(name=name, description=data.get("description", ""), blueprints=proj_blueprints)


class Workspace(Mapping[str, Project]):
    """Accumulates parsed HCL documents and resolves projects on access."""

    def __init__(self) -> None:
        self._pending_blueprints: dict[str, dict[str, Any]] = {}
        self._pending_projects: dict[str, dict[str, Any]] = {}

    def load(self, data: dict[str, Any]) -> None:
        """Extract blueprint and project blocks from a parsed document.

        Raises ConfigError if any blueprint or project name is already loaded.
        """
        for bp_block in data.get("blueprint", []):
            for bp_name, bp_data in bp_block.items():
                if bp_name in self._pending_blueprints:
                    raise ConfigError(f"Duplicate blueprint: '{bp_name}'")
                logger.debug("Found blueprint '%s'", bp_name)
                self._pending_blueprints[bp_name] = bp_data

        for proj_block in data.get("project", []):
            for proj_name, proj_data in proj_block.items():
                if proj_name in self._pending_projects:
                    raise ConfigError(f"Duplicate project: '{proj_name}'")
                logger.debug("Found project '%s'", proj_name)
                self._pending_projects[proj_name] = proj_data

    def _resolve(self) -> dict[str, Project]:
        resolved_bps: dict[str, Blueprint] = {}
        for name in self._pending_blueprints:
            _resolve_blueprint(name, self._pending_blueprints, resolved_bps, set())

        return {
            proj_name: _build_project(proj_name, proj_data, resolved_bps)
            for proj_name, proj_data in self._pending_projects.items()
        }

    def __getitem__(self, name: str) -> Project:
        return self._resolve()[name]

    def __contains__(self, name: object) -> bool:
        return name in self._pending_projects

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending_projects)

    def __len__(self) -> int:
        return len(self._pending_projects)

    def __repr__(self) -> str:
        bp_count = len(self._pending_blueprints)
        proj_count = len(self._pending_projects)
        return f"Workspace(blueprints={bp_count}, projects={proj_count})"
