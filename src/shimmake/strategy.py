"""Strategies deciding when a requirement acts."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .context import Context
from .requirement import Requirement

logger = logging.getLogger(__name__)


class Strategy[P](ABC):
    """Wraps a Requirement with conditional execution logic."""

    def __init__(self, requirement: Requirement[P]) -> None:
        self.requirement = requirement

    @abstractmethod
    def __call__(self, ctx: Context[P]) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.requirement})"


class Present[P](Strategy[P]):
    """Apply only if the resource doesn't exist."""

    def __call__(self, ctx: Context[P]) -> None:
        req = self.requirement
        if req.exists(ctx):
            logger.debug("Skipping %s; already exists", req)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would apply %s", req)
        else:
            logger.info("Applying %s", req)
            req.apply(ctx)


class Ensure[P](Strategy[P]):
    """Apply if the observed state doesn't match."""

    def __call__(self, ctx: Context[P]) -> None:
        req = self.requirement
        if req.equals(ctx):
            logger.debug("Skipping %s; up to date", req)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would apply %s", req)
        else:
            logger.info("Applying %s", req)
            req.apply(ctx)


class Absent[P](Strategy[P]):
    """Remove if the resource exists."""

    def __call__(self, ctx: Context[P]) -> None:
        req = self.requirement
        if req.exists(ctx):
            if ctx.dry_run:
                logger.info("[DRY RUN] Would remove %s", req)
            else:
                logger.info("Removing %s", req)
                req.remove(ctx)
        else:
            logger.debug("Skipping removal of %s; not present", req)
