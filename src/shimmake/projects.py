"""Project model — an ordered list of blueprints run as one operation."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from .blueprints import Blueprint
from .context import Context

logger = logging.getLogger(__name__)


class Project(BaseModel):
    """A named sequence of blueprints."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    blueprints: list[Blueprint] = Field(default_factory=list)

    def build(self, ctx: Context[Any]) -> None:
        """Build every blueprint in order; the first failure aborts the rest."""
        logger.info("Building project '%s'", self.name)
        for blueprint in self.blueprints:
            blueprint.build(ctx)
