"""Blueprint model — a named, ordered collection of strategies."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, Field

from .context import Context
from .strategy import Strategy

logger = logging.getLogger(__name__)


class Blueprint(BaseModel):
    """A named collection of requirement strategies, run in order."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    ops: list[Strategy[Any]] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Strategy[Any]]:  # type: ignore[override]
        return iter(self.ops)

    def __len__(self) -> int:
        return len(self.ops)

    def build(self, ctx: Context[Any]) -> None:
        """Execute all operations in this blueprint."""
        logger.debug("Building blueprint '%s'", self.name)
        for op in self.ops:
            op(ctx)
