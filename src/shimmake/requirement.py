"""Requirement ABC and requirement-type registration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .context import Context

_requirement_registry: dict[str, type[Requirement]] = {}


def requirement(name: str):
    """Register a Requirement class under its blueprint block name."""

    def decorator(cls):
        _requirement_registry[name] = cls
        return cls

    return decorator


class Requirement[P](ABC):
    """A piece of external state that an operation brings about."""

    @abstractmethod
    def equals(self, ctx: Context[P]) -> bool:
        """Observed state matches the desired state."""

    def exists(self, ctx: Context[P]) -> bool:
        """Resource exists (defaults to equals)."""
        return self.equals(ctx)

    @abstractmethod
    def apply(self, ctx: Context[P]) -> None:
        """Create or update the resource."""

    def remove(self, ctx: Context[P]) -> None:
        """Delete the resource."""
        raise NotImplementedError(f"{self} cannot be removed")

    def __str__(self) -> str:
        return type(self).__name__
