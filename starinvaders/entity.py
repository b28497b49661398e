"""Core scene objects: rectangles, the entity interface and the entity registry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_ENTITIES = 100_000


@dataclass
class Rect:
    """An axis-aligned rectangle with float coordinates."""

    x: float
    y: float
    w: float
    h: float

    def overlaps(self, other: Rect) -> bool:
        """Return True if the two rectangles intersect (touching edges do not count)."""
        return (
            self.x < other.x + other.w
            and self.x + self.w > other.x
            and self.y < other.y + other.h
            and self.y + self.h > other.y
        )


class Entity:
    """Something that lives in the scene and takes part in the game loop.

    Every hook does nothing by default; subclasses override what they need.
    """

    def update(self, delta_time: float) -> None:
        """Advance the entity by ``delta_time`` seconds."""

    def render(self, surface) -> None:
        """Draw the entity onto ``surface``."""

    def handle_event(self, event) -> None:
        """React to an input or window event."""

    def cleanup(self) -> None:
        """Release whatever the entity holds."""


class RegistryFullError(Exception):
    """Raised when an entity is added to a registry that has no room left."""


class EntityRegistry:
    """An ordered, bounded collection of the entities in the scene."""

    def __init__(self, capacity: int = MAX_ENTITIES) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entities: list[Entity] = []

    def add(self, entity: Entity) -> Entity:
        """Append ``entity`` and return it; raise RegistryFullError if full."""
        if self.is_full():
            raise RegistryFullError(f"registry holds at most {self.capacity} entities")
        self._entities.append(entity)
        return entity

    def is_full(self) -> bool:
        """Return True if no further entity can be added."""
        return len(self._entities) >= self.capacity

    def prune(self, predicate: Callable[[Entity], bool]) -> int:
        """Remove and clean up every entity matching ``predicate``; return how many."""
        kept: list[Entity] = []
        removed = 0
        for entity in self._entities:
            if predicate(entity):
                entity.cleanup()
                removed += 1
            else:
                kept.append(entity)
        self._entities = kept
        if removed:
            logger.debug("%d entities removed, %d remain", removed, len(kept))
        return removed

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        # Iterating the live list lets entities added during a pass be visited too.
        return iter(self._entities)