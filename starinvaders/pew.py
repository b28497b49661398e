"""The player's shots."""

from __future__ import annotations

import enum
import itertools
import logging

import pygame

from .enemy import EnemySystem
from .entity import Entity, EntityRegistry, Rect

logger = logging.getLogger(__name__)

SHOT_SPEED = 300.0
SHOT_SIZE = (10, 20)
SHOT_SPRITE = Rect(0, 4, 15, 19)
OFFSCREEN_Y = -20


class ShotType(enum.IntEnum):
    PLAYER = 0
    ENEMY = 1


class Shot(Entity):
    """A bullet flying upwards that damages the first enemy it touches."""

    _ids = itertools.count(1)

    def __init__(
        self,
        x: float,
        y: float,
        enemies: EnemySystem,
        texture: pygame.Surface | None = None,
    ) -> None:
        self.x = x
        self.y = y
        self.enemies = enemies
        self.texture = texture
        self.speed = SHOT_SPEED
        self.id = next(self._ids)
        self.kind = ShotType.PLAYER
        self.active = True
        self.should_remove = False
        logger.debug("shot #%d created at %.2f, %.2f", self.id, x, y)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, *SHOT_SIZE)

    def update(self, delta_time: float) -> None:
        if not self.active:
            return
        self.y -= self.speed * delta_time
        hit = self.enemies.collision_with(self.rect)
        if hit is not None:
            logger.info("hit enemy of type %s", hit.kind.name)
            self.enemies.damage(hit, 1)
            self._retire()
            return
        if self.y < OFFSCREEN_Y:
            self._retire()

    def _retire(self) -> None:
        self.active = False
        self.should_remove = True

    def render(self, surface: pygame.Surface) -> None:
        if self.texture is None or not self.active:
            return
        src = SHOT_SPRITE
        sprite = self.texture.subsurface(pygame.Rect(src.x, src.y, src.w, src.h))
        surface.blit(pygame.transform.scale(sprite, SHOT_SIZE), (self.x, self.y))

    def cleanup(self) -> None:
        logger.debug("shot #%d cleaned up", self.id)


def cleanup_inactive_shots(registry: EntityRegistry) -> int:
    """Remove the shots marked for removal; return how many went."""
    return registry.prune(lambda entity: isinstance(entity, Shot) and entity.should_remove)