"""The player's lives and the heart display."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

import pygame

from .entity import Entity, Rect

logger = logging.getLogger(__name__)

MAX_HEALTH = 3
HEART_SPRITE = Rect(32, 57, 8, 7)
_HEART_SIZE = (24, 21)
_HEART_SPACING = 35
_WHITE = (255, 255, 255)


class Health:
    """The player's remaining lives."""

    def __init__(self, on_death: Callable[[], None] | None = None) -> None:
        self.on_death = on_death
        self.points = MAX_HEALTH

    def damage(self, amount: int) -> None:
        """Take ``amount`` lives away; call ``on_death`` when none remain."""
        self.points = max(0, self.points - amount)
        logger.info("player takes %d damage, %d lives left", amount, self.points)
        if self.points == 0:
            logger.info("game over")
            if self.on_death is not None:
                self.on_death()

    def add_bonus(self, value: int) -> None:
        """Grant extra lives; bonuses may exceed the starting maximum."""
        self.points += value

    def reset_to(self, value: int) -> None:
        """Set the lives to ``value``, clamped to 0..MAX_HEALTH."""
        self.points = min(MAX_HEALTH, max(0, value))
        logger.info("player lives set to %d", self.points)


@functools.lru_cache(maxsize=1)
def _font() -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, 16)


class HealthDisplay(Entity):
    """Draws one heart per remaining life in the top-left corner."""

    def __init__(self, health: Health, texture: pygame.Surface | None) -> None:
        self.health = health
        self.texture = texture

    def render(self, surface: pygame.Surface) -> None:
        if self.texture is None:
            logger.warning("health texture missing")
            return
        sprite = self.texture.subsurface(
            pygame.Rect(HEART_SPRITE.x, HEART_SPRITE.y, HEART_SPRITE.w, HEART_SPRITE.h)
        )
        heart = pygame.transform.scale(sprite, _HEART_SIZE)
        for i in range(self.health.points):
            surface.blit(heart, (10 + i * _HEART_SPACING, 10))
        label = _font().render(f"Leben: {self.health.points}", True, _WHITE)
        surface.blit(label, (10, 40))

    def cleanup(self) -> None:
        self.texture = None