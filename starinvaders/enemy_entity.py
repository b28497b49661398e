"""Drives the enemy system and its waves as part of the game loop."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

import pygame

from .enemy import EnemySystem
from .entity import Entity
from .powerup import PowerupSystem

logger = logging.getLogger(__name__)

WAVE_PAUSE = 2.0
_WHITE = (255, 255, 255)


@functools.lru_cache(maxsize=1)
def _font() -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, 16)


class EnemySystemEntity(Entity):
    """Starts waves, moves enemies and moves on to the next wave after a pause."""

    def __init__(
        self,
        enemies: EnemySystem,
        powerups: PowerupSystem,
        game_over: Callable[[], bool],
    ) -> None:
        self.enemies = enemies
        self.powerups = powerups
        self.game_over = game_over
        self.current_wave = 0
        self.wave_started = False
        self.wave_delay = 0.0

    @property
    def status_text(self) -> str:
        return f"Score: {self.enemies.score} Wave: {self.enemies.wave_number}"

    def update(self, delta_time: float) -> None:
        if self.game_over():
            # Restart from wave 1 once the game is back on.
            self.wave_started = False
            return
        if not self.wave_started:
            self.enemies.init_wave(1)
            self.powerups.on_wave_start(1)
            self.wave_started = True
            self.current_wave = 1
            logger.info("first wave started")

        self.enemies.update_wave(delta_time)
        self.enemies.update_all(delta_time)

        if self.enemies.wave_complete:
            self.wave_delay += delta_time
            if self.wave_delay > WAVE_PAUSE:
                self.enemies.start_next_wave()
                self.powerups.on_wave_start(self.enemies.wave_number)
                self.current_wave = self.enemies.wave_number
                self.wave_delay = 0.0
                logger.info("wave %d starting", self.current_wave)

    def render(self, surface: pygame.Surface) -> None:
        self.enemies.render_all(surface)
        surface.blit(_font().render(self.status_text, True, _WHITE), (150, 10))

    def cleanup(self) -> None:
        self.enemies.cleanup()