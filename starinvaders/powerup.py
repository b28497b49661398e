"""Falling power-ups, their timed effects and the bomb stock."""

from __future__ import annotations

import enum
import functools
import logging
import random
from dataclasses import dataclass

import pygame

from .entity import Entity, Rect
from .health import Health

logger = logging.getLogger(__name__)

MAX_POWERUPS = 10
MAX_PER_WAVE = 2
DROP_CHANCE_PERCENT = 10
SPRITE_SCALE = 4
OFFSCREEN_Y = 650
BOMB_SPRITE = Rect(34, 50, 4, 5)
_TEXT_COLOR = (0, 255, 255)


class PowerupType(enum.IntEnum):
    DOUBLE_SHOOT = 0
    HEART = 1
    SPEED = 2
    BOMB = 3
    MULTIPLIER = 4


@dataclass(frozen=True)
class PowerupDefinition:
    kind: PowerupType
    sprite_rect: Rect
    duration: float
    effect_strength: float
    fall_speed: float
    spawn_chance: float


DEFINITIONS: dict[PowerupType, PowerupDefinition] = {
    PowerupType.DOUBLE_SHOOT: PowerupDefinition(
        PowerupType.DOUBLE_SHOOT, Rect(25, 41, 6, 5), 5.0, 4.0, 30.0, 17.0
    ),
    PowerupType.HEART: PowerupDefinition(
        PowerupType.HEART, Rect(32, 66, 8, 6), 0.0, 1.0, 35.0, 11.0
    ),
    PowerupType.SPEED: PowerupDefinition(
        PowerupType.SPEED, Rect(25, 57, 5, 6), 8.0, 1.8, 30.0, 28.5
    ),
    PowerupType.BOMB: PowerupDefinition(
        PowerupType.BOMB, Rect(34, 50, 4, 5), 0.0, 1.0, 30.0, 5.0
    ),
    PowerupType.MULTIPLIER: PowerupDefinition(
        PowerupType.MULTIPLIER, Rect(43, 66, 12, 9), 10.0, 2.0, 25.0, 38.5
    ),
}


@dataclass
class Powerup:
    """A power-up falling through the playfield."""

    kind: PowerupType
    position: Rect
    sprite_rect: Rect
    fall_speed: float
    duration: float
    effect_strength: float
    active: bool = True


def pick_random_type(rng) -> PowerupType:
    """Choose a power-up type weighted by the definitions' spawn chances."""
    total = sum(d.spawn_chance for d in DEFINITIONS.values())
    roll = float(rng.randrange(int(total)))
    accumulated = 0.0
    for kind, definition in DEFINITIONS.items():
        accumulated += definition.spawn_chance
        if roll < accumulated:
            return kind
    return PowerupType.DOUBLE_SHOOT


@functools.lru_cache(maxsize=1)
def _font() -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, 16)


def _blit_sprite(surface: pygame.Surface, texture: pygame.Surface, src: Rect, dst: Rect) -> None:
    sprite = texture.subsurface(pygame.Rect(src.x, src.y, src.w, src.h))
    scaled = pygame.transform.scale(sprite, (int(dst.w), int(dst.h)))
    surface.blit(scaled, (dst.x, dst.y))


_TIMER_LABELS = {
    PowerupType.DOUBLE_SHOOT: "DOUBLE SHOOT",
    PowerupType.SPEED: "Speed",
    PowerupType.MULTIPLIER: "Multiplier x2",
}


class PowerupSystem(Entity):
    """Spawns, moves and collects power-ups and tracks their running effects."""

    def __init__(
        self,
        health: Health,
        rng: random.Random | None = None,
        texture: pygame.Surface | None = None,
    ) -> None:
        self.health = health
        self.rng = rng if rng is not None else random.Random()
        self.texture = texture
        self._slots: list[Powerup | None] = [None] * MAX_POWERUPS
        self._timers: dict[PowerupType, float] = {}
        self.bombs = 0
        self.current_wave = 0
        self.spawned_this_wave = 0

    # -- spawning -----------------------------------------------------------

    def spawn(self, x: float, y: float) -> Powerup | None:
        """Spawn a randomly chosen power-up at (x, y)."""
        return self.spawn_specific(x, y, pick_random_type(self.rng))

    def spawn_specific(self, x: float, y: float, kind) -> Powerup | None:
        """Spawn a power-up of ``kind``; return None if every slot is taken."""
        kind = PowerupType(kind)
        for index, slot in enumerate(self._slots):
            if slot is None or not slot.active:
                definition = DEFINITIONS[kind]
                sprite = definition.sprite_rect
                powerup = Powerup(
                    kind=kind,
                    position=Rect(x, y, sprite.w * SPRITE_SCALE, sprite.h * SPRITE_SCALE),
                    sprite_rect=sprite,
                    fall_speed=definition.fall_speed,
                    duration=definition.duration,
                    effect_strength=definition.effect_strength,
                )
                self._slots[index] = powerup
                logger.info("%s power-up spawned at %.2f, %.2f", kind.name, x, y)
                return powerup
        return None

    def active_powerups(self) -> list[Powerup]:
        """Return the power-ups currently falling."""
        return [p for p in self._slots if p is not None and p.active]

    # -- game loop ----------------------------------------------------------

    def update(self, delta_time: float) -> None:
        for kind in list(self._timers):
            self._timers[kind] -= delta_time
            if self._timers[kind] <= 0:
                del self._timers[kind]
                logger.info("%s expired", kind.name)
        for powerup in self.active_powerups():
            powerup.position.y += powerup.fall_speed * delta_time
            if powerup.position.y > OFFSCREEN_Y:
                powerup.active = False

    def render(self, surface: pygame.Surface) -> None:
        if self.texture is None:
            return
        for powerup in self.active_powerups():
            _blit_sprite(surface, self.texture, powerup.sprite_rect, powerup.position)
        for kind, label in _TIMER_LABELS.items():
            if kind in self._timers:
                text = _font().render(f"{label}: {self._timers[kind]:.1f}s", True, _TEXT_COLOR)
                surface.blit(text, (10, 80))
        for i in range(self.bombs):
            _blit_sprite(surface, self.texture, BOMB_SPRITE, Rect(700.0 - i * 25.0, 10.0, 16.0, 20.0))

    def cleanup(self) -> None:
        self.texture = None

    # -- collection and effects ---------------------------------------------

    def check_collision(self, rect: Rect) -> Powerup | None:
        """Collect the first power-up touching ``rect``, apply it and return it."""
        for powerup in self.active_powerups():
            if powerup.position.overlaps(rect):
                self._apply(powerup)
                powerup.active = False
                return powerup
        return None

    def _apply(self, powerup: Powerup) -> None:
        if powerup.kind is PowerupType.HEART:
            self.health.add_bonus(int(powerup.effect_strength))
        elif powerup.kind is PowerupType.BOMB:
            self.bombs += 1
        else:
            self._timers[powerup.kind] = powerup.duration
            logger.info("%s active for %.1f seconds", powerup.kind.name, powerup.duration)

    def use_bomb(self) -> bool:
        """Spend one bomb if any is left; return whether one was spent."""
        if self.bombs <= 0:
            return False
        self.bombs -= 1
        logger.info("bomb used, %d left", self.bombs)
        return True

    @property
    def double_shoot_active(self) -> bool:
        return PowerupType.DOUBLE_SHOOT in self._timers

    @property
    def speed_active(self) -> bool:
        return PowerupType.SPEED in self._timers

    @property
    def multiplier_active(self) -> bool:
        return PowerupType.MULTIPLIER in self._timers

    def speed_multiplier(self) -> float:
        """Factor applied to the player's movement speed."""
        if self.speed_active:
            return DEFINITIONS[PowerupType.SPEED].effect_strength
        return 1.0

    def shot_cooldown_multiplier(self) -> float:
        """Factor applied to the player's shot cooldown."""
        if self.double_shoot_active:
            return 1.0 / DEFINITIONS[PowerupType.DOUBLE_SHOOT].effect_strength
        return 1.0

    def score_multiplier(self) -> float:
        """Factor applied to points scored."""
        if self.multiplier_active:
            return DEFINITIONS[PowerupType.MULTIPLIER].effect_strength
        return 1.0

    # -- wave hooks ---------------------------------------------------------

    def on_wave_start(self, wave_number: int) -> None:
        """Clear falling power-ups and the per-wave drop count."""
        self.current_wave = wave_number
        self.spawned_this_wave = 0
        self._clear_slots()
        logger.info("power-ups: wave %d started", wave_number)

    def on_enemy_killed(self, x: float, y: float) -> None:
        """Maybe drop a power-up where an enemy died (from wave 2 on)."""
        if self.current_wave < 2 or self.spawned_this_wave >= MAX_PER_WAVE:
            return
        if self.rng.randrange(100) < DROP_CHANCE_PERCENT:
            self.spawn(x, y)
            self.spawned_this_wave += 1
            logger.info("power-up %d/%d spawned this wave", self.spawned_this_wave, MAX_PER_WAVE)

    def reset_all(self) -> None:
        """Clear falling power-ups and the double-shoot and speed effects."""
        self._clear_slots()
        self._timers.pop(PowerupType.DOUBLE_SHOOT, None)
        self._timers.pop(PowerupType.SPEED, None)
        self.spawned_this_wave = 0

    def _clear_slots(self) -> None:
        for powerup in self.active_powerups():
            powerup.active = False