"""Enemies, their waves and the player's score."""

from __future__ import annotations

import dataclasses
import enum
import logging
import random
from dataclasses import dataclass, field

import pygame

from .entity import Rect
from .health import Health
from .powerup import PowerupSystem

logger = logging.getLogger(__name__)

MAX_ENEMIES = 100
SPRITE_SCALE = 4
BOTTOM_Y = 600
SPAWN_Y = -50.0
SPAWN_X_RANGE = 700
SPAWN_X_OFFSET = 50
PREDEFINED_WAVES = 3


class EnemyCategory(enum.IntEnum):
    SMALL = 0
    MEDIUM = 1
    LARGE = 2


class EnemyType(enum.IntEnum):
    RED = 0
    YELLOW = 1
    PINK = 2
    BLUE = 3
    GOLD = 4
    DARKGREEN = 5
    SILVER = 6
    GREEN = 7


@dataclass(frozen=True)
class EnemyDefinition:
    kind: EnemyType
    category: EnemyCategory
    sprite_rect: Rect
    max_health: int
    points: int
    speed: float


DEFINITIONS: dict[EnemyType, EnemyDefinition] = {
    EnemyType.RED: EnemyDefinition(EnemyType.RED, EnemyCategory.SMALL, Rect(41, 0, 6, 7), 1, 10, 25.0),
    EnemyType.YELLOW: EnemyDefinition(EnemyType.YELLOW, EnemyCategory.SMALL, Rect(56, 0, 7, 7), 1, 15, 30.0),
    EnemyType.PINK: EnemyDefinition(EnemyType.PINK, EnemyCategory.SMALL, Rect(65, 0, 5, 7), 1, 20, 35.0),
    EnemyType.BLUE: EnemyDefinition(EnemyType.BLUE, EnemyCategory.SMALL, Rect(80, 0, 7, 7), 1, 25, 27.5),
    EnemyType.GOLD: EnemyDefinition(EnemyType.GOLD, EnemyCategory.MEDIUM, Rect(41, 17, 13, 11), 2, 50, 20.0),
    EnemyType.DARKGREEN: EnemyDefinition(
        EnemyType.DARKGREEN, EnemyCategory.MEDIUM, Rect(60, 17, 8, 13), 2, 60, 22.5
    ),
    EnemyType.SILVER: EnemyDefinition(EnemyType.SILVER, EnemyCategory.MEDIUM, Rect(72, 17, 15, 13), 2, 70, 17.5),
    EnemyType.GREEN: EnemyDefinition(EnemyType.GREEN, EnemyCategory.LARGE, Rect(40, 41, 30, 22), 3, 100, 12.5),
}

# Wave number -> (enemy count per type in EnemyType order, spawn delay).
WAVE_DEFINITIONS: dict[int, tuple[tuple[int, ...], float]] = {
    1: ((5, 3, 0, 2, 0, 0, 0, 0), 1.0),
    2: ((3, 4, 2, 3, 2, 1, 0, 0), 0.8),
    3: ((2, 3, 3, 2, 2, 2, 1, 1), 0.6),
}


@dataclass
class Enemy:
    """One enemy on the playfield."""

    kind: EnemyType
    category: EnemyCategory
    position: Rect
    sprite_rect: Rect
    health: int
    max_health: int
    points: int
    speed: float
    active: bool = True
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    animation_timer: float = 0.0
    animation_frame: int = 0


@dataclass
class Wave:
    """Progress of the current wave."""

    wave_number: int = 0
    total_enemies: int = 0
    enemies_spawned: int = 0
    enemies_remaining: int = 0
    spawn_timer: float = 0.0
    spawn_delay: float = 0.0
    wave_complete: bool = False


def sprite_rect(kind) -> Rect:
    """Return the sprite-sheet rectangle of an enemy type; ValueError if unknown."""
    return dataclasses.replace(DEFINITIONS[EnemyType(kind)].sprite_rect)


def check_collision(enemy: Enemy | None, rect: Rect | None) -> bool:
    """Return True if an active ``enemy`` overlaps ``rect``."""
    if enemy is None or not enemy.active or rect is None:
        return False
    return enemy.position.overlaps(rect)


def _is_small(kind: EnemyType) -> bool:
    return kind <= EnemyType.BLUE


def _is_medium(kind: EnemyType) -> bool:
    return EnemyType.BLUE < kind <= EnemyType.SILVER


class EnemySystem:
    """Owns the enemy slots, drives the waves and keeps the score."""

    def __init__(
        self,
        health: Health,
        powerups: PowerupSystem,
        rng: random.Random | None = None,
        texture: pygame.Surface | None = None,
    ) -> None:
        self.health = health
        self.powerups = powerups
        self.rng = rng if rng is not None else random.Random()
        self.texture = texture
        self._slots: list[Enemy | None] = [None] * MAX_ENEMIES
        self.wave = Wave()
        self.score = 0
        self._spawned_per_type: dict[EnemyType, int] = {k: 0 for k in EnemyType}
        self._needed_per_type: dict[EnemyType, int] = {k: 0 for k in EnemyType}

    # -- enemies ------------------------------------------------------------

    def spawn(self, kind, x: float, y: float) -> Enemy | None:
        """Place an enemy of ``kind`` at (x, y); return None if all slots are taken."""
        kind = EnemyType(kind)
        for index, slot in enumerate(self._slots):
            if slot is None or not slot.active:
                definition = DEFINITIONS[kind]
                sprite = dataclasses.replace(definition.sprite_rect)
                enemy = Enemy(
                    kind=kind,
                    category=definition.category,
                    position=Rect(x, y, sprite.w * SPRITE_SCALE, sprite.h * SPRITE_SCALE),
                    sprite_rect=sprite,
                    health=definition.max_health,
                    max_health=definition.max_health,
                    points=definition.points,
                    speed=definition.speed,
                    velocity_y=definition.speed,
                )
                self._slots[index] = enemy
                return enemy
        return None

    def damage(self, enemy: Enemy | None, amount: int) -> None:
        """Take ``amount`` health from ``enemy``, destroying it at zero."""
        if enemy is None or not enemy.active:
            return
        enemy.health -= amount
        if enemy.health <= 0:
            self.destroy(enemy)

    def destroy(self, enemy: Enemy | None) -> None:
        """Kill ``enemy``: award its points and maybe drop a power-up."""
        if enemy is None or not enemy.active:
            return
        self.add_score(enemy.points)
        self.powerups.on_enemy_killed(
            enemy.position.x + enemy.position.w / 2,
            enemy.position.y + enemy.position.h / 2,
        )
        enemy.active = False
        if self.wave.enemies_remaining > 0:
            self.wave.enemies_remaining -= 1

    def destroy_all(self) -> None:
        """Destroy every active enemy, scoring each."""
        for enemy in self.active_enemies():
            self.destroy(enemy)

    def deactivate_all(self) -> None:
        """Remove every enemy without scoring."""
        for enemy in self.active_enemies():
            enemy.active = False

    def update_all(self, delta_time: float) -> None:
        """Move the enemies; one that passes the bottom costs the player a life."""
        for enemy in self.active_enemies():
            enemy.position.x += enemy.velocity_x * delta_time
            enemy.position.y += enemy.velocity_y * delta_time
            if enemy.position.y > BOTTOM_Y:
                logger.info("enemy got through, player loses a life")
                enemy.active = False
                self.wave.enemies_remaining -= 1
                self.health.damage(1)
            enemy.animation_timer += delta_time

    def render_all(self, surface: pygame.Surface) -> None:
        if self.texture is None:
            return
        for enemy in self.active_enemies():
            src = enemy.sprite_rect
            sprite = self.texture.subsurface(pygame.Rect(src.x, src.y, src.w, src.h))
            scaled = pygame.transform.scale(sprite, (int(enemy.position.w), int(enemy.position.h)))
            surface.blit(scaled, (enemy.position.x, enemy.position.y))

    def collision_with(self, rect: Rect | None) -> Enemy | None:
        """Return the first active enemy overlapping ``rect``."""
        if rect is None:
            return None
        for enemy in self.active_enemies():
            if check_collision(enemy, rect):
                return enemy
        return None

    def count_active(self) -> int:
        return len(self.active_enemies())

    def active_enemies(self) -> list[Enemy]:
        """Return the enemies currently on the playfield."""
        return [e for e in self._slots if e is not None and e.active]

    def cleanup(self) -> None:
        self.deactivate_all()
        self.texture = None

    # -- waves --------------------------------------------------------------

    @property
    def wave_number(self) -> int:
        return self.wave.wave_number

    @property
    def wave_complete(self) -> bool:
        return self.wave.wave_complete

    def init_wave(self, wave_number: int) -> None:
        """Prepare wave ``wave_number`` (values below 1 mean wave 1)."""
        if wave_number <= 0:
            wave_number = 1
        self.wave = Wave(wave_number=wave_number)
        if wave_number <= PREDEFINED_WAVES:
            counts, delay = WAVE_DEFINITIONS[wave_number]
            self.wave.spawn_delay = delay
            self.wave.total_enemies = sum(counts)
        else:
            difficulty = wave_number - PREDEFINED_WAVES
            self.wave.spawn_delay = max(0.2, 0.6 - difficulty * 0.05)
            small = 3 + difficulty + self.rng.randrange(3)
            medium = 1 + difficulty // 2 + self.rng.randrange(2)
            large = difficulty // 3 + self.rng.randrange(2)
            small_per_type, small_remainder = divmod(small, 4)
            total = 0
            for kind in EnemyType:
                if _is_small(kind):
                    total += small_per_type + (1 if kind < small_remainder else 0)
                elif _is_medium(kind):
                    count = medium // 3
                    if kind is EnemyType.GOLD and medium % 3 > 0:
                        count += 1
                    total += count
                else:
                    total += large
            self.wave.total_enemies = total
            logger.info(
                "wave %d: %d enemies (S:%d M:%d L:%d), delay %.2f",
                wave_number, total, small, medium, large, self.wave.spawn_delay,
            )
        self.wave.enemies_remaining = self.wave.total_enemies
        logger.info("wave %d initialised with %d enemies", wave_number, self.wave.total_enemies)

    def _plan_wave(self) -> None:
        self._spawned_per_type = {k: 0 for k in EnemyType}
        if self.wave.wave_number <= PREDEFINED_WAVES:
            counts, _ = WAVE_DEFINITIONS[self.wave.wave_number]
            self._needed_per_type = dict(zip(EnemyType, counts))
            return
        remaining = self.wave.total_enemies
        needed: dict[EnemyType, int] = {}
        for kind in EnemyType:
            if _is_small(kind):
                needed[kind] = remaining // (8 - kind)
            elif _is_medium(kind):
                needed[kind] = remaining // (12 - kind)
            else:
                needed[kind] = remaining // 10
            remaining -= needed[kind]
        if remaining > 0:
            needed[EnemyType.RED] += remaining
        self._needed_per_type = needed

    def update_wave(self, delta_time: float) -> None:
        """Spawn the wave's enemies over time and detect its completion."""
        wave = self.wave
        if wave.wave_complete:
            return
        wave.spawn_timer += delta_time
        if wave.spawn_timer >= wave.spawn_delay and wave.enemies_spawned < wave.total_enemies:
            wave.spawn_timer = 0.0
            if wave.enemies_spawned == 0:
                self._plan_wave()
            available = [
                kind for kind in EnemyType
                if self._spawned_per_type[kind] < self._needed_per_type[kind]
            ]
            if available:
                kind = available[self.rng.randrange(len(available))]
                x = float(self.rng.randrange(SPAWN_X_RANGE) + SPAWN_X_OFFSET)
                spawned = self.spawn(kind, x, SPAWN_Y)
                if spawned is not None:
                    if wave.wave_number > 5:
                        spawned.speed *= 1.0 + (wave.wave_number - 5) * 0.1
                        spawned.velocity_y = spawned.speed
                    self._spawned_per_type[kind] += 1
                    wave.enemies_spawned += 1
        if wave.enemies_remaining == 0 and wave.enemies_spawned >= wave.total_enemies:
            wave.wave_complete = True
            logger.info("wave %d complete, score %d", wave.wave_number, self.score)

    def start_next_wave(self) -> None:
        self.init_wave(self.wave.wave_number + 1)

    # -- score --------------------------------------------------------------

    def add_score(self, points: int) -> None:
        """Add ``points`` times the active score multiplier."""
        self.score += points * int(self.powerups.score_multiplier())

    def reset_score(self) -> None:
        self.score = 0