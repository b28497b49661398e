"""The player's ship: movement, shooting, bombs and collisions."""

from __future__ import annotations

import logging
from collections.abc import Callable

import pygame

from .enemy import EnemySystem
from .entity import Entity, EntityRegistry, Rect
from .health import Health
from .pew import Shot
from .powerup import PowerupSystem

logger = logging.getLogger(__name__)

PLAYER_SIZE = (20, 40)
PLAYER_SPRITE = Rect(0, 1, 8, 8)
MOVE_SPEED = 200.0
SHOT_COOLDOWN_MS = 900
SHOT_OFFSET = (10, -20)
MIN_Y = 60
START_OFFSET_Y = 100
JOYSTICK_DEADZONE = 7600 / 32767

_UP = (pygame.K_w, pygame.K_UP)
_DOWN = (pygame.K_s, pygame.K_DOWN)
_LEFT = (pygame.K_a, pygame.K_LEFT)
_RIGHT = (pygame.K_d, pygame.K_RIGHT)


def _pressed(state, keys) -> bool:
    return any(state[key] for key in keys)


class Player(Entity):
    """The ship steered by keyboard or joystick."""

    def __init__(
        self,
        registry: EntityRegistry,
        enemies: EnemySystem,
        powerups: PowerupSystem,
        health: Health,
        game_over: Callable[[], bool],
        texture: pygame.Surface | None,
        window_size: tuple[int, int],
        ticks: Callable[[], int] | None = None,
        key_state: Callable[[], object] | None = None,
    ) -> None:
        self.registry = registry
        self.enemies = enemies
        self.powerups = powerups
        self.health = health
        self.game_over = game_over
        self.texture = texture
        self.shot_texture: pygame.Surface | None = None
        self.window_width, self.window_height = window_size
        self.ticks = ticks if ticks is not None else pygame.time.get_ticks
        self.key_state = key_state if key_state is not None else pygame.key.get_pressed
        self.x = float(self.window_width // 2)
        self.y = float(self.window_height - START_OFFSET_Y)
        self.last_shot_time = 0
        self.joystick = None
        self.joystick_id: int | None = None
        self._b_button_was_pressed = False
        self._connect_joystick()

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, *PLAYER_SIZE)

    # -- joystick -----------------------------------------------------------

    def _connect_joystick(self) -> None:
        if not pygame.joystick.get_init():
            return
        count = pygame.joystick.get_count()
        logger.info("available joysticks: %d", count)
        if count == 0:
            return
        try:
            joystick = pygame.joystick.Joystick(0)
            joystick.init()
        except pygame.error as exc:
            logger.warning("failed to open joystick: %s", exc)
            return
        self.joystick = joystick
        self.joystick_id = joystick.get_instance_id()
        logger.info(
            "joystick connected: %s (axes %d, buttons %d)",
            joystick.get_name(), joystick.get_numaxes(), joystick.get_numbuttons(),
        )

    def _close_joystick(self) -> None:
        if self.joystick is not None:
            self.joystick.quit()
        self.joystick = None
        self.joystick_id = None

    def handle_event(self, event) -> None:
        if event.type == pygame.JOYDEVICEADDED:
            logger.info("joystick added, trying to open it")
            self._connect_joystick()
        elif event.type == pygame.JOYDEVICEREMOVED:
            if self.joystick is not None and getattr(event, "instance_id", None) == self.joystick_id:
                logger.info("active joystick disconnected")
                self._close_joystick()
        elif event.type == pygame.JOYBUTTONDOWN:
            logger.debug("joystick button pressed: %s", getattr(event, "button", None))

    # -- actions ------------------------------------------------------------

    def fire(self, now: int) -> Shot | None:
        """Fire a shot if the cooldown has passed; return the new shot."""
        cooldown = int(SHOT_COOLDOWN_MS * self.powerups.shot_cooldown_multiplier())
        if now <= self.last_shot_time + cooldown:
            return None
        if self.registry.is_full():
            logger.warning("entity limit reached, cannot fire")
            return None
        shot = Shot(self.x + SHOT_OFFSET[0], self.y + SHOT_OFFSET[1], self.enemies, self.shot_texture)
        self.registry.add(shot)
        self.last_shot_time = now
        return shot

    def _use_bomb(self) -> None:
        if self.powerups.use_bomb():
            self.enemies.destroy_all()
            logger.info("bomb detonated, %d left", self.powerups.bombs)
        else:
            logger.info("no bombs available")

    # -- game loop ----------------------------------------------------------

    def update(self, delta_time: float) -> None:
        if self.game_over():
            return
        now = self.ticks()
        keys = self.key_state()
        step = MOVE_SPEED * self.powerups.speed_multiplier() * delta_time

        if _pressed(keys, _UP):
            self.y -= step
        if _pressed(keys, _DOWN):
            self.y += step
        if _pressed(keys, _LEFT):
            self.x -= step
        if _pressed(keys, _RIGHT):
            self.x += step
        if keys[pygame.K_SPACE]:
            self.fire(now)
        if keys[pygame.K_e]:
            self._use_bomb()

        if self.joystick is not None:
            self._update_joystick(now, step)

        rect = self.rect
        colliding = self.enemies.collision_with(rect)
        collected = self.powerups.check_collision(rect)
        if collected is not None:
            logger.info("%s power-up collected", collected.kind.name)
        if colliding is not None:
            self.health.damage(1)
            self.enemies.destroy(colliding)

        self.x = min(max(self.x, 0.0), float(self.window_width - PLAYER_SIZE[0]))
        self.y = min(max(self.y, float(MIN_Y)), float(self.window_height - PLAYER_SIZE[1]))

    def _update_joystick(self, now: int, step: float) -> None:
        joystick = self.joystick
        x_axis = joystick.get_axis(0)
        y_axis = joystick.get_axis(1)
        if abs(x_axis) > JOYSTICK_DEADZONE:
            self.x += x_axis * step
        if abs(y_axis) > JOYSTICK_DEADZONE:
            self.y += y_axis * step
        if joystick.get_button(0):
            self.fire(now)
        b_pressed = bool(joystick.get_button(1))
        if b_pressed and not self._b_button_was_pressed and self.powerups.use_bomb():
            self.enemies.destroy_all()
            logger.info("bomb detonated (joystick), %d left", self.powerups.bombs)
        self._b_button_was_pressed = b_pressed

    def render(self, surface: pygame.Surface) -> None:
        if self.texture is None:
            return
        src = PLAYER_SPRITE
        sprite = self.texture.subsurface(pygame.Rect(src.x, src.y, src.w, src.h))
        surface.blit(pygame.transform.scale(sprite, PLAYER_SIZE), (self.x, self.y))

    def cleanup(self) -> None:
        self._close_joystick()
        self.texture = None