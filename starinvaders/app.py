"""The application: builds the scene, runs the game loop and shuts it down."""

from __future__ import annotations

import argparse
import logging
import random
from collections.abc import Callable
from pathlib import Path

import pygame

from .background import Background
from .enemy import EnemySystem
from .enemy_entity import EnemySystemEntity
from .entity import EntityRegistry
from .gameover import HIGHSCORE_FILE, GameOverScreen, HighscoreTable
from .health import Health, HealthDisplay
from .pew import cleanup_inactive_shots
from .player import Player
from .powerup import PowerupSystem

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Space Invaders"
WINDOW_SIZE = (800, 600)
MAX_DELTA_TIME = 0.1
FRAME_RATE = 120
BACKGROUND_IMAGE = "SpaceInvaders_Background.bmp"
SPRITE_SHEET = "pico8_invaders_sprites_LARGE.png"
SHOT_IMAGE = "shot.png"
_AXIS_LOG_THRESHOLD = 8000 / 32767
_CLEAR_COLOR = (0, 0, 0)


def load_texture(path: str | Path) -> pygame.Surface | None:
    """Load an image from ``path``; return None (and log) if it cannot be read."""
    try:
        return pygame.image.load(str(path))
    except (pygame.error, OSError, FileNotFoundError) as exc:
        logger.error("could not load %s: %s", path, exc)
        return None


class App:
    """Owns every game system and the entities that take part in the loop."""

    def __init__(
        self,
        surface: pygame.Surface,
        asset_dir: str | Path = "pictures",
        highscore_path: str | Path = HIGHSCORE_FILE,
        ticks: Callable[[], int] | None = None,
        key_state: Callable[[], object] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.surface = surface
        self.ticks = ticks if ticks is not None else pygame.time.get_ticks
        self.rng = rng if rng is not None else random.Random()
        self.last_tick = 0
        self.current_tick = 0
        self.delta_time = 0.0
        self._closed = False

        assets = Path(asset_dir)
        background_texture = load_texture(assets / BACKGROUND_IMAGE)
        sprites = load_texture(assets / SPRITE_SHEET)
        shot_texture = load_texture(assets / SHOT_IMAGE)

        self.registry = EntityRegistry()
        self.health = Health()
        self.powerups = PowerupSystem(self.health, self.rng, sprites)
        self.enemies = EnemySystem(self.health, self.powerups, self.rng, sprites)
        self.game_over_screen = GameOverScreen(
            HighscoreTable(highscore_path), self.health, self.enemies, self.powerups, self.ticks
        )
        self.health.on_death = lambda: self.game_over_screen.set_game_over(True)

        def is_game_over() -> bool:
            return self.game_over_screen.game_over

        self.background = Background(background_texture)
        self.enemy_entity = EnemySystemEntity(self.enemies, self.powerups, is_game_over)
        self.player = Player(
            self.registry,
            self.enemies,
            self.powerups,
            self.health,
            is_game_over,
            sprites,
            surface.get_size(),
            self.ticks,
            key_state,
        )
        self.player.shot_texture = shot_texture
        self.health_display = HealthDisplay(self.health, sprites)

        for entity in (
            self.background,
            self.enemy_entity,
            self.powerups,
            self.player,
            self.health_display,
            self.game_over_screen,
        ):
            self.registry.add(entity)
            logger.debug("%s added, entity count %d", type(entity).__name__, len(self.registry))

    def handle_event(self, event) -> bool:
        """Dispatch ``event`` to the entities; return False when the app should stop."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.JOYAXISMOTION:
            value = getattr(event, "value", 0.0)
            if abs(value) > _AXIS_LOG_THRESHOLD:
                logger.debug("joystick axis %s moved to %.3f", getattr(event, "axis", None), value)
        elif event.type == pygame.JOYDEVICEADDED:
            logger.info("joystick connected")
        elif event.type == pygame.JOYDEVICEREMOVED:
            logger.info("joystick disconnected")
        elif event.type == pygame.JOYBUTTONDOWN:
            logger.debug("joystick button pressed: %s", getattr(event, "button", None))
        elif event.type == pygame.JOYBUTTONUP:
            logger.debug("joystick button released: %s", getattr(event, "button", None))
        for entity in self.registry:
            entity.handle_event(event)
        return True

    def update(self) -> None:
        """Advance every entity by the time elapsed since the last frame."""
        self.last_tick = self.current_tick
        self.current_tick = self.ticks()
        self.delta_time = min((self.current_tick - self.last_tick) / 1000.0, MAX_DELTA_TIME)
        cleanup_inactive_shots(self.registry)
        for entity in self.registry:
            entity.update(self.delta_time)
        cleanup_inactive_shots(self.registry)

    def render(self) -> None:
        """Clear the surface, draw every entity and present the frame."""
        self.surface.fill(_CLEAR_COLOR)
        for entity in self.registry:
            entity.render(self.surface)
        if pygame.display.get_init() and pygame.display.get_surface() is self.surface:
            pygame.display.flip()

    def iterate(self) -> None:
        """Run one frame: update, then render."""
        self.update()
        self.render()

    def quit(self) -> None:
        """Clean up every entity; calling it again does nothing."""
        if self._closed:
            return
        for entity in self.registry:
            entity.cleanup()
        self._closed = True

    def run(self) -> None:
        """Run the game loop until a quit event arrives."""
        clock = pygame.time.Clock()
        running = True
        try:
            while running:
                for event in pygame.event.get():
                    if not self.handle_event(event):
                        running = False
                        break
                if running:
                    self.iterate()
                    clock.tick(FRAME_RATE)
        finally:
            self.quit()


def main(argv: list[str] | None = None) -> int:
    """Start the game in a window."""
    parser = argparse.ArgumentParser(prog="starinvaders", description="A small space shooter.")
    parser.add_argument("--assets", default="pictures", help="directory holding the images")
    parser.add_argument("--highscores", default=HIGHSCORE_FILE, help="highscore file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    pygame.init()
    try:
        try:
            surface = pygame.display.set_mode(WINDOW_SIZE)
        except pygame.error as exc:
            logger.error("could not create window: %s", exc)
            return 1
        pygame.display.set_caption(WINDOW_TITLE)
        App(surface, args.assets, args.highscores).run()
    finally:
        pygame.quit()
    return 0