import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import random
from collections import defaultdict

import pygame
import pytest

from starinvaders.app import (
    BACKGROUND_IMAGE,
    MAX_DELTA_TIME,
    SHOT_IMAGE,
    SPRITE_SHEET,
    App,
    load_texture,
    main,
)
from starinvaders.background import Background
from starinvaders.enemy_entity import EnemySystemEntity
from starinvaders.gameover import GameOverScreen
from starinvaders.health import HealthDisplay
from starinvaders.pew import Shot
from starinvaders.player import Player
from starinvaders.powerup import PowerupSystem


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def keys():
    return defaultdict(bool)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(tmp_path, keys, clock):
    surface = pygame.Surface((800, 600))
    return App(
        surface,
        asset_dir=tmp_path,
        highscore_path=tmp_path / "hs.txt",
        ticks=clock,
        key_state=lambda: keys,
        rng=random.Random(1),
    )


def _write_assets(directory):
    image = pygame.Surface((128, 128))
    image.fill((10, 20, 30))
    for name in (BACKGROUND_IMAGE, SPRITE_SHEET, SHOT_IMAGE):
        pygame.image.save(image, str(directory / name))


def test_entities_registered_in_order(app):
    kinds = [type(e) for e in app.registry]
    assert kinds == [Background, EnemySystemEntity, PowerupSystem, Player, HealthDisplay, GameOverScreen]


def test_load_texture_missing_returns_none(tmp_path):
    assert load_texture(tmp_path / "nothing.png") is None


def test_load_texture_reads_image(tmp_path):
    _write_assets(tmp_path)
    texture = load_texture(tmp_path / BACKGROUND_IMAGE)
    assert texture.get_size() == (128, 128)


def test_update_clamps_delta_time(app, clock):
    clock.now = 5000
    app.update()
    assert app.delta_time == pytest.approx(MAX_DELTA_TIME)
    clock.now = 5016
    app.update()
    assert app.delta_time == pytest.approx(0.016)
    assert app.last_tick == 5000
    assert app.current_tick == 5016


def test_first_update_starts_wave_one(app, clock):
    clock.now = 100
    app.update()
    assert app.enemies.wave_number == 1
    assert app.enemy_entity.wave_started is True


def test_quit_event_stops(app):
    assert app.handle_event(pygame.event.Event(pygame.QUIT)) is False


def test_other_event_continues(app):
    event = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_x)
    assert app.handle_event(event) is True


def test_death_sets_game_over(app):
    app.health.damage(3)
    assert app.game_over_screen.game_over is True


def test_restart_through_events(app, clock):
    app.game_over_screen.set_game_over(True)
    clock.now = 100
    app.update()
    assert app.game_over_screen.score_checked is True
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_RETURN))
    assert app.game_over_screen.restart_requested is True
    clock.now = 200
    app.update()
    assert app.game_over_screen.game_over is False
    assert app.health.points == 3


def test_shot_fired_and_pruned(app, keys, clock):
    keys[pygame.K_SPACE] = True
    clock.now = 1000
    app.update()
    shots = [e for e in app.registry if isinstance(e, Shot)]
    assert len(shots) == 1
    assert shots[0].x == app.player.x + 10
    keys[pygame.K_SPACE] = False
    for _ in range(30):
        clock.now += 100
        app.update()
    assert not [e for e in app.registry if isinstance(e, Shot)]
    assert len(app.registry) == 6


def test_render_clears_surface(app, clock):
    app.surface.fill((255, 0, 0))
    clock.now = 100
    app.update()
    app.render()
    assert app.surface.get_at((799, 599))[:3] == (0, 0, 0)


def test_iterate_updates_and_renders(app, clock):
    app.surface.fill((255, 0, 0))
    clock.now = 250
    app.iterate()
    assert app.current_tick == 250
    assert app.surface.get_at((799, 599))[:3] == (0, 0, 0)


def test_highscore_path_used(app, tmp_path):
    assert app.game_over_screen.table.path == tmp_path / "hs.txt"


def test_quit_releases_textures(tmp_path, keys, clock):
    _write_assets(tmp_path)
    app = App(
        pygame.Surface((800, 600)),
        asset_dir=tmp_path,
        highscore_path=tmp_path / "hs.txt",
        ticks=clock,
        key_state=lambda: keys,
        rng=random.Random(2),
    )
    assert app.background.texture.get_size() == (128, 128)
    app.quit()
    assert app.background.texture is None
    assert app.player.texture is None
    assert app.health_display.texture is None
    app.quit()
    assert app.powerups.texture is None


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0