import random

import pygame
import pytest

from starinvaders.enemy import EnemySystem
from starinvaders.gameover import (
    DEFAULT_NAME,
    MAX_HIGHSCORES,
    MAX_NAME_LENGTH,
    GameOverScreen,
    HighscoreEntry,
    HighscoreTable,
)
from starinvaders.health import Health
from starinvaders.powerup import PowerupSystem


def key(k):
    return pygame.event.Event(pygame.KEYDOWN, key=k)


@pytest.fixture
def table(tmp_path):
    return HighscoreTable(tmp_path / "highscore.txt")


@pytest.fixture
def screen(table):
    health = Health()
    powerups = PowerupSystem(health, random.Random(1))
    enemies = EnemySystem(health, powerups, random.Random(1))
    return GameOverScreen(table, health, enemies, powerups, ticks=lambda: 0)


def test_missing_file_gives_defaults(table):
    assert table.entries == [HighscoreEntry(DEFAULT_NAME, 0)] * MAX_HIGHSCORES
    assert table.loaded


def test_load_parses_name_and_score(tmp_path):
    path = tmp_path / "hs.txt"
    path.write_text("BOB 120\nA B 5\nnospace\n")
    table = HighscoreTable(path)
    table.load()
    assert table.entries[0] == HighscoreEntry("BOB", 120)
    assert table.entries[1] == HighscoreEntry("A B", 5)
    assert table.entries[2] == HighscoreEntry(DEFAULT_NAME, 0)


def test_load_truncates_long_names(tmp_path):
    path = tmp_path / "hs.txt"
    path.write_text("X" * 30 + " 7\n")
    table = HighscoreTable(path)
    assert table.entries[0].name == "X" * MAX_NAME_LENGTH


def test_add_inserts_in_order_and_saves(table):
    assert table.add("ANNA", 50) == 0
    assert table.add("BEN", 80) == 0
    assert table.add("CARL", 60) == 1
    assert [e.name for e in table.entries[:3]] == ["BEN", "CARL", "ANNA"]
    assert len(table.entries) == MAX_HIGHSCORES
    reloaded = HighscoreTable(table.path)
    assert reloaded.entries == table.entries


def test_add_ignores_score_not_beating_table(table):
    assert table.add("ZERO", 0) is None
    assert not table.path.exists()


def test_is_highscore_compares_with_last(table):
    for i in range(MAX_HIGHSCORES):
        table.add(f"P{i}", 10 * (i + 1))
    assert not table.is_highscore(10)
    assert table.is_highscore(11)


def test_events_ignored_when_not_game_over(screen):
    screen.handle_event(key(pygame.K_a))
    assert screen.player_name == ""


def test_name_entry_stores_highscore(screen, table):
    screen.enemies.score = 50
    screen.set_game_over(True)
    screen.update(0.0)
    assert screen.entering_name
    assert screen.final_score == 50
    for k in (pygame.K_a, pygame.K_b, pygame.K_1, pygame.K_x, pygame.K_BACKSPACE):
        screen.handle_event(key(k))
    assert screen.player_name == "AB1"
    screen.handle_event(key(pygame.K_RETURN))
    assert not screen.entering_name
    assert table.entries[0] == HighscoreEntry("AB1", 50)


def test_empty_name_is_not_confirmed(screen):
    screen.enemies.score = 5
    screen.set_game_over(True)
    screen.update(0.0)
    screen.handle_event(key(pygame.K_RETURN))
    assert screen.entering_name


def test_name_length_is_limited(screen):
    screen.enemies.score = 5
    screen.set_game_over(True)
    screen.update(0.0)
    for _ in range(MAX_NAME_LENGTH + 5):
        screen.handle_event(key(pygame.K_q))
    assert len(screen.player_name) == MAX_NAME_LENGTH


def test_zero_score_skips_name_entry_and_enter_restarts(screen):
    screen.health.damage(3)
    screen.enemies.init_wave(3)
    screen.enemies.spawn(0, 10, 10)
    screen.set_game_over(True)
    screen.update(0.0)
    assert not screen.entering_name
    screen.handle_event(key(pygame.K_RETURN))
    assert screen.restart_requested
    screen.update(0.0)
    assert not screen.game_over
    assert not screen.restart_requested
    assert screen.health.points == 3
    assert screen.enemies.wave_number == 1
    assert screen.enemies.count_active() == 0


def test_render_darkens_screen(screen):
    surface = pygame.Surface((800, 600))
    surface.fill((255, 255, 255))
    screen.set_game_over(True)
    screen.render(surface)
    assert surface.get_at((5, 5)).r < 255