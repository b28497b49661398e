import random

import pygame
import pytest

from starinvaders.enemy import EnemySystem, EnemyType
from starinvaders.entity import Entity, EntityRegistry
from starinvaders.health import Health
from starinvaders.pew import SHOT_SPEED, Shot, ShotType, cleanup_inactive_shots
from starinvaders.powerup import PowerupSystem


@pytest.fixture
def enemies():
    health = Health()
    powerups = PowerupSystem(health, random.Random(0))
    return EnemySystem(health, powerups, random.Random(0))


def test_new_shot_defaults(enemies):
    shot = Shot(10, 20, enemies)
    assert shot.speed == 300.0
    assert shot.kind is ShotType.PLAYER
    assert shot.active and not shot.should_remove


def test_ids_increase(enemies):
    first = Shot(0, 0, enemies)
    second = Shot(0, 0, enemies)
    assert second.id > first.id


def test_shot_moves_up(enemies):
    shot = Shot(300, 500, enemies)
    shot.update(0.5)
    assert shot.y == pytest.approx(500 - SHOT_SPEED * 0.5)
    assert shot.active


def test_shot_kills_small_enemy(enemies):
    enemies.spawn(EnemyType.RED, 100, 100)
    shot = Shot(105, 130, enemies)
    shot.update(0.01)
    assert shot.should_remove and not shot.active
    assert enemies.count_active() == 0
    assert enemies.score == 10


def test_shot_damages_medium_enemy(enemies):
    enemy = enemies.spawn(EnemyType.GOLD, 100, 100)
    shot = Shot(105, 130, enemies)
    shot.update(0.01)
    assert enemy.active
    assert enemy.health == enemy.max_health - 1
    assert shot.should_remove


def test_shot_leaving_screen_is_removed(enemies):
    shot = Shot(300, -10, enemies)
    shot.update(0.1)
    assert shot.should_remove and not shot.active


def test_inactive_shot_does_not_move(enemies):
    shot = Shot(300, -10, enemies)
    shot.update(0.1)
    y = shot.y
    shot.update(0.1)
    assert shot.y == y


def test_cleanup_inactive_shots(enemies):
    registry = EntityRegistry(10)
    other = registry.add(Entity())
    keep = registry.add(Shot(300, 400, enemies))
    gone = registry.add(Shot(300, -10, enemies))
    gone.update(0.1)
    assert cleanup_inactive_shots(registry) == 1
    assert list(registry) == [other, keep]


def test_render_draws_texture(enemies):
    texture = pygame.Surface((32, 32))
    texture.fill((255, 0, 0))
    target = pygame.Surface((100, 100))
    target.fill((0, 0, 0))
    shot = Shot(20, 30, enemies, texture)
    shot.render(target)
    assert target.get_at((22, 32))[:3] == (255, 0, 0)
    assert target.get_at((50, 80))[:3] == (0, 0, 0)