import pygame

from starinvaders.background import Background


def _blue_texture():
    texture = pygame.Surface((4, 4))
    texture.fill((0, 0, 255))
    return texture


def test_fills_whole_surface():
    surface = pygame.Surface((40, 30))
    Background(_blue_texture()).render(surface)
    for point in [(0, 0), (39, 0), (0, 29), (39, 29), (20, 15)]:
        assert surface.get_at(point)[:3] == (0, 0, 255)


def test_missing_texture_draws_nothing():
    surface = pygame.Surface((10, 10))
    surface.fill((1, 2, 3))
    Background(None).render(surface)
    assert surface.get_at((5, 5))[:3] == (1, 2, 3)


def test_cleanup_stops_drawing():
    background = Background(_blue_texture())
    background.cleanup()
    surface = pygame.Surface((10, 10))
    background.render(surface)
    assert surface.get_at((5, 5))[:3] == (0, 0, 0)