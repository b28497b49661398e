"""The static backdrop stretched over the whole window."""

from __future__ import annotations

import pygame

from .entity import Entity


class Background(Entity):
    """Draws one image scaled to fill the target surface."""

    def __init__(self, texture: pygame.Surface | None) -> None:
        self.texture = texture

    def render(self, surface: pygame.Surface) -> None:
        if self.texture is None:
            return
        surface.blit(pygame.transform.scale(self.texture, surface.get_size()), (0, 0))

    def cleanup(self) -> None:
        self.texture = None