"""The game-over screen, name entry and the persistent highscore table."""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pygame

from .enemy import EnemySystem
from .entity import Entity
from .health import MAX_HEALTH, Health
from .powerup import PowerupSystem

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20
MAX_HIGHSCORES = 5
DEFAULT_NAME = "---"
HIGHSCORE_FILE = "highscore.txt"
SCREEN_SIZE = (800, 600)

_WHITE = (255, 255, 255)
_GREY = (100, 100, 100)
_YELLOW = (255, 255, 0)
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Parse a leading integer the lenient way: no number means 0."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


@dataclass
class HighscoreEntry:
    name: str = DEFAULT_NAME
    score: int = 0


class HighscoreTable:
    """The top scores, kept in a small text file of ``NAME SCORE`` lines."""

    def __init__(self, path: str | Path = HIGHSCORE_FILE) -> None:
        self.path = Path(path)
        self._entries: list[HighscoreEntry] = self._defaults()
        self.loaded = False

    @staticmethod
    def _defaults() -> list[HighscoreEntry]:
        return [HighscoreEntry() for _ in range(MAX_HIGHSCORES)]

    @property
    def entries(self) -> list[HighscoreEntry]:
        """The table, best score first; loaded from disk on first use."""
        if not self.loaded:
            self.load()
        return self._entries

    def load(self) -> None:
        """Read the table from disk; a missing file leaves the defaults."""
        self._entries = self._defaults()
        try:
            with self.path.open("r", encoding="utf-8", errors="replace") as handle:
                for entry, line in zip(self._entries, handle):
                    space = line.rfind(" ")
                    if space < 0:
                        continue
                    entry.name = line[:space][:MAX_NAME_LENGTH]
                    entry.score = _atoi(line[space + 1:])
            logger.info("highscores loaded")
        except OSError:
            logger.info("no highscore file found, using defaults")
        self.loaded = True

    def save(self) -> None:
        """Write the table to disk; OSError propagates if that fails."""
        with self.path.open("w", encoding="utf-8") as handle:
            for entry in self._entries:
                handle.write(f"{entry.name} {entry.score}\n")
        logger.info("highscores saved")

    def is_highscore(self, score: int) -> bool:
        """Return True if ``score`` beats the lowest entry."""
        return score > self.entries[-1].score

    def add(self, name: str, score: int) -> int | None:
        """Insert a score, save the table and return its position, or None."""
        entries = self.entries
        position = next((i for i, e in enumerate(entries) if score > e.score), None)
        if position is None:
            return None
        entries.insert(position, HighscoreEntry(name[:MAX_NAME_LENGTH], score))
        del entries[MAX_HIGHSCORES:]
        self.save()
        return position


@functools.lru_cache(maxsize=1)
def _font() -> pygame.font.Font:
    if not pygame.font.get_init():
        pygame.font.init()
    return pygame.font.Font(None, 16)


def _text(surface: pygame.Surface, text: str, position: tuple[int, int], color=_WHITE) -> None:
    surface.blit(_font().render(text, True, color), position)


def _key_to_char(key: int) -> str | None:
    if pygame.K_a <= key <= pygame.K_z:
        return chr(ord("A") + key - pygame.K_a)
    if pygame.K_0 <= key <= pygame.K_9:
        return chr(ord("0") + key - pygame.K_0)
    if key == pygame.K_SPACE:
        return " "
    return None


class GameOverScreen(Entity):
    """Shows the game-over overlay, takes a highscore name and restarts the game."""

    def __init__(
        self,
        table: HighscoreTable,
        health: Health,
        enemies: EnemySystem,
        powerups: PowerupSystem,
        ticks: Callable[[], int] | None = None,
    ) -> None:
        self.table = table
        self.health = health
        self.enemies = enemies
        self.powerups = powerups
        self.ticks = ticks if ticks is not None else pygame.time.get_ticks
        self.game_over = False
        self.entering_name = False
        self.player_name = ""
        self.final_score = 0
        self.score_checked = False
        self.restart_requested = False

    def set_game_over(self, value: bool) -> None:
        self.game_over = value
        if value:
            logger.info("game over, final score %d", self.enemies.score)
            if not self.table.loaded:
                self.table.load()
            self.score_checked = False

    def restart(self) -> None:
        """Reset lives, score, enemies, the wave and power-ups."""
        logger.info("restarting game")
        self.game_over = False
        self.entering_name = False
        self.score_checked = False
        self.player_name = ""
        self.health.reset_to(MAX_HEALTH)
        self.enemies.reset_score()
        self.enemies.deactivate_all()
        self.enemies.init_wave(1)
        self.powerups.reset_all()

    def update(self, delta_time: float) -> None:
        if not self.game_over:
            return
        if not self.entering_name and not self.score_checked:
            score = self.enemies.score
            if score > 0 and self.table.is_highscore(score):
                self.entering_name = True
                self.final_score = score
                self.player_name = ""
                logger.info("new highscore, waiting for a name")
            self.score_checked = True
        if self.restart_requested:
            self.restart()
            self.restart_requested = False

    def handle_event(self, event) -> None:
        if not self.game_over or event.type != pygame.KEYDOWN:
            return
        key = event.key
        if self.entering_name or not self.score_checked:
            self._edit_name(key)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self.restart_requested = True
        elif key == pygame.K_ESCAPE:
            pygame.event.post(pygame.event.Event(pygame.QUIT))

    def _edit_name(self, key: int) -> None:
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if self.player_name:
                try:
                    self.table.add(self.player_name, self.final_score)
                except OSError as exc:
                    logger.error("could not save highscores: %s", exc)
                self.entering_name = False
                logger.info("highscore stored: %s - %d", self.player_name, self.final_score)
        elif key == pygame.K_BACKSPACE:
            self.player_name = self.player_name[:-1]
        elif len(self.player_name) < MAX_NAME_LENGTH:
            char = _key_to_char(key)
            if char is not None:
                self.player_name += char

    def render(self, surface: pygame.Surface) -> None:
        if not self.game_over:
            return
        overlay = pygame.Surface(SCREEN_SIZE, pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 200))
        surface.blit(overlay, (0, 0))
        if self.entering_name:
            self._render_name_entry(surface)
        else:
            self._render_table(surface)

    def _render_name_entry(self, surface: pygame.Surface) -> None:
        _text(surface, "NEUER HIGHSCORE!", (250, 100))
        _text(surface, f"Score: {self.final_score}", (300, 150))
        _text(surface, "Name eingeben:", (200, 250))
        pygame.draw.rect(surface, _GREY, pygame.Rect(250, 300, 300, 40), 1)
        if self.player_name:
            _text(surface, self.player_name, (260, 310))
        if (self.ticks() // 500) % 2 == 0:
            cursor_x = 260 + len(self.player_name) * 15
            pygame.draw.line(surface, _WHITE, (cursor_x, 310), (cursor_x, 330))
        _text(surface, "ENTER - Bestaetigen", (200, 400))
        _text(surface, "BACKSPACE - Loeschen", (200, 430))

    def _render_table(self, surface: pygame.Surface) -> None:
        score = self.enemies.score
        _text(surface, "GAME OVER", (300, 50))
        _text(surface, f"Dein Score: {score}", (250, 100))
        _text(surface, "TOP 5 HIGHSCORES", (300, 180))
        pygame.draw.line(surface, _WHITE, (200, 210), (600, 210))
        for rank, entry in enumerate(self.table.entries, start=1):
            highlight = entry.score == score and entry.name == self.player_name
            line = f"{rank}. {entry.name:<20} {entry.score:6d}"
            _text(surface, line, (200, 230 + (rank - 1) * 40), _YELLOW if highlight else _WHITE)
        _text(surface, "ENTER - Neues Spiel", (250, 500))
        _text(surface, "ESC - Beenden", (250, 530))