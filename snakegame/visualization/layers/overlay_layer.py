"""Status overlays drawn over the board: menu prompt, pause and game over."""

from typing import List, Tuple
import pygame

from config.colors import RGB, Colors
from config.settings import Settings
from snakegame.core.state import GameSnapshot, GameStatus
from .base import BaseLayer


class OverlayLayer(BaseLayer):
    """
    Dims the board and centres a short message for non-playing states.

    The game-over panel is shown only while ``game_over_visible`` is set,
    which the renderer raises on STOPPED and lowers on INITIALIZED/STARTED.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.game_over_visible = False
        self.font_large = pygame.font.Font(None, 48)
        self.font_medium = pygame.font.Font(None, 28)

    @property
    def name(self) -> str:
        return "overlay"

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        if not self.visible:
            return

        lines = self.message_lines(snapshot)
        if not lines:
            return

        dim = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        dim.fill(Colors.OVERLAY_DIM)
        surface.blit(dim, (0, 0))

        rendered = [
            (self.font_large if i == 0 else self.font_medium).render(text, True, color)
            for i, (text, color) in enumerate(lines)
        ]
        total_height = sum(r.get_height() for r in rendered) + 8 * (len(rendered) - 1)
        y = (surface.get_height() - total_height) // 2
        for text_surface in rendered:
            x = (surface.get_width() - text_surface.get_width()) // 2
            surface.blit(text_surface, (x, y))
            y += text_surface.get_height() + 8

    def message_lines(self, snapshot: GameSnapshot) -> List[Tuple[str, RGB]]:
        """Lines to show for a snapshot, title first. Empty while playing."""
        if snapshot.status == GameStatus.MENU:
            return [
                ("SNAKE", Colors.TEXT_PRIMARY),
                ("Press Enter to start", Colors.TEXT_SECONDARY),
            ]

        if snapshot.status == GameStatus.PAUSED:
            return [
                ("Paused", Colors.TEXT_PRIMARY),
                ("Space to resume", Colors.TEXT_SECONDARY),
            ]

        if snapshot.status == GameStatus.GAME_OVER and self.game_over_visible:
            encouragement = "Well played!" if snapshot.score > 0 else "Better luck next time"
            return [
                ("Game Over", Colors.TEXT_PRIMARY),
                (f"Score: {snapshot.score}", Colors.TEXT_ACCENT),
                (encouragement, Colors.TEXT_SECONDARY),
                ("Press R to restart", Colors.TEXT_SECONDARY),
            ]

        return []
