"""Score strip drawn above the board."""

import pygame

from config.colors import Colors
from snakegame.core.state import GameSnapshot


class HudPanel:
    """Shows score, level and current speed."""

    def __init__(self, rect: pygame.Rect) -> None:
        self.rect = rect
        self.font = pygame.font.Font(None, 28)
        self.font_small = pygame.font.Font(None, 20)

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot, fps: float = 0.0) -> None:
        pygame.draw.rect(surface, Colors.PANEL_BG, self.rect)
        pygame.draw.line(
            surface,
            Colors.PANEL_BORDER,
            (self.rect.left, self.rect.bottom - 1),
            (self.rect.right, self.rect.bottom - 1),
            2
        )

        padding = 12
        center_y = self.rect.centery

        score = self.font.render(f"Score: {snapshot.score}", True, Colors.TEXT_PRIMARY)
        surface.blit(score, (self.rect.left + padding, center_y - score.get_height() // 2))

        level = self.font.render(f"Level {snapshot.level}", True, Colors.TEXT_ACCENT)
        surface.blit(level, (self.rect.centerx - level.get_width() // 2,
                             center_y - level.get_height() // 2))

        ticks_per_second = 1000.0 / snapshot.tick_interval_ms
        info = f"{ticks_per_second:.1f} cells/s"
        if fps > 0:
            info += f" | {fps:.0f} FPS"
        speed = self.font_small.render(info, True, Colors.TEXT_SECONDARY)
        surface.blit(speed, (self.rect.right - padding - speed.get_width(),
                             center_y - speed.get_height() // 2))
