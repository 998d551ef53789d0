"""Board layers: background grid, food and the snake itself."""

import pygame

from config.colors import Colors
from config.settings import Settings
from snakegame.core.state import GameSnapshot
from .base import BaseLayer


class GridLayer(BaseLayer):
    """Board background with optional cell grid (debug aid)."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.show_lines = settings.display.show_grid

    @property
    def name(self) -> str:
        return "grid"

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        surface.fill(Colors.BACKGROUND)
        if not self.visible or not self.show_lines:
            return

        width, height = surface.get_size()
        for x in range(0, width + 1, self.cell_size):
            pygame.draw.line(surface, Colors.GRID_LINE, (x, 0), (x, height))
        for y in range(0, height + 1, self.cell_size):
            pygame.draw.line(surface, Colors.GRID_LINE, (0, y), (width, y))


class FoodLayer(BaseLayer):
    """Draws the target cell."""

    @property
    def name(self) -> str:
        return "food"

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        if not self.visible or snapshot.target is None:
            return
        pygame.draw.rect(surface, Colors.FOOD, self.cell_rect(snapshot.target))


class SnakeLayer(BaseLayer):
    """Draws the snake, head in a darker shade than the body."""

    @property
    def name(self) -> str:
        return "snake"

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        if not self.visible:
            return

        # Body first so the head stays on top
        for segment in snapshot.actor[1:]:
            pygame.draw.rect(surface, Colors.SNAKE_BODY, self.cell_rect(segment))
        pygame.draw.rect(surface, Colors.SNAKE_HEAD, self.cell_rect(snapshot.head))
