"""Base class for visualization layers."""

from abc import ABC, abstractmethod
import pygame

from config.settings import Settings
from snakegame.core.state import GameSnapshot, Position


class BaseLayer(ABC):
    """
    Abstract base class for visualization layers.

    Each layer draws one aspect of the game from a state snapshot.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.visible = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Layer name for identification."""
        pass

    @abstractmethod
    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        """
        Render the layer to the surface.

        Args:
            surface: Board surface, one grid cell per ``cell_size`` pixels
            snapshot: State to draw
        """
        pass

    def update(self, dt: float) -> None:
        """Advance layer animations by ``dt`` seconds."""
        pass

    def set_visible(self, visible: bool) -> None:
        """Set layer visibility."""
        self.visible = visible

    @property
    def cell_size(self) -> int:
        return self.settings.engine.cell_size

    def cell_rect(self, position: Position, inset: int = 1) -> pygame.Rect:
        """Screen rectangle of a grid cell, shrunk by ``inset`` on the far edges."""
        size = self.cell_size
        return pygame.Rect(position.x * size, position.y * size, size - inset, size - inset)
