"""Color scheme for the snake game."""

from dataclasses import dataclass
from typing import Tuple

# Type alias for RGB colors
RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Colors:
    """Color palette for the board, HUD and overlays."""

    # Board
    BACKGROUND: RGB = (255, 255, 255)
    GRID_LINE: RGB = (221, 221, 221)
    SNAKE_HEAD: RGB = (0, 128, 0)
    SNAKE_BODY: RGB = (0, 255, 0)
    FOOD: RGB = (255, 0, 0)

    # HUD - dark strip above the board
    PANEL_BG: RGB = (32, 35, 40)
    PANEL_BORDER: RGB = (55, 58, 65)
    TEXT_PRIMARY: RGB = (235, 238, 245)
    TEXT_SECONDARY: RGB = (140, 145, 155)
    TEXT_ACCENT: RGB = (110, 190, 235)

    # Overlays (use with alpha)
    OVERLAY_DIM: RGBA = (0, 0, 0, 150)

    # On-screen controls
    BUTTON_NORMAL: RGB = (224, 224, 224)
    BUTTON_BORDER: RGB = (120, 120, 120)
    BUTTON_LABEL: RGB = (40, 40, 40)

    @classmethod
    def lerp(cls, color1: RGB, color2: RGB, t: float) -> RGB:
        """Linear interpolation between two colors."""
        t = max(0.0, min(1.0, t))
        return (
            int(color1[0] + (color2[0] - color1[0]) * t),
            int(color1[1] + (color2[1] - color1[1]) * t),
            int(color1[2] + (color2[2] - color1[2]) * t),
        )

    @classmethod
    def from_hue(cls, hue: float) -> RGB:
        """Fully saturated color for a hue in degrees (firework sparks)."""
        h = (hue % 360) / 60.0
        x = 1 - abs(h % 2 - 1)
        r, g, b = [
            (1, x, 0), (x, 1, 0), (0, 1, x),
            (0, x, 1), (x, 0, 1), (1, 0, x),
        ][int(h) % 6]
        return (int(r * 255), int(g * 255), int(b * 255))
