"""Rendering collaborators."""

from .renderer import Renderer
from .hud import HudPanel

__all__ = ["Renderer", "HudPanel"]
