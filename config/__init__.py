"""Configuration module for the snake game."""

from .settings import Settings
from .colors import Colors

__all__ = ["Settings", "Colors"]
