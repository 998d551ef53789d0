"""Visualization layers."""

from .base import BaseLayer
from .board_layer import FoodLayer, GridLayer, SnakeLayer
from .fireworks_layer import FireworksLayer
from .overlay_layer import OverlayLayer

__all__ = [
    "BaseLayer",
    "GridLayer",
    "FoodLayer",
    "SnakeLayer",
    "FireworksLayer",
    "OverlayLayer",
]
