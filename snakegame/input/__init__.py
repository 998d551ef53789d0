"""Input handling."""

from .controller import InputController, InputStats, VirtualControls

__all__ = ["InputController", "InputStats", "VirtualControls"]
