"""Main render coordinator for the game."""

import logging
from typing import Dict, List, Optional
import pygame

from config.colors import Colors
from config.settings import Settings
from snakegame.core.event_bus import Event, EventBus, EventType, TickUpdate
from snakegame.core.state import GameSnapshot
from snakegame.input.controller import VirtualControls

from .hud import HudPanel
from .layers.base import BaseLayer
from .layers.board_layer import FoodLayer, GridLayer, SnakeLayer
from .layers.fireworks_layer import FireworksLayer
from .layers.overlay_layer import OverlayLayer

logger = logging.getLogger(__name__)


class Renderer:
    """
    Main render coordinator.

    Keeps the most recent state snapshot received from the bus and draws
    it, layer by layer, onto its own board surface once per host frame.
    The engine never hands a drawing surface over the bus.
    """

    def __init__(
        self,
        screen: pygame.Surface,
        settings: Settings,
        event_bus: EventBus,
        initial: Optional[GameSnapshot] = None,
        virtual_controls: Optional[VirtualControls] = None,
    ) -> None:
        self.screen = screen
        self.settings = settings
        self.event_bus = event_bus
        self.virtual_controls = virtual_controls

        pygame.font.init()

        # Render regions
        board = settings.engine.grid_size * settings.engine.cell_size
        hud_height = settings.display.hud_height
        self.hud_rect = pygame.Rect(0, 0, board, hud_height)
        self.board_rect = pygame.Rect(0, hud_height, board, board)
        self.board_surface = pygame.Surface(self.board_rect.size)

        self.hud = HudPanel(self.hud_rect)
        self.font_small = pygame.font.Font(None, 20)

        # Layers (in draw order)
        self.fireworks = FireworksLayer(settings)
        self.overlay = OverlayLayer(settings)
        self._layers: List[BaseLayer] = [
            GridLayer(settings),
            FoodLayer(settings),
            SnakeLayer(settings),
            self.fireworks,
            self.overlay,
        ]

        self.snapshot: Optional[GameSnapshot] = initial
        self.frames_rendered = 0

        self._subscriptions = [
            (EventType.RENDER, self._on_snapshot),
            (EventType.INITIALIZED, self._on_initialized),
            (EventType.STARTED, self._on_started),
            (EventType.PAUSED, self._on_snapshot),
            (EventType.RESUMED, self._on_snapshot),
            (EventType.STOPPED, self._on_stopped),
            (EventType.UPDATED, self._on_updated),
            (EventType.MILESTONE, self._on_milestone),
        ]
        for event_type, handler in self._subscriptions:
            self.event_bus.subscribe(event_type, handler)

    def destroy(self) -> None:
        """Unsubscribe from the bus."""
        for event_type, handler in self._subscriptions:
            self.event_bus.unsubscribe(event_type, handler)

    def render(self, dt: float, fps: float = 0.0) -> None:
        """Draw the latest snapshot to the screen."""
        for layer in self._layers:
            layer.update(dt)

        if self.snapshot is None:
            self.screen.fill(Colors.PANEL_BG)
            return

        for layer in self._layers:
            layer.render(self.board_surface, self.snapshot)

        self.screen.blit(self.board_surface, self.board_rect)
        self.hud.render(self.screen, self.snapshot, fps)

        if self.virtual_controls:
            self._render_virtual_controls()

        self.frames_rendered += 1

    def _render_virtual_controls(self) -> None:
        labels = {"up": "^", "down": "v", "left": "<", "right": ">", "pause": "II"}
        for name, rect in self.virtual_controls.buttons.items():
            pygame.draw.rect(self.screen, Colors.BUTTON_NORMAL, rect, border_radius=6)
            pygame.draw.rect(self.screen, Colors.BUTTON_BORDER, rect, 1, border_radius=6)
            label = self.font_small.render(labels[name], True, Colors.BUTTON_LABEL)
            self.screen.blit(label, label.get_rect(center=rect.center))

    def toggle_layer(self, layer_name: str) -> bool:
        """Toggle layer visibility. Returns new state."""
        for layer in self._layers:
            if layer.name == layer_name:
                layer.set_visible(not layer.visible)
                return layer.visible
        logger.debug(f"No layer named {layer_name}")
        return False

    def get_layer_visibility(self) -> Dict[str, bool]:
        """Get all layer visibility states."""
        return {layer.name: layer.visible for layer in self._layers}

    @property
    def game_over_visible(self) -> bool:
        return self.overlay.game_over_visible

    def _on_snapshot(self, event: Event) -> None:
        self.snapshot = event.data

    def _on_updated(self, event: Event) -> None:
        update: TickUpdate = event.data
        self.snapshot = update.state

    def _on_initialized(self, event: Event) -> None:
        self.snapshot = event.data
        self.overlay.game_over_visible = False
        self.fireworks.clear()

    def _on_started(self, event: Event) -> None:
        self.snapshot = event.data
        self.overlay.game_over_visible = False

    def _on_stopped(self, event: Event) -> None:
        self.snapshot = event.data
        self.overlay.game_over_visible = True

    def _on_milestone(self, event: Event) -> None:
        logger.info(f"Milestone reached at score {event.data}")
        self.fireworks.launch(self.board_rect.size)
