"""Game session: one bus, one engine and their input collaborator."""

import logging
from typing import Optional

import pygame

from config.settings import Settings
from snakegame.core.clock import FrameScheduler, TickClock, TimeSource, perf_counter_ms
from snakegame.core.engine import SimulationEngine
from snakegame.core.event_bus import Event, EventBus, EventType, FoodEaten
from snakegame.core.state import GameSnapshot, GameStatus
from snakegame.input.controller import InputController

logger = logging.getLogger(__name__)


class GameSession:
    """
    Wires a single game session together.

    Creates the event bus and the engine and injects them into the input
    controller. The host calls ``frame()`` once per display refresh.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        time_source: TimeSource = perf_counter_ms,
    ) -> None:
        self.settings = settings or Settings()
        self.event_bus = event_bus or EventBus()
        self.scheduler = FrameScheduler()

        self.engine = SimulationEngine(
            event_bus=self.event_bus,
            settings=self.settings.engine,
            scheduler=self.scheduler,
            clock=TickClock(time_source),
        )

        board = self.settings.engine.grid_size * self.settings.engine.cell_size
        self.input = InputController(
            self.event_bus,
            self.settings.input,
            window_size=self.settings.window_size,
            board_rect=pygame.Rect(0, self.settings.display.hud_height, board, board),
            time_source=time_source,
        )

        # Displayed score and game-over flag, as the HUD would show them
        self.score = 0
        self.game_over = False

        self._subscriptions = [
            (EventType.PAUSE_TOGGLE, self._on_pause_toggle),
            (EventType.FOOD_EATEN, self._on_food_eaten),
            (EventType.STOPPED, self._on_stopped),
            (EventType.INITIALIZED, self._on_initialized),
        ]
        for event_type, handler in self._subscriptions:
            self.event_bus.subscribe(event_type, handler)

    def init(self) -> None:
        self.engine.init()

    def start(self) -> None:
        self.engine.start()

    def restart(self) -> None:
        """Hide any game-over state and begin a new game."""
        logger.debug("Restarting game")
        self.game_over = False
        self.engine.restart()
        self.score = 0

    def toggle_pause(self) -> None:
        """Pause when playing, resume when paused."""
        status = self.engine.get_state().status
        if status == GameStatus.PLAYING:
            self.engine.pause()
        elif status == GameStatus.PAUSED:
            self.engine.resume()

    def frame(self) -> int:
        """Run one scheduler frame. Returns the number of callbacks run."""
        return self.scheduler.run_frame()

    def handle_event(self, event: pygame.event.Event) -> bool:
        return self.input.handle_event(event)

    def get_state(self) -> GameSnapshot:
        return self.engine.get_state()

    def close(self) -> None:
        """Detach every collaborator from the bus."""
        self.input.destroy()
        self.engine.detach()
        for event_type, handler in self._subscriptions:
            self.event_bus.unsubscribe(event_type, handler)

    def _on_pause_toggle(self, event: Event) -> None:
        self.toggle_pause()

    def _on_food_eaten(self, event: Event) -> None:
        eaten: FoodEaten = event.data
        self.score = eaten.score

    def _on_stopped(self, event: Event) -> None:
        self.game_over = True
        logger.info(f"Game over with score {event.data.score}")

    def _on_initialized(self, event: Event) -> None:
        self.score = 0
        self.game_over = False
