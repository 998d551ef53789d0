"""Keyboard, swipe and on-screen button input translated into bus events."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

import pygame

from config.constants import (
    EVENT_SOURCE_INPUT,
    MIN_SWIPE_DISTANCE,
    VIRTUAL_BUTTON_GAP,
    VIRTUAL_BUTTON_SIZE,
)
from config.settings import InputSettings
from snakegame.core.clock import TimeSource, perf_counter_ms
from snakegame.core.event_bus import Event, EventBus, EventType, TickUpdate
from snakegame.core.state import Direction

logger = logging.getLogger(__name__)

KEY_DIRECTIONS: Dict[int, Direction] = {
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_a: Direction.LEFT,
    pygame.K_UP: Direction.UP,
    pygame.K_w: Direction.UP,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_d: Direction.RIGHT,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_s: Direction.DOWN,
}

PAUSE_KEYS = (pygame.K_SPACE, pygame.K_p)
START_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)


@dataclass
class InputStats:
    """Counters for received input."""
    total_inputs: int = 0
    valid_inputs: int = 0
    invalid_inputs: int = 0
    touch_inputs: int = 0
    keyboard_inputs: int = 0


class VirtualControls:
    """
    On-screen direction pad and pause button.

    Buttons are laid out as a cross in the bottom-right corner of the
    board with the pause button in its centre.
    """

    def __init__(
        self,
        board_size: Tuple[int, int],
        offset: Tuple[int, int] = (0, 0),
        button_size: int = VIRTUAL_BUTTON_SIZE,
        gap: int = VIRTUAL_BUTTON_GAP,
    ) -> None:
        self.button_size = button_size
        step = button_size + gap

        # Centre cell of the cross
        cx = offset[0] + board_size[0] - gap - 2 * step
        cy = offset[1] + board_size[1] - gap - 2 * step

        self.buttons: Dict[str, pygame.Rect] = {
            "up": pygame.Rect(cx, cy - step, button_size, button_size),
            "left": pygame.Rect(cx - step, cy, button_size, button_size),
            "pause": pygame.Rect(cx, cy, button_size, button_size),
            "right": pygame.Rect(cx + step, cy, button_size, button_size),
            "down": pygame.Rect(cx, cy + step, button_size, button_size),
        }

    def button_at(self, pos: Tuple[float, float]) -> Optional[str]:
        """Name of the button under a screen position, if any."""
        for name, rect in self.buttons.items():
            if rect.collidepoint(pos):
                return name
        return None


class InputController:
    """
    Translates raw pygame events into game commands on the event bus.

    Direction requests from every source share one cooldown and are
    pre-validated against the direction the engine last committed, taken
    from INITIALIZED and UPDATED snapshots: reversals and repeats of it are
    dropped before reaching the engine.
    """

    def __init__(
        self,
        event_bus: EventBus,
        settings: InputSettings | None = None,
        window_size: Tuple[int, int] = (480, 528),
        board_rect: Optional[pygame.Rect] = None,
        time_source: TimeSource = perf_counter_ms,
    ) -> None:
        self.event_bus = event_bus
        self.settings = settings or InputSettings()
        self.window_size = window_size
        self.time_source = time_source

        self.current_direction = Direction.RIGHT
        self.enabled = True
        self.input_cooldown = max(0.0, self.settings.input_cooldown_ms)
        self.min_swipe_distance = max(MIN_SWIPE_DISTANCE, self.settings.swipe_min_distance)

        self._last_input_time = float("-inf")
        self._swipe_start: Optional[Tuple[float, float]] = None
        self._stats = InputStats()

        self.virtual_controls: Optional[VirtualControls] = None
        if self.settings.virtual_controls:
            rect = board_rect or pygame.Rect(0, 0, *window_size)
            self.virtual_controls = VirtualControls(rect.size, rect.topleft)

        self._subscriptions = [
            (EventType.STARTED, self._on_enable),
            (EventType.RESUMED, self._on_enable),
            (EventType.PAUSED, self._on_disable),
            (EventType.STOPPED, self._on_disable),
            (EventType.INITIALIZED, self._on_initialized),
            (EventType.UPDATED, self._on_updated),
        ]
        for event_type, handler in self._subscriptions:
            self.event_bus.subscribe(event_type, handler)

    def destroy(self) -> None:
        """Unsubscribe from the bus."""
        for event_type, handler in self._subscriptions:
            self.event_bus.unsubscribe(event_type, handler)

    # ----------------------------------------------------------- dispatch

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Handle one pygame event.

        Returns:
            True if the event was recognised as game input
        """
        if event.type == pygame.KEYDOWN:
            return self.handle_key(event.key, getattr(event, "mod", 0))

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            return self.handle_press(event.pos)

        if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            return self.handle_release(event.pos)

        if event.type == pygame.FINGERDOWN:
            return self.handle_press(self._finger_to_pixels(event.x, event.y))

        if event.type == pygame.FINGERUP:
            return self.handle_release(self._finger_to_pixels(event.x, event.y))

        return False

    def handle_key(self, key: int, mod: int = 0) -> bool:
        """Handle a key press."""
        now = self.time_source()
        if now - self._last_input_time < self.input_cooldown:
            return False

        direction = KEY_DIRECTIONS.get(key)
        if direction is not None:
            self._stats.total_inputs += 1
            self._stats.keyboard_inputs += 1
            if not self.enabled:
                self._stats.invalid_inputs += 1
                return True
            self._submit_direction(direction, now)
            return True

        if key in PAUSE_KEYS:
            self._emit(EventType.PAUSE_TOGGLE)
        elif key == pygame.K_r:
            # Leave Ctrl/Cmd+R to the window manager
            if mod & (pygame.KMOD_CTRL | pygame.KMOD_META):
                return False
            self._emit(EventType.RESTART)
        elif key in START_KEYS:
            self._emit(EventType.START)
        else:
            return False

        self._stats.total_inputs += 1
        self._stats.keyboard_inputs += 1
        self._last_input_time = now
        return True

    def handle_press(self, pos: Tuple[float, float]) -> bool:
        """Mouse/finger down: a virtual button tap or the start of a swipe."""
        if self.virtual_controls:
            button = self.virtual_controls.button_at(pos)
            if button is not None:
                return self._handle_virtual_button(button)

        if not self.enabled:
            return False

        self._swipe_start = (float(pos[0]), float(pos[1]))
        return True

    def handle_release(self, pos: Tuple[float, float]) -> bool:
        """Mouse/finger up: finish a swipe gesture."""
        if self._swipe_start is None:
            return False

        start = self._swipe_start
        self._swipe_start = None
        if not self.enabled:
            return False

        self._stats.total_inputs += 1
        self._stats.touch_inputs += 1

        direction = self.calculate_swipe_direction(start, pos)
        if direction is None or not self.validate_direction_change(direction):
            self._stats.invalid_inputs += 1
            return True

        now = self.time_source()
        if now - self._last_input_time < self.input_cooldown:
            self._stats.invalid_inputs += 1
            return True

        self._accept_direction(direction, now)
        return True

    def _handle_virtual_button(self, button: str) -> bool:
        now = self.time_source()
        if now - self._last_input_time < self.input_cooldown:
            return True

        self._stats.total_inputs += 1
        self._stats.touch_inputs += 1

        if button == "pause":
            self._last_input_time = now
            self._emit(EventType.PAUSE_TOGGLE)
            return True

        if not self.enabled:
            self._stats.invalid_inputs += 1
            return True

        self._submit_direction(Direction.from_string(button), now)
        return True

    # ---------------------------------------------------------- validation

    def calculate_swipe_direction(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
    ) -> Optional[Direction]:
        """Direction of the dominant axis of a drag, or None if too short."""
        delta_x = end[0] - start[0]
        delta_y = end[1] - start[1]

        if max(abs(delta_x), abs(delta_y)) < self.min_swipe_distance:
            return None

        if abs(delta_x) > abs(delta_y):
            return Direction.RIGHT if delta_x > 0 else Direction.LEFT
        return Direction.DOWN if delta_y > 0 else Direction.UP

    def validate_direction_change(self, direction: Direction) -> bool:
        """Reject reversals and repeats of the committed direction."""
        if direction.is_opposite(self.current_direction):
            return False
        return direction != self.current_direction

    def _submit_direction(self, direction: Direction, now: float) -> None:
        if self.validate_direction_change(direction):
            self._accept_direction(direction, now)
        else:
            self._stats.invalid_inputs += 1

    def _accept_direction(self, direction: Direction, now: float) -> None:
        self._stats.valid_inputs += 1
        self._last_input_time = now
        self._emit(EventType.DIRECTION_CHANGE, direction)

    # ------------------------------------------------------------ settings

    def set_input_cooldown(self, cooldown_ms: float) -> None:
        self.input_cooldown = max(0.0, cooldown_ms)

    def set_min_swipe_distance(self, distance: float) -> None:
        self.min_swipe_distance = max(MIN_SWIPE_DISTANCE, distance)

    def get_input_stats(self) -> InputStats:
        """Copy of the input counters."""
        return replace(self._stats)

    def reset_input_stats(self) -> None:
        self._stats = InputStats()

    # ------------------------------------------------------------- helpers

    def _finger_to_pixels(self, x: float, y: float) -> Tuple[float, float]:
        """Finger events carry normalized coordinates."""
        return (x * self.window_size[0], y * self.window_size[1])

    def _emit(self, event_type: EventType, payload=None) -> None:
        self.event_bus.emit(event_type, payload, source=EVENT_SOURCE_INPUT)

    def _on_enable(self, event: Event) -> None:
        self.enabled = True

    def _on_disable(self, event: Event) -> None:
        self.enabled = False
        self._swipe_start = None

    def _on_initialized(self, event: Event) -> None:
        self.current_direction = event.data.direction

    def _on_updated(self, event: Event) -> None:
        update: TickUpdate = event.data
        self.current_direction = update.state.direction
