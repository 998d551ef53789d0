"""Synchronous pub/sub event system connecting the engine to its collaborators."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from collections import defaultdict
import time

from .state import GameSnapshot, Position

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types exchanged over the bus."""

    # Engine lifecycle (emitted)
    INITIALIZED = "initialized"
    STARTED = "started"
    PAUSED = "paused"
    RESUMED = "resumed"
    STOPPED = "stopped"

    # Engine domain events (emitted)
    UPDATED = "updated"
    RENDER = "render"
    FOOD_EATEN = "foodEaten"
    FOOD_GENERATED = "foodGenerated"
    LEVEL_UP = "levelUp"
    MILESTONE = "milestone"
    COLLISION = "collision"

    # Control commands (consumed by the engine)
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    RESTART = "restart"
    DIRECTION_CHANGE = "directionChange"

    # Input intents (consumed by the game session)
    PAUSE_TOGGLE = "pauseToggle"


@dataclass(frozen=True)
class TickUpdate:
    """Payload of UPDATED: the state after a tick and the time it covered."""
    state: GameSnapshot
    elapsed: float


@dataclass(frozen=True)
class FoodEaten:
    """
    Payload of FOOD_EATEN.

    ``target_position`` is the relocated target, or None when the board is full.
    """
    score: int
    target_position: Optional[Position]


@dataclass(frozen=True)
class LevelUp:
    """Payload of LEVEL_UP."""
    level: int
    tick_interval_ms: float


@dataclass(frozen=True)
class Collision:
    """Payload of COLLISION. ``kind`` is "wall" or "self"."""
    kind: str
    position: Position


@dataclass
class Event:
    """Event container with metadata."""

    type: EventType
    data: Any = None
    timestamp: float = field(default_factory=time.time)
    source: str = ""  # Component that emitted the event


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe event system.

    Emission is synchronous and runs on the caller's thread. Each handler
    call is isolated: a handler that raises is logged and the remaining
    handlers for the same emission still run.
    """

    def __init__(self, history_limit: int = 1000) -> None:
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._event_history: List[Event] = []
        self._history_limit = history_limit

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Remove the first registration of ``handler`` for an event type."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: EventType, payload: Any = None, source: str = "") -> Event:
        """Build an event and dispatch it to every current handler."""
        event = Event(type=event_type, data=payload, source=source)
        self._dispatch_event(event)
        return event

    def _dispatch_event(self, event: Event) -> None:
        """Dispatch a single event to all handlers."""
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history = self._event_history[-self._history_limit:]

        # Snapshot so handlers may (un)subscribe while being called
        handlers = list(self._handlers.get(event.type, ()))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type.value}")

    def clear(self) -> None:
        """Remove every registration."""
        self._handlers.clear()

    def handler_count(self, event_type: EventType) -> int:
        """Number of handlers registered for an event type."""
        return len(self._handlers.get(event_type, ()))

    def get_history(
        self,
        event_type: EventType | None = None,
        limit: int = 100
    ) -> List[Event]:
        """Get recent event history, optionally filtered by type."""
        if event_type:
            events = [e for e in self._event_history if e.type == event_type]
        else:
            events = list(self._event_history)
        return events[-limit:]

    def clear_history(self) -> None:
        """Forget recorded events."""
        self._event_history.clear()
