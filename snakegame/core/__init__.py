"""Core simulation components."""

from .event_bus import EventBus, EventType, Event
from .state import Direction, GameSnapshot, GameState, GameStatus, Position
from .clock import FrameScheduler, TickClock
from .engine import EngineConfig, SimulationEngine

__all__ = [
    "EventBus",
    "EventType",
    "Event",
    "Direction",
    "GameSnapshot",
    "GameState",
    "GameStatus",
    "Position",
    "FrameScheduler",
    "TickClock",
    "EngineConfig",
    "SimulationEngine",
]
