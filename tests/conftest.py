"""Shared fixtures: a controllable clock, the bus, and a seeded engine."""

import os
from collections import deque

# Headless pygame for renderer/input tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from typing import Any, Iterable, List, Optional, Tuple

import pytest

from config.settings import EngineSettings
from snakegame.core.clock import FrameScheduler, TickClock
from snakegame.core.engine import SimulationEngine
from snakegame.core.event_bus import Event, EventBus, EventType
from snakegame.core.state import Direction, Position


class FakeTime:
    """Millisecond time source advanced by hand."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class EventRecorder:
    """Subscribes to every event type and keeps what it saw, in order."""

    def __init__(self, bus: EventBus) -> None:
        self.events: List[Event] = []
        for event_type in EventType:
            bus.subscribe(event_type, self.events.append)

    @property
    def types(self) -> List[EventType]:
        return [e.type for e in self.events]

    def of(self, event_type: EventType) -> List[Any]:
        return [e.data for e in self.events if e.type == event_type]

    def count(self, event_type: EventType) -> int:
        return len(self.of(event_type))

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus) -> EventRecorder:
    return EventRecorder(bus)


@pytest.fixture
def engine_settings() -> EngineSettings:
    return EngineSettings(seed=1234)


@pytest.fixture
def engine(bus, engine_settings, fake_time) -> SimulationEngine:
    return SimulationEngine(
        event_bus=bus,
        settings=engine_settings,
        scheduler=FrameScheduler(),
        clock=TickClock(fake_time),
    )


@pytest.fixture
def arrange():
    """Place the actor, target and direction of an engine's state directly."""

    def _arrange(
        engine: SimulationEngine,
        actor: Iterable[Tuple[int, int]],
        target: Optional[Tuple[int, int]] = None,
        direction: Direction = Direction.RIGHT,
        score: Optional[int] = None,
    ) -> None:
        state = engine._state
        state.actor = deque(Position(x, y) for x, y in actor)
        if target is not None:
            state.target = Position(*target)
        state.direction = direction
        state.pending_direction = direction
        if score is not None:
            state.score = score

    return _arrange
