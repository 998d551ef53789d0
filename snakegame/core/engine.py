"""Fixed-tick simulation engine: movement, growth, collisions and difficulty."""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from config.constants import COLLISION_SELF, COLLISION_WALL, EVENT_SOURCE_ENGINE
from config.settings import EngineSettings
from .clock import FrameScheduler, TickClock
from .event_bus import Collision, Event, EventBus, EventType, FoodEaten, LevelUp, TickUpdate
from .state import Direction, GameSnapshot, GameState, GameStatus, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Read-only view of the engine configuration."""
    grid_size: int
    cell_size: int
    base_tick_interval_ms: float
    min_tick_interval_ms: float
    speed_decrement_ms: float
    food_reward: int
    level_threshold: int


@dataclass
class SimulationEngine:
    """
    Owns the game state and advances it one cell per tick.

    The host drives ``scheduler`` once per displayed frame. Each frame the
    engine checks whether the current tick interval has elapsed and, if so,
    runs one ``update``. Every state change is announced on ``event_bus``;
    readers only ever see ``GameSnapshot`` copies.
    """

    event_bus: EventBus
    settings: EngineSettings = field(default_factory=EngineSettings)
    scheduler: FrameScheduler = field(default_factory=FrameScheduler)
    clock: TickClock = field(default_factory=TickClock)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    _state: GameState = field(init=False)
    _frame_handle: Optional[int] = field(default=None, init=False)
    _seed: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        """Build the initial state and subscribe to control commands."""
        if self.settings.seed is not None:
            self.set_seed(self.settings.seed)

        self._state = self._new_state()

        self._subscriptions = [
            (EventType.START, self._on_start),
            (EventType.PAUSE, self._on_pause),
            (EventType.RESUME, self._on_resume),
            (EventType.STOP, self._on_stop),
            (EventType.RESTART, self._on_restart),
            (EventType.DIRECTION_CHANGE, self._on_direction_change),
        ]
        for event_type, handler in self._subscriptions:
            self.event_bus.subscribe(event_type, handler)

    def detach(self) -> None:
        """Unsubscribe from the bus and cancel any scheduled frame."""
        self._cancel_frame()
        for event_type, handler in self._subscriptions:
            self.event_bus.unsubscribe(event_type, handler)

    def set_seed(self, seed: int) -> None:
        """Reseed target placement for reproducible games."""
        self._seed = seed
        self.rng = np.random.default_rng(seed)
        logger.debug(f"Engine random seed set to {seed}")

    def get_seed(self) -> Optional[int]:
        """Get the current random seed, if set."""
        return self._seed

    # ----------------------------------------------------------------- lifecycle

    def init(self) -> None:
        """Reset to a fresh game in the menu state."""
        self._cancel_frame()
        self._state = self._new_state()
        self.clock.reset()

        self._emit(EventType.FOOD_GENERATED, self._state.target)
        self._emit(EventType.INITIALIZED, self._state.snapshot())

    def start(self) -> None:
        """Start the tick loop from the menu state."""
        if self._state.status != GameStatus.MENU:
            logger.debug(f"Ignoring start while {self._state.status.value}")
            return

        self._state.status = GameStatus.PLAYING
        self.clock.reset_baseline()
        self._schedule_frame()

        self._emit(EventType.STARTED, self._state.snapshot())

    def pause(self) -> None:
        """Suspend the tick loop."""
        if self._state.status != GameStatus.PLAYING:
            logger.debug(f"Ignoring pause while {self._state.status.value}")
            return

        self._cancel_frame()
        self._state.status = GameStatus.PAUSED

        self._emit(EventType.PAUSED, self._state.snapshot())

    def resume(self) -> None:
        """Resume a paused tick loop."""
        if self._state.status != GameStatus.PAUSED:
            logger.debug(f"Ignoring resume while {self._state.status.value}")
            return

        self._state.status = GameStatus.PLAYING
        # Fresh baseline so the pause is not counted as elapsed tick time
        self.clock.reset_baseline()
        self._schedule_frame()

        self._emit(EventType.RESUMED, self._state.snapshot())

    def stop(self) -> None:
        """Halt the tick loop and end the game."""
        if not self.is_running:
            self._cancel_frame()
            logger.debug(f"Ignoring stop while {self._state.status.value}")
            return

        self._cancel_frame()
        self._state.status = GameStatus.GAME_OVER

        self._emit(EventType.STOPPED, self._state.snapshot())

    def restart(self) -> None:
        """Stop, reinitialize and start a new game."""
        self.stop()
        self.init()
        self.start()

    def change_direction(self, direction: Direction) -> bool:
        """
        Buffer a direction for the next tick.

        A direction that exactly reverses the committed direction is
        rejected. Returns whether the request was accepted.
        """
        if direction.is_opposite(self._state.direction):
            logger.debug(
                f"Rejected reversal {direction.name} while moving {self._state.direction.name}"
            )
            return False

        self._state.pending_direction = direction
        return True

    @property
    def is_running(self) -> bool:
        """Whether a game is in progress (playing or paused)."""
        return self._state.status in (GameStatus.PLAYING, GameStatus.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self._state.status == GameStatus.PAUSED

    def get_state(self) -> GameSnapshot:
        """Immutable snapshot of the current state."""
        return self._state.snapshot()

    def get_config(self) -> EngineConfig:
        s = self.settings
        return EngineConfig(
            grid_size=s.grid_size,
            cell_size=s.cell_size,
            base_tick_interval_ms=s.base_tick_interval_ms,
            min_tick_interval_ms=s.min_tick_interval_ms,
            speed_decrement_ms=s.speed_decrement_ms,
            food_reward=s.food_reward,
            level_threshold=s.level_threshold,
        )

    # -------------------------------------------------------------- frame loop

    def _schedule_frame(self) -> None:
        if self._frame_handle is None:
            self._frame_handle = self.scheduler.request_frame(self._frame)

    def _cancel_frame(self) -> None:
        self.scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = None

    def _frame(self) -> None:
        """Per-frame callback: tick if due, publish a render snapshot, re-arm."""
        self._frame_handle = None
        if self._state.status != GameStatus.PLAYING:
            return

        elapsed = self.clock.consume_if_due(self._state.tick_interval_ms)
        if elapsed is not None:
            self.update(elapsed)

        self._emit(EventType.RENDER, self._state.snapshot())

        # Handlers may have paused, stopped or restarted the game meanwhile
        if self._state.status == GameStatus.PLAYING:
            self._schedule_frame()

    # -------------------------------------------------------------- game rules

    def update(self, elapsed: float) -> None:
        """
        Advance the game by one tick.

        Args:
            elapsed: Milliseconds since the previous tick
        """
        state = self._state
        if state.status != GameStatus.PLAYING:
            logger.debug(f"Ignoring update while {state.status.value}")
            return

        state.direction = state.pending_direction
        new_head = state.head + state.direction
        ate = new_head == state.target

        state.actor.appendleft(new_head)
        if not ate:
            state.actor.pop()

        collision = self._check_collisions()
        if collision:
            self._emit(EventType.COLLISION, collision)
            self.stop()
            return

        if ate:
            self._eat_food()
            if state.status != GameStatus.PLAYING:
                return

        self._emit(EventType.UPDATED, TickUpdate(state=state.snapshot(), elapsed=elapsed))

    def _check_collisions(self) -> Optional[Collision]:
        """Check the head against the walls and the rest of the body."""
        head = self._state.head

        if not head.in_bounds(self.settings.grid_size):
            return Collision(kind=COLLISION_WALL, position=head)

        for segment in itertools.islice(self._state.actor, 1, None):
            if segment == head:
                return Collision(kind=COLLISION_SELF, position=head)

        return None

    def _eat_food(self) -> None:
        """Score the target, move it and re-evaluate difficulty."""
        state = self._state
        previous_score = state.score
        state.score += self.settings.food_reward

        # No free cell left means the actor fills the board
        target = self._random_free_cell(state.actor)
        state.target = target
        if target is not None:
            self._emit(EventType.FOOD_GENERATED, target)

        threshold = self.settings.level_threshold
        crossed = state.score // threshold - previous_score // threshold
        if crossed > 0:
            self._increase_difficulty(crossed)
            self._emit(EventType.MILESTONE, state.score)

        self._emit(EventType.FOOD_EATEN, FoodEaten(score=state.score, target_position=target))

        if target is None:
            logger.info(f"Board full at score {state.score}, ending game")
            self.stop()

    def _increase_difficulty(self, steps: int) -> None:
        """Raise the level and shorten the tick interval down to the floor."""
        state = self._state
        state.level += steps
        state.tick_interval_ms = max(
            self.settings.min_tick_interval_ms,
            state.tick_interval_ms - self.settings.speed_decrement_ms * steps,
        )
        logger.debug(f"Level {state.level}, tick interval {state.tick_interval_ms}ms")

        self._emit(
            EventType.LEVEL_UP,
            LevelUp(level=state.level, tick_interval_ms=state.tick_interval_ms),
        )

    def _random_free_cell(self, occupied: Iterable[Position]) -> Optional[Position]:
        """
        Draw grid cells uniformly until one is off the actor.

        Returns None when no free cell exists.
        """
        grid = self.settings.grid_size
        taken = set(occupied)
        if len(taken) >= grid * grid:
            return None

        while True:
            x, y = self.rng.integers(0, grid, size=2)
            candidate = Position(int(x), int(y))
            if candidate not in taken:
                return candidate

    def _new_state(self) -> GameState:
        s = self.settings
        start = Position(int(s.start_position[0]), int(s.start_position[1]))
        return GameState.initial(
            start=start,
            direction=Direction.from_string(s.start_direction),
            tick_interval_ms=s.base_tick_interval_ms,
            target=self._random_free_cell([start]),
        )

    def _emit(self, event_type: EventType, payload=None) -> Event:
        return self.event_bus.emit(event_type, payload, source=EVENT_SOURCE_ENGINE)

    # ------------------------------------------------------ command handlers

    def _on_start(self, event: Event) -> None:
        self.start()

    def _on_pause(self, event: Event) -> None:
        self.pause()

    def _on_resume(self, event: Event) -> None:
        self.resume()

    def _on_stop(self, event: Event) -> None:
        self.stop()

    def _on_restart(self, event: Event) -> None:
        self.restart()

    def _on_direction_change(self, event: Event) -> None:
        if isinstance(event.data, Direction):
            self.change_direction(event.data)
        else:
            logger.debug(f"Ignoring directionChange with payload {event.data!r}")
