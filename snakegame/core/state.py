"""Game state container and its immutable snapshot."""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional, Tuple


class GameStatus(Enum):
    """Lifecycle status of a game."""
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "gameOver"


class Direction(Enum):
    """Unit movement vectors on the grid (y grows downwards)."""
    RIGHT = (1, 0)
    LEFT = (-1, 0)
    DOWN = (0, 1)
    UP = (0, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    def opposite(self) -> "Direction":
        """Get opposite direction."""
        return Direction((-self.dx, -self.dy))

    def is_opposite(self, other: "Direction") -> bool:
        return self.dx == -other.dx and self.dy == -other.dy

    @classmethod
    def from_string(cls, s: str) -> "Direction":
        """Create from a name such as ``"up"`` (case-insensitive)."""
        return cls[s.strip().upper()]

    @classmethod
    def from_vector(cls, dx: int, dy: int) -> "Direction":
        return cls((dx, dy))


@dataclass(frozen=True)
class Position:
    """Integer grid cell."""
    x: int
    y: int

    def __add__(self, direction: Direction) -> "Position":
        return Position(self.x + direction.dx, self.y + direction.dy)

    def in_bounds(self, grid_size: int) -> bool:
        return 0 <= self.x < grid_size and 0 <= self.y < grid_size


@dataclass(frozen=True)
class GameSnapshot:
    """
    Read-only copy of the game state.

    This is the only view of the state that leaves the engine.
    """

    status: GameStatus
    score: int
    level: int
    tick_interval_ms: float
    actor: Tuple[Position, ...]
    target: Optional[Position]
    direction: Direction
    pending_direction: Direction

    @property
    def head(self) -> Position:
        return self.actor[0]

    @property
    def length(self) -> int:
        return len(self.actor)


@dataclass
class GameState:
    """
    Canonical, mutable game state.

    Owned and written exclusively by the simulation engine. ``target`` is
    None only once the actor fills the whole board.
    """

    actor: Deque[Position]
    target: Optional[Position]
    direction: Direction
    pending_direction: Direction
    tick_interval_ms: float
    status: GameStatus = GameStatus.MENU
    score: int = 0
    level: int = 1

    @classmethod
    def initial(
        cls,
        start: Position,
        direction: Direction,
        tick_interval_ms: float,
        target: Position,
    ) -> "GameState":
        """Fresh state for a new game."""
        return cls(
            actor=deque([start]),
            target=target,
            direction=direction,
            pending_direction=direction,
            tick_interval_ms=tick_interval_ms,
        )

    @property
    def head(self) -> Position:
        return self.actor[0]

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            status=self.status,
            score=self.score,
            level=self.level,
            tick_interval_ms=self.tick_interval_ms,
            actor=tuple(self.actor),
            target=self.target,
            direction=self.direction,
            pending_direction=self.pending_direction,
        )
