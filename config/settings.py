"""Settings for the snake game, loaded from YAML with dataclass defaults."""

import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from config.constants import MIN_GRID_SIZE, MIN_SWIPE_DISTANCE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "game.yaml"


@dataclass
class DisplaySettings:
    """Display and window settings."""
    fps_target: int = 60
    hud_height: int = 48
    show_grid: bool = False
    title: str = "Snake"


@dataclass
class EngineSettings:
    """Simulation engine parameters."""
    grid_size: int = 20
    cell_size: int = 24  # Pixels per grid cell
    base_tick_interval_ms: float = 100.0
    min_tick_interval_ms: float = 50.0
    speed_decrement_ms: float = 5.0
    food_reward: int = 10
    level_threshold: int = 100  # Score step between level-ups
    start_position: List[int] = field(default_factory=lambda: [10, 10])
    start_direction: str = "right"
    seed: Optional[int] = None


@dataclass
class InputSettings:
    """Keyboard, gesture and on-screen control settings."""
    input_cooldown_ms: float = 50.0
    swipe_min_distance: float = 30.0
    virtual_controls: bool = False


@dataclass
class Settings:
    """Main settings container."""
    display: DisplaySettings = field(default_factory=DisplaySettings)
    engine: EngineSettings = field(default_factory=EngineSettings)
    input: InputSettings = field(default_factory=InputSettings)

    @property
    def window_size(self) -> tuple:
        """Window size in pixels: the board plus the HUD strip."""
        board = self.engine.grid_size * self.engine.cell_size
        return (board, board + self.display.hud_height)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from YAML file, falling back to defaults."""
        settings = cls()

        if config_path and config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}

            for section in ("display", "engine", "input"):
                if section in data:
                    _apply_section(getattr(settings, section), data[section] or {}, section)
        elif config_path:
            logger.warning(f"Config file {config_path} not found, using defaults")

        settings.validate()
        return settings

    def save(self, config_path: Path) -> None:
        """Save current settings to YAML file."""
        data = {
            "display": asdict(self.display),
            "engine": asdict(self.engine),
            "input": asdict(self.input),
        }

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """
        Check settings for consistency.

        Recoverable values are clamped with a warning; values the engine
        cannot run with raise ValueError.
        """
        eng = self.engine

        if eng.grid_size < MIN_GRID_SIZE:
            raise ValueError(f"grid_size must be at least {MIN_GRID_SIZE}, got {eng.grid_size}")
        if eng.food_reward <= 0:
            raise ValueError(f"food_reward must be positive, got {eng.food_reward}")
        if eng.level_threshold <= 0:
            raise ValueError(f"level_threshold must be positive, got {eng.level_threshold}")
        if eng.min_tick_interval_ms <= 0:
            raise ValueError(
                f"min_tick_interval_ms must be positive, got {eng.min_tick_interval_ms}"
            )
        if eng.min_tick_interval_ms > eng.base_tick_interval_ms:
            raise ValueError(
                f"min_tick_interval_ms ({eng.min_tick_interval_ms}) exceeds "
                f"base_tick_interval_ms ({eng.base_tick_interval_ms})"
            )
        if eng.speed_decrement_ms < 0:
            logger.warning(f"speed_decrement_ms {eng.speed_decrement_ms} clamped to 0")
            eng.speed_decrement_ms = 0.0

        if len(eng.start_position) != 2:
            raise ValueError(f"start_position must be [x, y], got {eng.start_position}")
        x, y = (int(v) for v in eng.start_position)
        clamped = [max(0, min(eng.grid_size - 1, x)), max(0, min(eng.grid_size - 1, y))]
        if clamped != [x, y]:
            logger.warning(f"start_position {[x, y]} clamped to {clamped}")
        eng.start_position = clamped

        if eng.start_direction.strip().lower() not in ("up", "down", "left", "right"):
            raise ValueError(f"Unknown start_direction '{eng.start_direction}'")

        if self.input.input_cooldown_ms < 0:
            logger.warning(f"input_cooldown_ms {self.input.input_cooldown_ms} clamped to 0")
            self.input.input_cooldown_ms = 0.0
        if self.input.swipe_min_distance < MIN_SWIPE_DISTANCE:
            logger.warning(
                f"swipe_min_distance {self.input.swipe_min_distance} "
                f"clamped to {MIN_SWIPE_DISTANCE}"
            )
            self.input.swipe_min_distance = MIN_SWIPE_DISTANCE


def _apply_section(target: Any, values: Dict[str, Any], section: str) -> None:
    """Copy known keys from a YAML mapping onto a settings dataclass."""
    known = {f.name for f in fields(target)}
    for key, value in values.items():
        if key in known:
            setattr(target, key, value)
        else:
            logger.warning(f"Ignoring unknown setting '{section}.{key}'")
