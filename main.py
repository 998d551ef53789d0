#!/usr/bin/env python3
"""
Snake - grid arcade game on a fixed-tick simulation engine.

A Pygame front end: keyboard, mouse/touch swipes and optional on-screen
buttons steer the snake; the engine advances on its own tick interval,
independent of the frame rate.

Run with: python main.py
"""

import sys
import argparse
import logging
from pathlib import Path

import pygame

from config.settings import DEFAULT_CONFIG_PATH, Settings
from snakegame.game import GameSession
from snakegame.visualization.renderer import Renderer

logger = logging.getLogger(__name__)


class Application:
    """Main application class."""

    def __init__(self, args: argparse.Namespace) -> None:
        self.args = args
        self.settings = Settings.load(Path(args.config) if args.config else DEFAULT_CONFIG_PATH)
        self.running = False

        # Override settings from args
        if args.grid_size is not None:
            self.settings.engine.grid_size = args.grid_size
        if args.cell_size is not None:
            self.settings.engine.cell_size = args.cell_size
        if args.seed is not None:
            self.settings.engine.seed = args.seed
        if args.show_grid:
            self.settings.display.show_grid = True
        if args.virtual_controls:
            self.settings.input.virtual_controls = True
        self.settings.validate()

        # Pygame setup
        pygame.init()
        pygame.display.set_caption(self.settings.display.title)
        self.screen = pygame.display.set_mode(self.settings.window_size)
        self.clock = pygame.time.Clock()

        # Core components
        self.session: GameSession | None = None
        self.renderer: Renderer | None = None

    def initialize(self) -> None:
        """Create the game session and the renderer that watches it."""
        self.session = GameSession(settings=self.settings)
        self.renderer = Renderer(
            self.screen,
            self.settings,
            self.session.event_bus,
            initial=self.session.get_state(),
            virtual_controls=self.session.input.virtual_controls,
        )
        self.session.init()
        self.session.start()

    def run(self) -> None:
        """Main application loop."""
        self.initialize()
        self.running = True

        while self.running:
            dt = self.clock.tick(self.settings.display.fps_target) / 1000.0

            self._handle_events()

            # Engine ticks only when its interval has elapsed
            self.session.frame()

            self.renderer.render(dt, self.clock.get_fps())
            pygame.display.flip()

        self.session.close()
        pygame.quit()

    def _handle_events(self) -> None:
        """Handle pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_q):
                self.running = False

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_g:
                visible = self.renderer.toggle_layer("grid")
                logger.debug(f"Grid layer {'shown' if visible else 'hidden'}")

            else:
                self.session.handle_event(event)


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Snake - grid arcade game"
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to game configuration YAML file"
    )

    parser.add_argument(
        "--grid-size",
        type=int,
        default=None,
        help="Cells per side of the square board"
    )

    parser.add_argument(
        "--cell-size",
        type=int,
        default=None,
        help="Pixels per cell"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for food placement"
    )

    parser.add_argument(
        "--show-grid",
        action="store_true",
        help="Draw the cell grid"
    )

    parser.add_argument(
        "--virtual-controls",
        action="store_true",
        help="Show on-screen direction buttons"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


def main() -> None:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        app = Application(args)
        app.run()
    except KeyboardInterrupt:
        print("\nExiting...")
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
