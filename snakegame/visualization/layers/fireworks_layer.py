"""Firework bursts celebrating score milestones."""

import math
import random
from typing import List, Tuple
import pygame

from config.colors import RGB, Colors
from config.constants import FIREWORK_BURSTS, FIREWORK_PARTICLES
from config.settings import Settings
from snakegame.core.state import GameSnapshot
from .base import BaseLayer


class Spark:
    """A single firework particle in board pixel coordinates."""

    def __init__(self, x: float, y: float, color: RGB) -> None:
        angle = random.uniform(0, math.tau)
        speed = random.uniform(60.0, 180.0)  # Pixels per second
        self.x = x
        self.y = y
        self.vx = math.cos(angle) * speed
        self.vy = math.sin(angle) * speed
        self.life = 1.0
        self.decay = random.uniform(0.8, 1.6)  # Life lost per second
        self.color = color
        self.size = random.randint(2, 4)

    @property
    def alive(self) -> bool:
        return self.life > 0

    def update(self, dt: float) -> None:
        self.x += self.vx * dt
        self.y += self.vy * dt
        drag = 0.90 ** (dt * 60)
        self.vx *= drag
        self.vy *= drag
        self.life -= self.decay * dt


class FireworksLayer(BaseLayer):
    """Spawns spark bursts at random board positions and fades them out."""

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings)
        self.sparks: List[Spark] = []

    @property
    def name(self) -> str:
        return "fireworks"

    def launch(self, board_size: Tuple[int, int]) -> None:
        """Start a volley of bursts."""
        width, height = board_size
        for _ in range(FIREWORK_BURSTS):
            x = random.uniform(0, width)
            y = random.uniform(0, height)
            color = Colors.from_hue(random.uniform(0, 360))
            for _ in range(FIREWORK_PARTICLES):
                self.sparks.append(Spark(x, y, color))

    def update(self, dt: float) -> None:
        for spark in self.sparks:
            spark.update(dt)
        self.sparks = [s for s in self.sparks if s.alive]

    def clear(self) -> None:
        self.sparks.clear()

    def render(self, surface: pygame.Surface, snapshot: GameSnapshot) -> None:
        if not self.visible:
            return

        for spark in self.sparks:
            color = Colors.lerp(Colors.BACKGROUND, spark.color, spark.life)
            pygame.draw.circle(surface, color, (int(spark.x), int(spark.y)), spark.size)
