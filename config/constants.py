"""Centralized constants for the snake game."""

# Settings validation
MIN_GRID_SIZE = 2         # Smallest board the engine accepts
MIN_SWIPE_DISTANCE = 10.0  # Floor for the swipe gesture threshold (pixels)

# Collision kinds reported on the COLLISION event
COLLISION_WALL = "wall"
COLLISION_SELF = "self"

# Event sources
EVENT_SOURCE_ENGINE = "engine"
EVENT_SOURCE_INPUT = "input"

# Fireworks shown on a score milestone
FIREWORK_PARTICLES = 30  # Sparks per burst
FIREWORK_BURSTS = 4

# On-screen control pad
VIRTUAL_BUTTON_SIZE = 44
VIRTUAL_BUTTON_GAP = 6
