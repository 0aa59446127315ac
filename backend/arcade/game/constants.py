"""Game rules shared by the simulation engine and the score validator.

Changing any of these changes what the server considers a plausible score,
so client and server must agree on them.
"""

from dataclasses import dataclass


GRID_SIZE = 20
POINTS_PER_FOOD = 10
INITIAL_SNAKE_LENGTH = 3
# Fastest tick interval (ms) reachable by speeding up
MIN_SPEED = 50


@dataclass(frozen=True)
class Difficulty:
    key: str
    name: str
    initial_speed_ms: int
    speed_increment_ms: int
    food_timeout_ms: int


DIFFICULTIES = {
    'EASY': Difficulty('EASY', 'Easy', initial_speed_ms=200, speed_increment_ms=3, food_timeout_ms=7000),
    'MEDIUM': Difficulty('MEDIUM', 'Medium', initial_speed_ms=150, speed_increment_ms=5, food_timeout_ms=5000),
    'HARD': Difficulty('HARD', 'Hard', initial_speed_ms=100, speed_increment_ms=8, food_timeout_ms=3000),
}


def get_difficulty(key: str) -> Difficulty:
    try:
        return DIFFICULTIES[str(key).upper()]
    except KeyError:
        raise ValueError(f"Unknown difficulty: {key!r}") from None
