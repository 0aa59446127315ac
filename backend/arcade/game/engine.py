"""Deterministic snake simulation.

One :class:`SimulationEngine` owns exactly one :class:`GameState` and is
the only thing allowed to mutate it. Time is not the engine's concern:
callers (see ``arcade.game.session``) decide when ``tick()`` and
``relocate_food()`` run, which keeps the engine reproducible under an
injected ``random.Random``.
"""

from __future__ import annotations

import enum
import logging
import random
from collections import deque
from dataclasses import dataclass, field
from itertools import islice
from typing import Deque, NamedTuple, Optional, Union

from .constants import GRID_SIZE, INITIAL_SNAKE_LENGTH, MIN_SPEED, POINTS_PER_FOOD, Difficulty


logger = logging.getLogger(__name__)

# Random probes before falling back to scanning the free cells
_FOOD_ATTEMPTS = 64


class Point(NamedTuple):
    x: int
    y: int


class Direction(enum.Enum):
    """Unit vectors in screen coordinates (y grows downwards)."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> 'Direction':
        dx, dy = self.value
        return Direction((-dx, -dy))

    @classmethod
    def parse(cls, value: Union['Direction', str]) -> 'Direction':
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {value!r}") from None


class Status(str, enum.Enum):
    IDLE = 'idle'
    AWAITING_START = 'awaiting_start'
    RUNNING = 'running'
    GAME_OVER = 'game_over'


class InvalidTransitionError(RuntimeError):
    """Raised when an operation is not allowed in the current status."""


@dataclass
class GameState:
    segments: Deque[Point] = field(default_factory=deque)
    direction: Direction = Direction.RIGHT
    pending_direction: Direction = Direction.RIGHT
    food: Optional[Point] = None
    score: int = 0
    speed: int = 0
    status: Status = Status.IDLE
    started_at: Optional[int] = None
    grow_pending: bool = False
    difficulty: Optional[Difficulty] = None


@dataclass(frozen=True)
class GameSnapshot:
    segments: tuple
    food: Optional[Point]
    score: int
    speed: int
    status: Status
    direction: Direction
    difficulty: Optional[str]
    started_at: Optional[int]

    @property
    def head(self) -> Optional[Point]:
        return self.segments[0] if self.segments else None

    def to_dict(self):
        return {
            'segments': [list(p) for p in self.segments],
            'food': list(self.food) if self.food else None,
            'score': self.score,
            'speed': self.speed,
            'status': self.status.value,
            'direction': self.direction.name,
            'difficulty': self.difficulty,
        }


@dataclass(frozen=True)
class TickResult:
    head: Point
    captured: bool = False
    game_over: bool = False
    cause: Optional[str] = None  # 'wall' or 'self' when game_over


class SimulationEngine:
    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        points_per_food: int = POINTS_PER_FOOD,
        initial_length: int = INITIAL_SNAKE_LENGTH,
        min_speed: int = MIN_SPEED,
        rng: Optional[random.Random] = None,
    ) -> None:
        if initial_length < 3 or initial_length > grid_size // 2 + 1:
            raise ValueError("initial_length must fit left of the grid centre and be at least 3")
        self.grid_size = grid_size
        self.points_per_food = points_per_food
        self.initial_length = initial_length
        self.min_speed = min_speed
        self._rng = rng or random.Random()
        self._state = GameState()

    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def difficulty(self) -> Optional[Difficulty]:
        return self._state.difficulty

    # ---- lifecycle ----

    def initialize(self, difficulty: Difficulty, rng: Optional[random.Random] = None) -> GameSnapshot:
        """Reset to the awaiting-start baseline for ``difficulty``.

        The snake is centred, faces right and has ``initial_length``
        segments; food is placed, the score zeroed and the speed set to the
        difficulty's initial interval.
        """
        if self._state.status is Status.RUNNING:
            raise InvalidTransitionError("cannot re-initialize a running game")
        if rng is not None:
            self._rng = rng
        centre = self.grid_size // 2
        state = GameState(
            segments=deque(Point(centre - i, centre) for i in range(self.initial_length)),
            speed=difficulty.initial_speed_ms,
            difficulty=difficulty,
        )
        self._state = state
        state.food = self._place_food()
        state.status = Status.AWAITING_START
        return self.snapshot()

    def start(self, now_ms: int) -> GameSnapshot:
        state = self._state
        if state.status is not Status.AWAITING_START:
            raise InvalidTransitionError(f"cannot start from {state.status.value}")
        state.status = Status.RUNNING
        state.started_at = now_ms
        return self.snapshot()

    def restart(self) -> GameSnapshot:
        """Back to awaiting-start after a game over, keeping the difficulty."""
        if self._state.status is not Status.GAME_OVER:
            raise InvalidTransitionError(f"cannot restart from {self._state.status.value}")
        return self.initialize(self._state.difficulty)

    # ---- input ----

    def set_pending_direction(self, direction: Union[Direction, str]) -> bool:
        """Queue a direction for the next tick.

        Reversing onto the committed direction is routine input noise and is
        ignored; returns whether the request was applied.
        """
        requested = Direction.parse(direction)
        state = self._state
        if state.status is Status.IDLE:
            return False
        if requested is state.direction.opposite:
            return False
        state.pending_direction = requested
        return True

    # ---- simulation ----

    def tick(self) -> TickResult:
        state = self._state
        if state.status is not Status.RUNNING:
            raise InvalidTransitionError(f"tick() requires a running game (status={state.status.value})")

        state.direction = state.pending_direction
        dx, dy = state.direction.value
        head = state.segments[0]
        new_head = Point(head.x + dx, head.y + dy)

        state.segments.appendleft(new_head)
        if state.grow_pending:
            state.grow_pending = False
        else:
            state.segments.pop()

        cause = None
        if not self._in_bounds(new_head):
            cause = 'wall'
        elif any(seg == new_head for seg in islice(state.segments, 1, None)):
            cause = 'self'
        if cause:
            state.status = Status.GAME_OVER
            logger.info(f"[game-over] cause={cause} score={state.score} length={len(state.segments)}")
            return TickResult(new_head, game_over=True, cause=cause)

        if new_head != state.food:
            return TickResult(new_head)

        state.score += self.points_per_food
        state.grow_pending = True
        state.speed = max(self.min_speed, state.speed - state.difficulty.speed_increment_ms)
        state.food = self._place_food()
        return TickResult(new_head, captured=True)

    def relocate_food(self) -> Optional[Point]:
        """Move the food without a capture (the relocation timer fired)."""
        if self._state.status is not Status.RUNNING:
            raise InvalidTransitionError("food only relocates while running")
        self._state.food = self._place_food()
        return self._state.food

    def snapshot(self) -> GameSnapshot:
        state = self._state
        return GameSnapshot(
            segments=tuple(state.segments),
            food=state.food,
            score=state.score,
            speed=state.speed,
            status=state.status,
            direction=state.direction,
            difficulty=state.difficulty.key if state.difficulty else None,
            started_at=state.started_at,
        )

    # ---- helpers ----

    def _in_bounds(self, p: Point) -> bool:
        return 0 <= p.x < self.grid_size and 0 <= p.y < self.grid_size

    def _place_food(self) -> Optional[Point]:
        occupied = set(self._state.segments)
        size = self.grid_size
        for _ in range(_FOOD_ATTEMPTS):
            candidate = Point(self._rng.randrange(size), self._rng.randrange(size))
            if candidate not in occupied:
                return candidate
        # Dense board: pick uniformly among what is left
        free = [Point(x, y) for y in range(size) for x in range(size) if Point(x, y) not in occupied]
        if not free:
            return None
        return self._rng.choice(free)
