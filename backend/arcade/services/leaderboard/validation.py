"""Plausibility checks for client-reported scores.

Scores arrive from an untrusted browser, so the server cross-checks the
score against the telemetry reported with it (final length, elapsed time)
using the game's own rules. Everything here is pure: no I/O and no clock
other than the ``now_ms`` passed in.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from arcade.game.constants import DIFFICULTIES, GRID_SIZE, INITIAL_SNAKE_LENGTH, POINTS_PER_FOOD


INVALID_SCORE = 'INVALID_SCORE'
STALE_TIMESTAMP = 'STALE_TIMESTAMP'
MISSING_GAME_DATA = 'MISSING_GAME_DATA'
INVALID_DIFFICULTY = 'INVALID_DIFFICULTY'
LENGTH_MISMATCH = 'LENGTH_MISMATCH'
GAME_TIME_TOO_SHORT = 'GAME_TIME_TOO_SHORT'


@dataclass(frozen=True)
class ValidationRules:
    points_per_food: int = POINTS_PER_FOOD
    grid_cells: int = GRID_SIZE * GRID_SIZE
    initial_length: int = INITIAL_SNAKE_LENGTH
    difficulties: tuple = tuple(DIFFICULTIES)
    freshness_ms: int = 10 * 60 * 1000
    length_tolerance: int = 2
    min_ms_per_food: int = 500

    @property
    def max_score(self) -> int:
        return self.grid_cells * self.points_per_food

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'ValidationRules':
        grid = int(config.get('GRID_SIZE', GRID_SIZE))
        return cls(
            points_per_food=int(config.get('POINTS_PER_FOOD', POINTS_PER_FOOD)),
            grid_cells=grid * grid,
            initial_length=int(config.get('INITIAL_SNAKE_LENGTH', INITIAL_SNAKE_LENGTH)),
            difficulties=tuple(config.get('DIFFICULTIES', tuple(DIFFICULTIES))),
            freshness_ms=int(config.get('SUBMISSION_FRESHNESS_MS', 10 * 60 * 1000)),
            length_tolerance=int(config.get('SNAKE_LENGTH_TOLERANCE', 2)),
            min_ms_per_food=int(config.get('MIN_MS_PER_FOOD', 500)),
        )


DEFAULT_RULES = ValidationRules()


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    reason: Optional[str] = None


ACCEPTED = Verdict(True)


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # JSON integers are unbounded; only floats can be inf or nan
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def validate(payload: Any, now_ms: Optional[int] = None, rules: ValidationRules = DEFAULT_RULES) -> Verdict:
    """Return whether a ``/submit-score`` body is physically plausible.

    Checks run in a fixed order and the first failure names the reason:
    score shape and range, timestamp freshness, difficulty, final length
    versus the length implied by the score, and elapsed time versus the
    fastest possible eating rate.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if not isinstance(payload, Mapping):
        return Verdict(False, MISSING_GAME_DATA)

    score = payload.get('score')
    if not _is_number(score) or score != int(score):
        return Verdict(False, INVALID_SCORE)
    score = int(score)
    if score < 0 or score % rules.points_per_food != 0 or score > rules.max_score:
        return Verdict(False, INVALID_SCORE)

    timestamp = payload.get('timestamp')
    if not _is_number(timestamp) or abs(now_ms - timestamp) > rules.freshness_ms:
        return Verdict(False, STALE_TIMESTAMP)

    game_data = payload.get('gameData')
    if not isinstance(game_data, Mapping):
        return Verdict(False, MISSING_GAME_DATA)

    if game_data.get('difficulty') not in rules.difficulties:
        return Verdict(False, INVALID_DIFFICULTY)

    foods = score // rules.points_per_food
    snake_length = game_data.get('snakeLength')
    expected_length = foods + rules.initial_length
    if not _is_number(snake_length) or abs(snake_length - expected_length) > rules.length_tolerance:
        return Verdict(False, LENGTH_MISMATCH)

    game_time = game_data.get('gameTime')
    if not _is_number(game_time) or game_time < foods * rules.min_ms_per_food:
        return Verdict(False, GAME_TIME_TOO_SHORT)

    return ACCEPTED
