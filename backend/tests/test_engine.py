import random
from collections import deque

import pytest

from arcade.game.constants import DIFFICULTIES, MIN_SPEED, get_difficulty
from arcade.game.engine import (
    Direction,
    InvalidTransitionError,
    Point,
    SimulationEngine,
    Status,
)


def _running(seed=1, difficulty='EASY', **kwargs):
    engine = SimulationEngine(rng=random.Random(seed), **kwargs)
    engine.initialize(DIFFICULTIES[difficulty])
    engine.start(now_ms=0)
    return engine


def _put_food_ahead(engine):
    """Place the food where the head lands on the next tick."""
    head = engine.snapshot().head
    dx, dy = engine._state.pending_direction.value
    engine._state.food = Point(head.x + dx, head.y + dy)


def test_initialize_baseline():
    engine = SimulationEngine(rng=random.Random(3))
    assert engine.status is Status.IDLE
    snap = engine.initialize(DIFFICULTIES['MEDIUM'])
    assert snap.status is Status.AWAITING_START
    assert snap.segments == (Point(10, 10), Point(9, 10), Point(8, 10))
    assert snap.direction is Direction.RIGHT
    assert snap.score == 0
    assert snap.speed == 150
    assert snap.food is not None and snap.food not in snap.segments


def test_same_seed_same_game():
    a = _running(seed=42)
    b = _running(seed=42)
    for _ in range(5):
        a.tick()
        b.tick()
    assert a.snapshot() == b.snapshot()


def test_head_moves_one_orthogonal_step_per_tick():
    engine = _running()
    turns = [Direction.UP, Direction.LEFT, Direction.DOWN, Direction.DOWN, Direction.RIGHT]
    for turn in turns:
        before = engine.snapshot().head
        engine.set_pending_direction(turn)
        result = engine.tick()
        if result.game_over:
            break
        after = engine.snapshot().head
        assert abs(after.x - before.x) + abs(after.y - before.y) == 1


def test_segments_stay_connected():
    engine = _running()
    for turn in ['UP', 'UP', 'LEFT', 'LEFT', 'DOWN']:
        engine.set_pending_direction(turn)
        engine.tick()
        segs = engine.snapshot().segments
        for a, b in zip(segs, segs[1:]):
            assert abs(a.x - b.x) + abs(a.y - b.y) == 1


def test_reverse_direction_is_ignored():
    engine = _running()
    assert engine.set_pending_direction(Direction.LEFT) is False
    assert engine._state.pending_direction is Direction.RIGHT
    assert engine.set_pending_direction('up') is True
    # Still compared against the committed direction until the next tick
    assert engine.set_pending_direction(Direction.LEFT) is False
    engine.tick()
    assert engine.set_pending_direction(Direction.DOWN) is False
    assert engine._state.pending_direction is Direction.UP


def test_unknown_direction_raises():
    engine = _running()
    with pytest.raises(ValueError):
        engine.set_pending_direction('sideways')


def test_length_constant_without_food():
    engine = _running()
    engine._state.food = Point(0, 0)
    for _ in range(5):
        engine.tick()
        assert len(engine.snapshot().segments) == 3


def test_capture_scores_then_grows_next_tick():
    engine = _running(difficulty='HARD')
    _put_food_ahead(engine)
    result = engine.tick()
    assert result.captured
    snap = engine.snapshot()
    assert snap.score == 10
    assert len(snap.segments) == 3
    assert snap.speed == 100 - 8
    assert snap.food not in snap.segments

    engine._state.food = Point(0, 0)
    engine.tick()
    assert len(engine.snapshot().segments) == 4
    engine.tick()
    assert len(engine.snapshot().segments) == 4


def test_speed_floors_at_minimum():
    engine = _running(difficulty='HARD')
    engine._state.food = Point(0, 0)
    engine.set_pending_direction('DOWN')
    engine.tick()
    engine.set_pending_direction('LEFT')
    for _ in range(8):
        _put_food_ahead(engine)
        engine.tick()
    assert engine.snapshot().speed == MIN_SPEED
    assert engine.snapshot().score == 80


def test_wall_collision_ends_game():
    engine = _running()
    engine._state.food = Point(0, 0)
    result = None
    for _ in range(20):
        result = engine.tick()
        if result.game_over:
            break
    assert result.game_over and result.cause == 'wall'
    assert result.head == Point(20, 10)
    assert engine.status is Status.GAME_OVER
    with pytest.raises(InvalidTransitionError):
        engine.tick()


def test_self_collision_ends_game():
    engine = _running()
    engine._state.food = Point(0, 0)
    engine._state.segments = deque([Point(5, 5), Point(4, 5), Point(4, 6), Point(5, 6), Point(6, 6)])
    engine._state.direction = engine._state.pending_direction = Direction.DOWN
    result = engine.tick()
    assert result.game_over and result.cause == 'self'


def test_moving_into_vacated_tail_cell_is_safe():
    engine = _running()
    engine._state.food = Point(0, 0)
    # Square loop: head at (5,5), tail at (5,6) moves away this tick
    engine._state.segments = deque([Point(5, 5), Point(4, 5), Point(4, 6), Point(5, 6)])
    engine._state.direction = engine._state.pending_direction = Direction.DOWN
    result = engine.tick()
    assert not result.game_over


def test_food_never_on_snake_on_dense_board():
    engine = SimulationEngine(grid_size=6, rng=random.Random(7))
    engine.initialize(DIFFICULTIES['EASY'])
    cells = [Point(x, y) for y in range(6) for x in range(6)]
    free = cells.pop(17)
    engine._state.segments = deque(cells)
    assert engine._place_food() == free
    engine._state.segments = deque(cells + [free])
    assert engine._place_food() is None


def test_food_relocation_respects_occupancy():
    engine = _running(seed=9)
    for _ in range(50):
        food = engine.relocate_food()
        assert food not in engine.snapshot().segments


def test_state_machine_transitions():
    engine = SimulationEngine(rng=random.Random(0))
    with pytest.raises(InvalidTransitionError):
        engine.start(now_ms=0)
    engine.initialize(get_difficulty('easy'))
    engine.start(now_ms=1234)
    assert engine.snapshot().started_at == 1234
    with pytest.raises(InvalidTransitionError):
        engine.initialize(DIFFICULTIES['HARD'])
    with pytest.raises(InvalidTransitionError):
        engine.restart()

    engine._state.food = Point(0, 0)
    while not engine.tick().game_over:
        pass
    with pytest.raises(InvalidTransitionError):
        engine.start(now_ms=0)

    snap = engine.restart()
    assert snap.status is Status.AWAITING_START
    assert snap.difficulty == 'EASY'
    assert snap.score == 0
    assert len(snap.segments) == 3


def test_independent_engines_do_not_share_state():
    a = _running(seed=1)
    b = _running(seed=1)
    a.set_pending_direction('UP')
    a.tick()
    assert b.snapshot().head == Point(10, 10)
    assert a.snapshot().head == Point(10, 9)
