"""Session controller: runs one engine through select -> play -> game over.

The UI layer forwards commands (difficulty, start, direction, restart) and
receives snapshots through ``on_update`` and leaderboard outcomes through
``on_report``. Reporting a finished game happens in a background task so
the next game can start right away.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .client import LeaderboardClient
from .constants import get_difficulty
from .engine import GameSnapshot, InvalidTransitionError, SimulationEngine, Status
from .scheduler import Scheduler, ThreadingScheduler, TimerHandle


logger = logging.getLogger(__name__)


@dataclass
class LeaderboardReport:
    game_id: int
    pending: bool = True
    rank: Optional[int] = None
    scores: list = field(default_factory=list)
    error: Optional[str] = None
    submit_error: Optional[str] = None


class GameSession:
    def __init__(
        self,
        client: LeaderboardClient,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        wall_clock: Optional[Callable[[], int]] = None,
        on_update: Optional[Callable[[GameSnapshot], None]] = None,
        on_report: Optional[Callable[[LeaderboardReport], None]] = None,
        engine: Optional[SimulationEngine] = None,
    ) -> None:
        self.client = client
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or ThreadingScheduler()
        self.engine = engine or SimulationEngine(rng=rng)
        self._rng = rng
        self._wall_clock = wall_clock or (lambda: int(time.time() * 1000))
        self.on_update = on_update
        self.on_report = on_report
        self.report: Optional[LeaderboardReport] = None
        self._game_id = 0
        self._tick_timer: Optional[TimerHandle] = None
        self._food_timer: Optional[TimerHandle] = None
        # Real timers fire on worker threads; keep engine access single-file
        self._lock = threading.RLock()

    @property
    def game_id(self) -> int:
        return self._game_id

    def snapshot(self) -> GameSnapshot:
        with self._lock:
            return self.engine.snapshot()

    # ---- commands from the UI ----

    def select_difficulty(self, key: str) -> GameSnapshot:
        difficulty = get_difficulty(key)
        with self._lock:
            # Leave a running game and its timers untouched
            if self.engine.status is Status.RUNNING:
                raise InvalidTransitionError("cannot change difficulty during a game")
            self._stop_timers()
            snap = self.engine.initialize(difficulty, rng=self._rng)
        logger.info(f"[session] difficulty={difficulty.key}")
        self._notify(snap)
        return snap

    def start(self) -> GameSnapshot:
        with self._lock:
            if self.engine.status is Status.IDLE:
                raise InvalidTransitionError("select a difficulty before starting")
            snap = self.engine.start(self.scheduler.now_ms())
            self._game_id += 1
            self.report = None
            self._schedule_tick()
            self._restart_food_timer()
        logger.info(f"[session] start game={self._game_id} speed={snap.speed}")
        self._notify(snap)
        return snap

    def change_direction(self, direction) -> bool:
        with self._lock:
            return self.engine.set_pending_direction(direction)

    def restart(self) -> GameSnapshot:
        with self._lock:
            self._stop_timers()
            snap = self.engine.restart()
        self._notify(snap)
        return snap

    def shutdown(self) -> None:
        with self._lock:
            self._stop_timers()
            # Invalidate anything already queued
            self._game_id += 1
        if self._owns_scheduler:
            self.scheduler.shutdown()

    # ---- timers ----

    def _schedule_tick(self) -> None:
        speed = self.engine.snapshot().speed
        self._tick_timer = self.scheduler.call_later(speed, self._on_tick, self._game_id)

    def _restart_food_timer(self) -> None:
        if self._food_timer:
            self._food_timer.cancel()
        timeout = self.engine.difficulty.food_timeout_ms
        self._food_timer = self.scheduler.call_later(timeout, self._on_food_timeout, self._game_id)

    def _stop_timers(self) -> None:
        for handle in (self._tick_timer, self._food_timer):
            if handle:
                handle.cancel()
        self._tick_timer = None
        self._food_timer = None

    def _on_tick(self, game_id: int) -> None:
        with self._lock:
            if game_id != self._game_id or self.engine.status is not Status.RUNNING:
                logger.info(f"[timer-abort] tick game={game_id} current={self._game_id}")
                return
            result = self.engine.tick()
            if result.game_over:
                self._stop_timers()
                self._finish(game_id)
            else:
                if result.captured:
                    self._restart_food_timer()
                self._schedule_tick()
            snap = self.engine.snapshot()
        self._notify(snap)

    def _on_food_timeout(self, game_id: int) -> None:
        with self._lock:
            if game_id != self._game_id or self.engine.status is not Status.RUNNING:
                logger.info(f"[timer-abort] food game={game_id} current={self._game_id}")
                return
            food = self.engine.relocate_food()
            self._restart_food_timer()
            snap = self.engine.snapshot()
        logger.debug(f"[food-relocate] game={game_id} food={food}")
        self._notify(snap)

    # ---- game over ----

    def _finish(self, game_id: int) -> None:
        snap = self.engine.snapshot()
        elapsed = self.scheduler.now_ms() - (snap.started_at or 0)
        self.report = LeaderboardReport(game_id=game_id)
        self.scheduler.spawn(
            self._report_score,
            game_id,
            snap.score,
            snap.difficulty,
            len(snap.segments),
            elapsed,
            self._wall_clock(),
        )

    def _report_score(self, game_id, score, difficulty, snake_length, game_time, timestamp) -> None:
        report = LeaderboardReport(game_id=game_id, pending=False)
        try:
            submitted = self.client.submit_score(score, difficulty, snake_length, game_time, timestamp=timestamp)
            report.rank = submitted.rank if submitted.success else None
            report.submit_error = None if submitted.success else submitted.error
            board = self.client.fetch_leaderboard()
            if board.success:
                report.scores = board.scores
            else:
                report.error = board.error
        except Exception:
            logger.exception(f"[session] leaderboard report failed game={game_id}")
            report.error = 'Unable to load leaderboard'
        logger.info(f"[session] report game={game_id} rank={report.rank} error={report.error}")
        with self._lock:
            current = game_id == self._game_id
            if current:
                self.report = report
        if not current:
            logger.info(f"[timer-abort] report game={game_id} current={self._game_id}")
            return
        if self.on_report:
            self.on_report(report)

    def _notify(self, snap: GameSnapshot) -> None:
        if self.on_update:
            self.on_update(snap)
