"""Clocks and timers for driving a game session.

``VirtualScheduler`` only moves when told to (``advance``), so tests can
play whole games instantly. ``ThreadingScheduler`` uses wall-clock timers
on background threads.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Tuple


logger = logging.getLogger(__name__)


class TimerHandle:
    def __init__(self):
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class Scheduler:
    """Interface used by the session: a monotonic clock plus timers."""

    def now_ms(self) -> int:
        raise NotImplementedError

    def call_later(self, delay_ms: int, fn: Callable, *args) -> TimerHandle:
        raise NotImplementedError

    def spawn(self, fn: Callable, *args) -> None:
        """Run ``fn`` without blocking the caller."""
        raise NotImplementedError

    def shutdown(self) -> None:
        pass


class VirtualScheduler(Scheduler):
    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, TimerHandle, Callable, tuple]] = []

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms, fn, *args):
        handle = TimerHandle()
        heapq.heappush(self._queue, (self._now + max(0, int(delay_ms)), next(self._seq), handle, fn, args))
        return handle

    def spawn(self, fn, *args):
        # Runs on the next advance()/run_pending(), after anything already due
        self.call_later(0, fn, *args)

    def pending(self) -> int:
        return sum(1 for _, _, h, _, _ in self._queue if h.active)

    def run_pending(self) -> int:
        return self.advance(0)

    def advance(self, ms: int) -> int:
        """Move the clock forward by ``ms`` firing due timers in order.

        Timers scheduled by callbacks fire in the same call if they fall due
        inside the window. Returns the number of callbacks run.
        """
        deadline = self._now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle, fn, args = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            handle.fired = True
            fn(*args)
            fired += 1
        self._now = deadline
        return fired


class ThreadingScheduler(Scheduler):
    def __init__(self):
        self._timers: List[threading.Timer] = []
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def call_later(self, delay_ms, fn, *args):
        handle = TimerHandle()

        def _fire():
            if handle.cancelled:
                return
            handle.fired = True
            try:
                fn(*args)
            except Exception:
                logger.exception("[timer-error] callback failed")

        timer = threading.Timer(max(0, delay_ms) / 1000.0, _fire)
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()
        return handle

    def spawn(self, fn, *args):
        worker = threading.Thread(target=fn, args=args, daemon=True)
        worker.start()

    def shutdown(self) -> None:
        with self._lock:
            for timer in self._timers:
                timer.cancel()
            self._timers = []
