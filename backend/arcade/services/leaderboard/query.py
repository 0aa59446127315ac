import time
from typing import Callable, Optional

from .ranking import LeaderboardSnapshot
from .store import LeaderboardStore


class QueryService:
    """Serves the leaderboard from a short-lived, process-wide cached copy."""

    def __init__(self, store: LeaderboardStore, ttl_ms: int = 5000,
                 clock: Optional[Callable[[], int]] = None):
        self.store = store
        self.ttl_ms = ttl_ms
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._cached: Optional[LeaderboardSnapshot] = None
        self._cached_at = 0

    def current(self) -> LeaderboardSnapshot:
        now = self._clock()
        if self._cached is not None and now - self._cached_at < self.ttl_ms:
            return self._cached
        snapshot, _ = self.store.read()
        self._cached = snapshot
        self._cached_at = now
        return snapshot
