import time
from typing import Callable, Dict, Optional


class RateLimiter:
    """Fixed-window admission control keyed by source address.

    State lives in process memory and is lost on restart, which is fine:
    this is a soft throttle in front of validation, not a security boundary.
    """

    def __init__(self, max_requests: int = 5, window_ms: int = 60_000,
                 clock: Optional[Callable[[], float]] = None):
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock or (lambda: time.time() * 1000.0)
        # address -> {'window_start': ms, 'count': n}
        self._windows: Dict[str, Dict[str, float]] = {}
        self._last_prune = self._clock()

    def allow(self, address: str) -> bool:
        now = self._clock()
        # Sweep expired addresses at most once per window
        if now - self._last_prune > self.window_ms:
            self.prune()
        entry = self._windows.get(address)
        if entry is None or now - entry['window_start'] > self.window_ms:
            self._windows[address] = {'window_start': now, 'count': 1}
            return True
        if entry['count'] >= self.max_requests:
            return False
        entry['count'] += 1
        return True

    def prune(self) -> int:
        """Forget addresses whose window has expired; returns how many."""
        now = self._clock()
        self._last_prune = now
        stale = [a for a, e in self._windows.items() if now - e['window_start'] > self.window_ms]
        for address in stale:
            self._windows.pop(address, None)
        return len(stale)

    def __len__(self) -> int:
        return len(self._windows)
