import logging
import time
from typing import Callable, Optional, Tuple

from .blobs import BlobStore
from .errors import StoreUnavailable, TransientStoreError
from .ranking import LeaderboardSnapshot


logger = logging.getLogger(__name__)


class LeaderboardStore:
    """The top-N record kept under a single blob key.

    Each read and each write is retried on ``TransientStoreError`` with a
    linear backoff (``backoff_ms * attempt``); once ``retries`` attempts
    have failed the operation raises ``StoreUnavailable``. Conditional
    write conflicts are not retried here: the caller owns the
    read-modify-write cycle and must re-read.
    """

    def __init__(
        self,
        blobs: BlobStore,
        key: str = 'scores',
        cap: int = 20,
        retries: int = 3,
        backoff_ms: int = 100,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.blobs = blobs
        self.key = key
        self.cap = cap
        self.retries = max(1, retries)
        self.backoff_ms = backoff_ms
        self._sleep = sleep
        self._clock = clock or (lambda: int(time.time() * 1000))

    def read(self) -> Tuple[LeaderboardSnapshot, Optional[int]]:
        """Return the current snapshot and its revision (``None`` if never written)."""
        found = self._with_retries('read', lambda: self.blobs.get(self.key))
        if found is None:
            return LeaderboardSnapshot.empty(self._clock()), None
        record, revision = found
        return LeaderboardSnapshot.from_record(record), revision

    def write(self, snapshot: LeaderboardSnapshot, expected_revision: Optional[int]) -> int:
        return self._with_retries('write', lambda: self.blobs.put(self.key, snapshot.to_record(), expected_revision))

    def reset(self) -> None:
        self.blobs.delete(self.key)
        self.write(LeaderboardSnapshot.empty(self._clock()), None)

    def _with_retries(self, op: str, fn):
        for attempt in range(1, self.retries + 1):
            try:
                return fn()
            except TransientStoreError as exc:
                if attempt == self.retries:
                    logger.error(f"[store-fail] op={op} key={self.key} attempts={attempt}: {exc}")
                    raise StoreUnavailable() from exc
                delay_ms = self.backoff_ms * attempt
                logger.warning(f"[store-retry] op={op} key={self.key} attempt={attempt} backoff={delay_ms}ms")
                if delay_ms > 0:
                    self._sleep(delay_ms / 1000.0)
