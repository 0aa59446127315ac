import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import AdmissionDenied, StoreUnavailable, ValidationRejected, WriteConflictError
from .rate_limit import RateLimiter
from .ranking import LeaderboardEntry, LeaderboardSnapshot
from .store import LeaderboardStore
from .validation import DEFAULT_RULES, ValidationRules, validate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    rank: Optional[int]
    entry: LeaderboardEntry
    snapshot: LeaderboardSnapshot

    @property
    def message(self) -> str:
        if self.rank is not None:
            return f"You made the leaderboard at #{self.rank}!"
        return 'Score submitted successfully'


class SubmissionService:
    """Rate limiter -> validator -> read-modify-write against the store.

    The write is conditional on the revision that was read; losing that
    race re-runs the whole cycle on fresh data, up to ``conflict_retries``
    times, so concurrent submissions do not silently drop each other.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        store: LeaderboardStore,
        rules: ValidationRules = DEFAULT_RULES,
        conflict_retries: int = 5,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.rate_limiter = rate_limiter
        self.store = store
        self.rules = rules
        self.conflict_retries = max(1, conflict_retries)
        self._clock = clock or (lambda: int(time.time() * 1000))

    def submit(self, payload, address: str) -> SubmissionResult:
        if not self.rate_limiter.allow(address):
            logger.info(f"[submit-denied] address={address}")
            raise AdmissionDenied()

        verdict = validate(payload, now_ms=self._clock(), rules=self.rules)
        if not verdict.accepted:
            logger.warning(f"[submit-rejected] address={address} reason={verdict.reason}")
            raise ValidationRejected(verdict.reason)

        entry = LeaderboardEntry.new(payload)
        for attempt in range(1, self.conflict_retries + 1):
            snapshot, revision = self.store.read()
            updated, rank = snapshot.with_entry(entry, self.store.cap, self._clock())
            try:
                self.store.write(updated, revision)
            except WriteConflictError as exc:
                logger.info(f"[submit-conflict] attempt={attempt} revision={revision}: {exc}")
                continue
            logger.info(
                f"[submit-accepted] address={address} score={entry.score} difficulty={entry.difficulty} rank={rank}"
            )
            return SubmissionResult(rank, entry, updated)

        logger.error(f"[submit-fail] gave up after {self.conflict_retries} write conflicts")
        raise StoreUnavailable()
