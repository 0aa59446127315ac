from dataclasses import dataclass

from flask import current_app

from .blobs import BlobStore, MemoryBlobStore, SqlBlobStore
from .query import QueryService
from .rate_limit import RateLimiter
from .store import LeaderboardStore
from .submission import SubmissionService
from .validation import ValidationRules


EXTENSION_KEY = 'leaderboard'


@dataclass
class LeaderboardServices:
    rate_limiter: RateLimiter
    store: LeaderboardStore
    submissions: SubmissionService
    queries: QueryService


def build_services(config, blobs: BlobStore) -> LeaderboardServices:
    store = LeaderboardStore(
        blobs,
        key=config.get('LEADERBOARD_KEY', 'scores'),
        cap=int(config.get('LEADERBOARD_SIZE', 20)),
        retries=int(config.get('STORE_RETRIES', 3)),
        backoff_ms=int(config.get('STORE_RETRY_BACKOFF_MS', 100)),
    )
    rate_limiter = RateLimiter(
        max_requests=int(config.get('RATE_LIMIT_MAX', 5)),
        window_ms=int(config.get('RATE_LIMIT_WINDOW_MS', 60_000)),
    )
    submissions = SubmissionService(
        rate_limiter,
        store,
        rules=ValidationRules.from_config(config),
        conflict_retries=int(config.get('STORE_CONFLICT_RETRIES', 5)),
    )
    queries = QueryService(store, ttl_ms=int(config.get('LEADERBOARD_CACHE_TTL_MS', 5000)))
    return LeaderboardServices(rate_limiter, store, submissions, queries)


def init_app(flask_app, db) -> LeaderboardServices:
    """Build the per-app services; rate-limit windows and cache live here."""
    backend = flask_app.config.get('LEADERBOARD_BACKEND', 'sql')
    blobs = MemoryBlobStore() if backend == 'memory' else SqlBlobStore(db)
    services = build_services(flask_app.config, blobs)
    flask_app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> LeaderboardServices:
    return current_app.extensions[EXTENSION_KEY]
