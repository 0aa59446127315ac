"""HTTP client for the score service, used at game over.

Every call returns a result object; network problems are reported as a
neutral ``error`` string rather than raised, so nothing here can keep a
player from starting the next game.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx


logger = logging.getLogger(__name__)

UNABLE_TO_CONNECT = 'Unable to connect'
TIMED_OUT = 'Request timed out'
_TIMEOUT = httpx.Timeout(5.0, connect=3.0)


@dataclass
class SubmitResult:
    success: bool
    rank: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None


@dataclass
class LeaderboardResult:
    success: bool
    scores: list = field(default_factory=list)
    last_updated: Optional[int] = None
    error: Optional[str] = None


class LeaderboardClient:
    def __init__(self, base_url: str, timeout=_TIMEOUT, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def submit_score(self, score: int, difficulty: str, snake_length: int, game_time: int,
                     timestamp: Optional[int] = None) -> SubmitResult:
        body = {
            'score': score,
            'timestamp': timestamp if timestamp is not None else int(time.time() * 1000),
            'gameData': {
                'difficulty': difficulty,
                'snakeLength': snake_length,
                'gameTime': game_time,
            },
        }
        try:
            resp = self._client.post('/submit-score', json=body)
            data = resp.json()
        except httpx.TimeoutException:
            logger.warning("[client] submit-score timed out")
            return SubmitResult(success=False, error=TIMED_OUT)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"[client] submit-score failed: {exc}")
            return SubmitResult(success=False, error=UNABLE_TO_CONNECT)
        return SubmitResult(
            success=bool(data.get('success')),
            rank=data.get('rank'),
            message=data.get('message'),
            error=data.get('error'),
        )

    def fetch_leaderboard(self) -> LeaderboardResult:
        try:
            resp = self._client.get('/get-leaderboard')
            data = resp.json()
        except httpx.TimeoutException:
            logger.warning("[client] get-leaderboard timed out")
            return LeaderboardResult(success=False, error=TIMED_OUT)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"[client] get-leaderboard failed: {exc}")
            return LeaderboardResult(success=False, error=UNABLE_TO_CONNECT)
        return LeaderboardResult(
            success=bool(data.get('success')),
            scores=data.get('scores') or [],
            last_updated=data.get('lastUpdated'),
            error=data.get('error'),
        )
