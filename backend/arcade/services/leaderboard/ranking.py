"""Leaderboard records and the ordering rule.

Entries are ordered by score (highest first), ties broken by the earlier
client timestamp. Only the top ``cap`` entries are kept.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple


RECORD_VERSION = 1


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    score: int
    difficulty: str
    snake_length: int
    game_time: int
    timestamp: int

    @classmethod
    def new(cls, payload: Mapping) -> 'LeaderboardEntry':
        """Build a fresh entry from an already validated submission body."""
        game_data = payload['gameData']
        return cls(
            id=str(uuid.uuid4()),
            score=int(payload['score']),
            difficulty=game_data['difficulty'],
            snake_length=int(game_data['snakeLength']),
            game_time=int(game_data['gameTime']),
            timestamp=int(payload['timestamp']),
        )

    @classmethod
    def from_dict(cls, data: Mapping) -> 'LeaderboardEntry':
        return cls(
            id=data['id'],
            score=data['score'],
            difficulty=data['difficulty'],
            snake_length=data['snakeLength'],
            game_time=data['gameTime'],
            timestamp=data['timestamp'],
        )

    def to_dict(self):
        return {
            'id': self.id,
            'score': self.score,
            'difficulty': self.difficulty,
            'snakeLength': self.snake_length,
            'gameTime': self.game_time,
            'timestamp': self.timestamp,
        }

    def sort_key(self) -> Tuple[int, int]:
        return (-self.score, self.timestamp)


@dataclass(frozen=True)
class LeaderboardSnapshot:
    scores: Tuple[LeaderboardEntry, ...] = field(default_factory=tuple)
    last_updated: int = 0

    @classmethod
    def empty(cls, now_ms: int) -> 'LeaderboardSnapshot':
        return cls((), now_ms)

    @classmethod
    def from_record(cls, record: Mapping) -> 'LeaderboardSnapshot':
        return cls(
            scores=tuple(LeaderboardEntry.from_dict(e) for e in record.get('scores') or []),
            last_updated=int(record.get('lastUpdated') or 0),
        )

    def to_record(self):
        return {
            'version': RECORD_VERSION,
            'lastUpdated': self.last_updated,
            'scores': [e.to_dict() for e in self.scores],
        }

    def with_entry(self, entry: LeaderboardEntry, cap: int, now_ms: int) -> Tuple['LeaderboardSnapshot', Optional[int]]:
        """Insert ``entry``, re-sort and truncate to ``cap``.

        Returns the new snapshot and the entry's 1-based rank, or ``None``
        when it did not make the cut.
        """
        ranked: List[LeaderboardEntry] = sorted(self.scores + (entry,), key=LeaderboardEntry.sort_key)[:cap]
        rank = next((i + 1 for i, e in enumerate(ranked) if e.id == entry.id), None)
        return LeaderboardSnapshot(tuple(ranked), now_ms), rank
