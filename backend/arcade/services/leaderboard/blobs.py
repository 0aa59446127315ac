"""Key/value blob backends for the leaderboard record.

Both backends offer single-operation atomicity only. ``put`` is
conditional: it succeeds only if the stored revision still equals
``expected_revision`` (``None`` meaning "key must not exist yet").
"""

from __future__ import annotations

import copy
import json
import threading
import time
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError

from .errors import TransientStoreError, WriteConflictError


class BlobStore:
    def get(self, key: str) -> Optional[Tuple[Any, int]]:
        """Return ``(value, revision)`` or ``None`` if the key is absent."""
        raise NotImplementedError

    def put(self, key: str, value: Any, expected_revision: Optional[int]) -> int:
        """Store ``value`` and return the new revision."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class SqlBlobStore(BlobStore):
    """Blobs as rows of the ``blob`` table through Flask-SQLAlchemy."""

    def __init__(self, db):
        self.db = db

    def get(self, key):
        from arcade.models import Blob
        try:
            row = Blob.query.filter_by(key=key).first()
        except OperationalError as exc:
            self.db.session.rollback()
            raise TransientStoreError(f"read {key}: {exc}") from exc
        if not row:
            return None
        return row.load(), row.revision

    def put(self, key, value, expected_revision):
        from arcade.models import Blob
        payload = json.dumps(value)
        try:
            if expected_revision is None:
                self.db.session.add(Blob(key=key, value=payload, revision=1, updated_at=time.time()))
                self.db.session.commit()
                return 1
            updated = Blob.query.filter_by(key=key, revision=expected_revision).update(
                {'value': payload, 'revision': expected_revision + 1, 'updated_at': time.time()},
                synchronize_session=False,
            )
            if updated != 1:
                self.db.session.rollback()
                raise WriteConflictError(f"{key} moved past revision {expected_revision}")
            self.db.session.commit()
            return expected_revision + 1
        except IntegrityError as exc:
            # Someone else created the key first
            self.db.session.rollback()
            raise WriteConflictError(f"{key} already exists") from exc
        except OperationalError as exc:
            self.db.session.rollback()
            raise TransientStoreError(f"write {key}: {exc}") from exc

    def delete(self, key):
        from arcade.models import Blob
        Blob.query.filter_by(key=key).delete()
        self.db.session.commit()


class MemoryBlobStore(BlobStore):
    def __init__(self):
        self._data: Dict[str, Tuple[Any, int]] = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            found = self._data.get(key)
            if found is None:
                return None
            value, revision = found
            return copy.deepcopy(value), revision

    def put(self, key, value, expected_revision):
        with self._lock:
            current = self._data.get(key)
            current_revision = current[1] if current else None
            if current_revision != expected_revision:
                raise WriteConflictError(f"{key}: expected {expected_revision}, found {current_revision}")
            revision = (current_revision or 0) + 1
            self._data[key] = (copy.deepcopy(value), revision)
            return revision

    def delete(self, key):
        with self._lock:
            self._data.pop(key, None)
