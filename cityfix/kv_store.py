"""
Key-value adapter over the ``kv_store`` table.

Values are opaque JSON documents; nothing here knows about reports. Every
database failure is rolled back and surfaced as ``StorageError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from cityfix.exceptions import StorageError
from cityfix.models.kv import KVEntry

logger = logging.getLogger(__name__)


class KVStore:
    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, key: str, exc: Exception) -> StorageError:
        self.db.rollback()
        logger.warning("KV %s failed for %r: %s", operation, key, exc)
        return StorageError(f"Key-value store {operation} failed: {exc}")

    def get(self, key: str) -> Optional[Any]:
        try:
            entry = self.db.get(KVEntry, key)
        except SQLAlchemyError as exc:
            raise self._fail("get", key, exc) from exc
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        try:
            self._put(key, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("set", key, exc) from exc

    def mset(self, items: Iterable[Tuple[str, Any]]) -> None:
        """Write several entries in a single commit."""
        key = ""
        try:
            for key, value in items:
                self._put(key, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("mset", key, exc) from exc

    def delete(self, key: str) -> None:
        try:
            self.db.query(KVEntry).filter(KVEntry.key == key).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete", key, exc) from exc

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        try:
            entries = self.db.query(KVEntry).filter(
                KVEntry.key.startswith(prefix, autoescape=True)
            ).all()
        except SQLAlchemyError as exc:
            raise self._fail("scan", prefix, exc) from exc
        return [{"key": e.key, "value": e.value} for e in entries]

    def _put(self, key: str, value: Any) -> None:
        entry = self.db.get(KVEntry, key)
        if entry is None:
            self.db.add(KVEntry(key=key, value=value))
            self.db.flush()
        else:
            entry.value = value
            flag_modified(entry, "value")
