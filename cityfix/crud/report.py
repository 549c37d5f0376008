"""
Report repository.

Owns the ``report:<id>`` key scheme on top of the key-value adapter. Records
come back as plain dicts exactly as stored.
"""

from typing import Any, Dict, Iterable, List, Optional

from cityfix.exceptions import NotFoundError

KEY_PREFIX = "report:"


def report_key(report_id: str) -> str:
    return f"{KEY_PREFIX}{report_id}"


def unwrap(entry: Any) -> Any:
    """Return the stored record whether the store handed back a
    ``{"key", "value"}`` wrapper or the record itself."""
    if isinstance(entry, dict) and "value" in entry and isinstance(entry["value"], dict):
        return entry["value"]
    return entry


def is_valid_record(record: Any) -> bool:
    return isinstance(record, dict) and bool(record.get("id")) and bool(record.get("title"))


def _sort_key(record: Dict[str, Any]) -> int:
    timestamp = record.get("timestamp")
    try:
        return int(timestamp or 0)
    except (TypeError, ValueError):
        return 0


class ReportRepository:
    def __init__(self, kv):
        self.kv = kv

    def list_all(self) -> List[Dict[str, Any]]:
        records = [unwrap(entry) for entry in self.kv.get_by_prefix(KEY_PREFIX)]
        valid = [r for r in records if is_valid_record(r)]
        # sorted() is stable, ties keep scan order
        return sorted(valid, key=_sort_key, reverse=True)

    def count(self) -> int:
        return len(self.list_all())

    def get_one(self, report_id: str) -> Optional[Dict[str, Any]]:
        record = unwrap(self.kv.get(report_key(report_id)))
        return record or None

    def exists(self, report_id: str) -> bool:
        return self.get_one(report_id) is not None

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.kv.set(report_key(record["id"]), record)
        return record

    def create_many(self, records: Iterable[Dict[str, Any]]) -> int:
        items = [(report_key(r["id"]), r) for r in records]
        self.kv.mset(items)
        return len(items)

    def update_status(self, report_id: str, status: str) -> Dict[str, Any]:
        # Read-modify-write without a version check: the last writer wins.
        existing = self.get_one(report_id)
        if existing is None:
            raise NotFoundError("Report not found")
        updated = {**existing, "status": status}
        self.kv.set(report_key(report_id), updated)
        return updated

    def delete(self, report_id: str) -> None:
        self.kv.delete(report_key(report_id))
