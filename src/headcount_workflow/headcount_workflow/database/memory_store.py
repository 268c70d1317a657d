from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .record_store import RecordStore, Row, new_id, parse_order


def _matches(row: Row, filters: Optional[Mapping[str, Any]]) -> bool:
    for column, value in (filters or {}).items():
        actual = row.get(column)
        if isinstance(value, (list, tuple, set, frozenset)):
            if actual not in value:
                return False
        elif actual != value:
            return False
    return True


def _sort_key(value: Any):
    # NULLs first, like MySQL ascending order.
    return (value is not None, value)


class InMemoryRecordStore(RecordStore):
    """Process-local record store (RECORD_STORE=memory).

    Transactions hold a re-entrant lock for their whole duration and restore a
    snapshot of every table if the unit of work raises.
    """

    def __init__(self, tables: Optional[Mapping[str, Sequence[Mapping[str, Any]]]] = None):
        self._tables: Dict[str, List[Row]] = {}
        self._lock = threading.RLock()
        for table, rows in (tables or {}).items():
            for row in rows:
                self.insert(table, row)

    def insert(self, table: str, row: Mapping[str, Any]) -> str:
        data = dict(row)
        data.setdefault("id", new_id())
        with self._lock:
            rows = self._tables.setdefault(table, [])
            if any(r["id"] == data["id"] for r in rows):
                raise ValueError(f"Duplicate id {data['id']!r} in {table}")
            rows.append(data)
        return str(data["id"])

    def update(self, table, row_id, patch, condition=None) -> int:
        if not patch:
            raise ValueError("Empty patch")
        with self._lock:
            for row in self._tables.get(table, []):
                if row["id"] == row_id and _matches(row, condition):
                    row.update(patch)
                    return 1
        return 0

    def select(self, table, filters=None, order=None, limit=None) -> List[Row]:
        with self._lock:
            rows = [dict(r) for r in self._tables.get(table, []) if _matches(r, filters)]
        # Stable sorts applied last-key-first give multi-column ordering.
        for column, desc in reversed(parse_order(order)):
            rows.sort(key=lambda r: _sort_key(r.get(column)), reverse=desc)
        if limit is not None:
            rows = rows[: int(limit)]
        return rows

    @contextmanager
    def transaction(self) -> Iterator[RecordStore]:
        with self._lock:
            snapshot = copy.deepcopy(self._tables)
            try:
                yield self
            except BaseException:
                self._tables = snapshot
                raise

    def count(self, table: str, filters: Optional[Mapping[str, Any]] = None) -> int:
        return len(self.select(table, filters))
