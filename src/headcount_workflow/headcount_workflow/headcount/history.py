from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import as_utc, now_utc, to_db_datetime
from ..core.enums import RequestStatus
from ..core.exceptions import InvalidStateError
from ..database.record_store import RecordStore, Row
from .model import HistoryEntry

HISTORY_TABLE = "headcount_request_history"


def _to_entry(r: Row) -> HistoryEntry:
    return HistoryEntry(
        entry_id=str(r["id"]),
        request_id=str(r["headcount_request_id"]),
        old_status=RequestStatus(r["old_status"]) if r.get("old_status") else None,
        new_status=RequestStatus(r["new_status"]),
        created_at=as_utc(r["created_at"]),
        seq=int(r["seq"]),
        changed_by=r.get("changed_by"),
        notes=r.get("notes"),
    )


class HistoryRecorder:
    """Append-only status trail for headcount requests.

    Each request's entries form a chain: the first has no old status and every
    later entry starts from the status the previous one ended in. ``created_at``
    is strictly increasing per request and ``seq`` records insertion order.
    """

    def __init__(self, store: RecordStore, *, clock: Callable[[], datetime] = now_utc):
        self._store = store
        self._clock = clock

    def using(self, store: RecordStore) -> "HistoryRecorder":
        return HistoryRecorder(store, clock=self._clock)

    def entries(self, request_id: str) -> Sequence[HistoryEntry]:
        rows = self._store.select(HISTORY_TABLE, {"headcount_request_id": str(request_id)}, order=["created_at", "seq"])
        return [_to_entry(r) for r in rows]

    def append(
        self,
        *,
        request_id: str,
        old_status: Optional[RequestStatus],
        new_status: RequestStatus,
        actor_id: Optional[str] = None,
        notes: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> HistoryEntry:
        chain = self.entries(request_id)
        last = chain[-1] if chain else None

        expected = last.new_status if last else None
        if old_status != expected:
            raise InvalidStateError(
                f"History for request {request_id} ends in {expected.value if expected else 'nothing'}, "
                f"cannot append a transition from {old_status.value if old_status else 'nothing'}"
            )

        created_at = as_utc(at or self._clock())
        if last and created_at <= last.created_at:
            created_at = last.created_at + timedelta(microseconds=1)

        seq = (last.seq + 1) if last else 1
        entry_id = self._store.insert(
            HISTORY_TABLE,
            {
                "headcount_request_id": str(request_id),
                "old_status": old_status.value if old_status else None,
                "new_status": new_status.value,
                "changed_by": actor_id,
                "notes": notes,
                "created_at": to_db_datetime(created_at),
                "seq": seq,
            },
        )
        return HistoryEntry(
            entry_id=entry_id,
            request_id=str(request_id),
            old_status=old_status,
            new_status=new_status,
            created_at=created_at,
            seq=seq,
            changed_by=actor_id,
            notes=notes,
        )
