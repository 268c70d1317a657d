from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import as_utc, to_db_datetime
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus, SignatureType
from ..database.record_store import RecordStore, Row
from .model import HeadcountRequest, Signature

REQUESTS_TABLE = "headcount_requests"
SIGNATURES_TABLE = "headcount_request_signatures"


def _to_request(r: Row) -> HeadcountRequest:
    return HeadcountRequest(
        request_id=str(r["id"]),
        position_id=str(r["position_id"]),
        requested_by=str(r["requested_by"]),
        current_headcount=int(r["current_headcount"]),
        requested_headcount=int(r["requested_headcount"]),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=as_utc(r["created_at"]),
        governance_body_id=r.get("governance_body_id"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=as_utc(r.get("reviewed_at")),
        review_notes=r.get("review_notes"),
    )


def _to_signature(r: Row) -> Signature:
    return Signature(
        signature_id=str(r["id"]),
        request_id=str(r["headcount_request_id"]),
        signer_id=str(r["signer_id"]),
        signature_type=SignatureType(r["signature_type"]),
        signature_hash=r["signature_hash"],
        signed_at=as_utc(r["signed_at"]),
        governance_body_id=r.get("governance_body_id"),
        notes=r.get("notes"),
    )


class HeadcountRequestRepository:
    def __init__(self, store: RecordStore):
        self._store = store

    def using(self, store: RecordStore) -> "HeadcountRequestRepository":
        return HeadcountRequestRepository(store)

    def create(
        self,
        *,
        position_id: str,
        requested_by: str,
        current_headcount: int,
        requested_headcount: int,
        reason: str,
        governance_body_id: Optional[str],
        created_at: datetime,
    ) -> str:
        return self._store.insert(
            REQUESTS_TABLE,
            {
                "position_id": str(position_id),
                "requested_by": str(requested_by),
                "current_headcount": int(current_headcount),
                "requested_headcount": int(requested_headcount),
                "reason": reason,
                "status": RequestStatus.PENDING.value,
                "governance_body_id": governance_body_id,
                "reviewed_by": None,
                "reviewed_at": None,
                "review_notes": None,
                "created_at": to_db_datetime(created_at),
            },
        )

    def get(self, request_id: str) -> Optional[HeadcountRequest]:
        rows = self._store.select(REQUESTS_TABLE, {"id": str(request_id)}, limit=1)
        return _to_request(rows[0]) if rows else None

    def list_for_positions(
        self,
        *,
        position_ids: Iterable[str],
        status: Optional[RequestStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[HeadcountRequest]:
        filters = {"position_id": sorted({str(p) for p in position_ids})}
        if status is not None:
            filters["status"] = status.value
        rows = self._store.select(REQUESTS_TABLE, filters, order=["-created_at"], limit=limit)
        return [_to_request(r) for r in rows]

    def mark_resolved(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        review_notes: Optional[str],
    ) -> bool:
        """Pending -> terminal in one conditional update; False if the request was not pending."""
        matched = self._store.update(
            REQUESTS_TABLE,
            str(request_id),
            {
                "status": status.value,
                "reviewed_by": str(reviewed_by),
                "reviewed_at": to_db_datetime(reviewed_at),
                "review_notes": review_notes,
            },
            condition={"status": RequestStatus.PENDING.value},
        )
        return matched > 0


class SignatureRepository:
    """Append-only: signatures are inserted and read, never changed."""

    def __init__(self, store: RecordStore):
        self._store = store

    def using(self, store: RecordStore) -> "SignatureRepository":
        return SignatureRepository(store)

    def add(
        self,
        *,
        request_id: str,
        signer_id: str,
        signature_type: SignatureType,
        signature_hash: str,
        signed_at: datetime,
        governance_body_id: Optional[str],
        notes: Optional[str],
    ) -> Signature:
        signature_id = self._store.insert(
            SIGNATURES_TABLE,
            {
                "headcount_request_id": str(request_id),
                "signer_id": str(signer_id),
                "governance_body_id": governance_body_id,
                "signature_type": signature_type.value,
                "signature_hash": signature_hash,
                "notes": notes,
                "signed_at": to_db_datetime(signed_at),
            },
        )
        return Signature(
            signature_id=signature_id,
            request_id=str(request_id),
            signer_id=str(signer_id),
            signature_type=signature_type,
            signature_hash=signature_hash,
            signed_at=as_utc(signed_at),
            governance_body_id=governance_body_id,
            notes=notes,
        )

    def list_for_request(self, request_id: str) -> Sequence[Signature]:
        rows = self._store.select(SIGNATURES_TABLE, {"headcount_request_id": str(request_id)}, order=["-signed_at"])
        return [_to_signature(r) for r in rows]
