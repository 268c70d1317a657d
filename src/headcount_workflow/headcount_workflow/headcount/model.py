from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestStatus, SignatureType


@dataclass(frozen=True)
class HeadcountRequest:
    request_id: str
    position_id: str
    requested_by: str
    current_headcount: int
    requested_headcount: int
    reason: str
    status: RequestStatus
    created_at: datetime
    governance_body_id: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    @property
    def delta(self) -> int:
        return self.requested_headcount - self.current_headcount


@dataclass(frozen=True)
class Signature:
    signature_id: str
    request_id: str
    signer_id: str
    signature_type: SignatureType
    signature_hash: str
    signed_at: datetime
    governance_body_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class HistoryEntry:
    entry_id: str
    request_id: str
    old_status: Optional[RequestStatus]
    new_status: RequestStatus
    created_at: datetime
    seq: int
    changed_by: Optional[str] = None
    notes: Optional[str] = None
