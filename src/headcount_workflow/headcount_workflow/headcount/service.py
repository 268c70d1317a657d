from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Union

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_non_empty, require_non_negative_int
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import Decision, NotificationEvent, RequestStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..database.record_store import RecordStore
from ..governance.authorization import ApprovalAuthority
from ..governance.repository import GovernanceRepository
from ..lookups.resolver import LookupResolver
from ..notifications.dispatcher import NotificationDispatcher
from ..positions.repository import PositionRepository
from ..users.repository import UserRepository
from .history import HistoryRecorder
from .model import HeadcountRequest, HistoryEntry, Signature
from .repository import HeadcountRequestRepository, SignatureRepository
from .signatures import generate_signature_hash, verify_signature

logger = get_logger("headcount.service")


@dataclass(frozen=True)
class SignedSignature:
    signature: Signature
    verified: bool


@dataclass(frozen=True)
class HeadcountRequestDetail:
    request: HeadcountRequest
    signatures: Sequence[SignedSignature]
    history: Sequence[HistoryEntry]


@dataclass(frozen=True)
class CompanyRequests:
    pending: Sequence[HeadcountRequest]
    processed: Sequence[HeadcountRequest]
    limit: int = DEFAULT_LIST_LIMIT
    # True when older requests exist beyond ``limit``.
    truncated: bool = False


def _parse_decision(value: Union[Decision, str, None]) -> Decision:
    try:
        return Decision(value)
    except ValueError:
        raise ValidationError("Decision must be 'approve' or 'reject'")


class HeadcountRequestService:
    """Lifecycle of a headcount change request: pending -> approved | rejected.

    Every write path runs inside one record store transaction. Resolution claims
    the request with a conditional update on ``status = 'pending'`` before any
    other row is written, so two reviewers racing on the same request produce
    exactly one signature, one history entry and at most one headcount change.
    Notifications go out after the transaction and cannot fail the operation.
    """

    def __init__(
        self,
        store: RecordStore,
        requests: HeadcountRequestRepository,
        signatures: SignatureRepository,
        history: HistoryRecorder,
        positions: PositionRepository,
        governance: GovernanceRepository,
        users: UserRepository,
        resolver: LookupResolver,
        authority: ApprovalAuthority,
        notifier: NotificationDispatcher,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._requests = requests
        self._signatures = signatures
        self._history = history
        self._positions = positions
        self._governance = governance
        self._users = users
        self._resolver = resolver
        self._authority = authority
        self._notifier = notifier
        self._clock = clock

    # -------- Write side --------
    def create(
        self,
        *,
        position_id: str,
        requester_id: str,
        requested_headcount: Any,
        reason: str,
        governance_body_id: Optional[str] = None,
    ) -> HeadcountRequest:
        requested = require_non_negative_int(requested_headcount, "Requested headcount")
        reason = require_non_empty(reason, "Reason")
        requester_id = require_non_empty(requester_id, "Requester")
        position_id = require_non_empty(position_id, "Position")

        position = self._resolver.position(position_id)
        body = self._resolver.governance_body(optional_text(governance_body_id), company_id=position.company_id)

        created_at = self._clock()
        with self._store.transaction() as tx:
            request_id = self._requests.using(tx).create(
                position_id=position.position_id,
                requested_by=requester_id,
                current_headcount=position.authorized_headcount,
                requested_headcount=requested,
                reason=reason,
                governance_body_id=body.body_id if body else None,
                created_at=created_at,
            )
            self._history.using(tx).append(
                request_id=request_id,
                old_status=None,
                new_status=RequestStatus.PENDING,
                actor_id=requester_id,
                at=created_at,
            )
            request = self._requests.using(tx).get(request_id)

        logger.info(
            "Headcount request submitted",
            extra={"request_id": request_id, "position_id": position.position_id, "requested_headcount": requested},
        )
        self._notify(NotificationEvent.SUBMITTED, request)
        return request

    def resolve(
        self,
        *,
        request_id: str,
        actor_id: str,
        decision: Union[Decision, str],
        notes: Optional[str] = None,
        acknowledged: bool = False,
    ) -> HeadcountRequest:
        decision = _parse_decision(decision)
        if acknowledged is not True:
            raise ValidationError("Please acknowledge the digital signature")
        actor_id = require_non_empty(actor_id, "Reviewer")

        request = self._requests.get(str(request_id)) if request_id else None
        if not request:
            raise NotFoundError("Headcount request not found")
        if request.status != RequestStatus.PENDING:
            raise InvalidStateError(f"Request has already been {request.status.value}")

        position = self._resolver.position(request.position_id)
        if not self._authority.can_approve(actor_id, position.company_id):
            raise AuthorizationError("You do not have approval authority for headcount requests")

        notes = optional_text(notes)
        new_status = decision.resulting_status
        timestamp = self._clock()
        signature_hash = generate_signature_hash(actor_id, request.request_id, timestamp)

        with self._store.transaction() as tx:
            claimed = self._requests.using(tx).mark_resolved(
                request_id=request.request_id,
                status=new_status,
                reviewed_by=actor_id,
                reviewed_at=timestamp,
                review_notes=notes,
            )
            if not claimed:
                logger.warning(
                    "Headcount request resolved concurrently",
                    extra={"request_id": request.request_id, "actor_id": actor_id},
                )
                raise InvalidStateError("Request has already been resolved")

            self._signatures.using(tx).add(
                request_id=request.request_id,
                signer_id=actor_id,
                signature_type=decision.signature_type,
                signature_hash=signature_hash,
                signed_at=timestamp,
                governance_body_id=request.governance_body_id,
                notes=notes,
            )
            self._history.using(tx).append(
                request_id=request.request_id,
                old_status=RequestStatus.PENDING,
                new_status=new_status,
                actor_id=actor_id,
                notes=notes,
                at=timestamp,
            )
            if decision is Decision.APPROVE:
                updated = self._positions.using(tx).set_authorized_headcount(
                    position_id=request.position_id,
                    headcount=request.requested_headcount,
                )
                if not updated:
                    raise NotFoundError("Position not found")

            resolved = self._requests.using(tx).get(request.request_id)

        logger.info(
            "Headcount request %s",
            new_status.value,
            extra={"request_id": request.request_id, "actor_id": actor_id},
        )
        self._notify(
            NotificationEvent.APPROVED if decision is Decision.APPROVE else NotificationEvent.REJECTED,
            resolved,
            reviewer_id=actor_id,
        )
        return resolved

    def approve(self, *, request_id: str, actor_id: str, notes: Optional[str] = None, acknowledged: bool = False) -> HeadcountRequest:
        return self.resolve(request_id=request_id, actor_id=actor_id, decision=Decision.APPROVE, notes=notes, acknowledged=acknowledged)

    def reject(self, *, request_id: str, actor_id: str, notes: Optional[str] = None, acknowledged: bool = False) -> HeadcountRequest:
        return self.resolve(request_id=request_id, actor_id=actor_id, decision=Decision.REJECT, notes=notes, acknowledged=acknowledged)

    # -------- Read side --------
    def get(self, request_id: str) -> HeadcountRequest:
        request = self._requests.get(str(request_id)) if request_id else None
        if not request:
            raise NotFoundError("Headcount request not found")
        return request

    def signatures_for(self, request_id: str) -> Sequence[SignedSignature]:
        return [SignedSignature(signature=s, verified=verify_signature(s)) for s in self._signatures.list_for_request(request_id)]

    def history_for(self, request_id: str) -> Sequence[HistoryEntry]:
        return self._history.entries(request_id)

    def get_detail(self, request_id: str) -> HeadcountRequestDetail:
        request = self.get(request_id)
        return HeadcountRequestDetail(
            request=request,
            signatures=self.signatures_for(request.request_id),
            history=self.history_for(request.request_id),
        )

    def list_for_company(self, company_id: str, *, limit: Any = DEFAULT_LIST_LIMIT) -> CompanyRequests:
        """Newest first, at most ``limit`` requests across pending and processed."""
        limit = require_non_negative_int(limit, "Limit")
        if limit < 1:
            raise ValidationError("Limit must be at least 1")
        positions = self._positions.list_active_for_company(company_id)
        if not positions:
            return CompanyRequests(pending=[], processed=[], limit=limit)
        requests = self._requests.list_for_positions(position_ids=[p.position_id for p in positions], limit=limit + 1)
        truncated = len(requests) > limit
        requests = requests[:limit]
        return CompanyRequests(
            pending=[r for r in requests if r.status == RequestStatus.PENDING],
            processed=[r for r in requests if r.status != RequestStatus.PENDING],
            limit=limit,
            truncated=truncated,
        )

    def can_approve(self, actor_id: str, company_id: str) -> bool:
        return self._authority.can_approve(actor_id, company_id)

    # -------- Notifications --------
    def _notify(self, event: NotificationEvent, request: HeadcountRequest, *, reviewer_id: Optional[str] = None) -> None:
        try:
            payload = self._notification_payload(event, request, reviewer_id=reviewer_id)
            self._notifier.notify(event, payload)
        except Exception:
            logger.exception("Notification for headcount request failed", extra={"request_id": request.request_id})

    def _notification_payload(
        self,
        event: NotificationEvent,
        request: HeadcountRequest,
        *,
        reviewer_id: Optional[str],
    ) -> Dict[str, Any]:
        position = self._positions.get(request.position_id)
        people = self._users.get_many([request.requested_by, reviewer_id])
        requester = people.get(request.requested_by)
        reviewer = people.get(reviewer_id) if reviewer_id else None
        body = self._governance.get_body(request.governance_body_id) if request.governance_body_id else None

        return {
            "request_id": request.request_id,
            "action": event.value,
            "position_title": position.title if position else "Unknown Position",
            "current_headcount": request.current_headcount,
            "requested_headcount": request.requested_headcount,
            "reason": request.reason,
            "review_notes": request.review_notes,
            "requester_email": requester.email if requester else "",
            "requester_name": requester.display_name if requester else "Unknown",
            "reviewer_name": (reviewer.display_name if reviewer else "Reviewer") if reviewer_id else None,
            "governance_body_name": body.name if body else None,
        }
