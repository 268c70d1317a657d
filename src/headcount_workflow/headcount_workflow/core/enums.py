from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    """Status of a headcount change request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class Decision(str, Enum):
    """Reviewer action on a pending request."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> RequestStatus:
        return RequestStatus.APPROVED if self is Decision.APPROVE else RequestStatus.REJECTED

    @property
    def signature_type(self) -> "SignatureType":
        return SignatureType.APPROVAL if self is Decision.APPROVE else SignatureType.REJECTION


class SignatureType(str, Enum):
    APPROVAL = "approval"
    REJECTION = "rejection"


class NotificationEvent(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
