from __future__ import annotations

from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.datetime_utils import as_date
from ..common.validators import optional_text, require_bool, require_non_empty
from ..core.constants import LOOKUP_GOVERNANCE_BODY_TYPE, LOOKUP_GOVERNANCE_ROLE
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.logging_config import get_logger
from ..lookups.catalog import LookupCatalog
from .authorization import ApprovalAuthority
from .model import GovernanceBody, GovernanceMember
from .repository import GovernanceRepository

logger = get_logger("governance.service")

_BODY_FIELDS = {"name", "body_type", "description", "can_approve_headcount", "is_active"}
_MEMBER_FIELDS = {"role_in_body", "start_date", "end_date", "is_active"}


def _as_date(value: Any, field_name: str) -> Optional[date]:
    try:
        return as_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


class GovernanceService:
    """Manage governance bodies and their memberships.

    Bodies and members are deactivated rather than deleted so past signatures
    keep pointing at real rows. Every change requires the actor to hold
    headcount approval authority in the body's company.
    """

    def __init__(self, governance: GovernanceRepository, catalog: LookupCatalog, authority: ApprovalAuthority):
        self._governance = governance
        self._catalog = catalog
        self._authority = authority

    def _require_authority(self, actor_id: str, company_id: str) -> None:
        if not self._authority.can_approve(actor_id, company_id):
            logger.warning("Governance change refused", extra={"actor_id": actor_id, "company_id": company_id})
            raise AuthorizationError("You do not have permission to manage governance bodies for this company")

    def _require_code(self, category: str, value: Optional[str], field_name: str) -> str:
        code = require_non_empty(value, field_name)
        allowed = self._catalog.codes(category)
        if allowed and code not in allowed:
            raise ValidationError(f"{field_name} must be one of: {', '.join(allowed)}")
        return code

    # -------- Bodies --------
    def list_bodies(self, *, company_id: str, approving_only: bool = False) -> Sequence[GovernanceBody]:
        return self._governance.list_bodies(
            company_id=str(company_id),
            active_only=approving_only,
            approving_only=approving_only,
        )

    def get_body(self, body_id: str) -> GovernanceBody:
        body = self._governance.get_body(str(body_id))
        if not body:
            raise NotFoundError("Governance body not found")
        return body

    def create_body(
        self,
        *,
        actor_id: str,
        company_id: str,
        name: str,
        body_type: str,
        description: Optional[str] = None,
        can_approve_headcount: Optional[bool] = False,
        is_active: Optional[bool] = True,
    ) -> GovernanceBody:
        company_id = require_non_empty(company_id, "Company")
        self._require_authority(actor_id, company_id)
        body_id = self._governance.create_body(
            company_id=company_id,
            name=require_non_empty(name, "Name"),
            body_type=self._require_code(LOOKUP_GOVERNANCE_BODY_TYPE, body_type, "Body type"),
            description=optional_text(description),
            can_approve_headcount=require_bool(can_approve_headcount, "Can approve headcount", default=False),
            is_active=require_bool(is_active, "Active", default=True),
        )
        logger.info("Governance body created", extra={"body_id": body_id, "company_id": company_id})
        return self.get_body(body_id)

    def update_body(self, *, actor_id: str, body_id: str, changes: Mapping[str, Any]) -> GovernanceBody:
        body = self.get_body(body_id)
        self._require_authority(actor_id, body.company_id)
        unknown = set(changes) - _BODY_FIELDS
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        patch: Dict[str, Any] = {}
        if "name" in changes:
            patch["name"] = require_non_empty(changes["name"], "Name")
        if "body_type" in changes:
            patch["body_type"] = self._require_code(LOOKUP_GOVERNANCE_BODY_TYPE, changes["body_type"], "Body type")
        if "description" in changes:
            patch["description"] = optional_text(changes["description"])
        if "can_approve_headcount" in changes:
            patch["can_approve_headcount"] = require_bool(changes["can_approve_headcount"], "Can approve headcount")
        if "is_active" in changes:
            patch["is_active"] = require_bool(changes["is_active"], "Active")

        if patch:
            self._governance.update_body(body_id=str(body_id), changes=patch)
        return self.get_body(body_id)

    # -------- Members --------
    def list_members(self, *, body_id: str) -> Sequence[GovernanceMember]:
        self.get_body(body_id)
        return self._governance.list_members(body_id=str(body_id))

    def get_member(self, member_id: str) -> GovernanceMember:
        member = self._governance.get_member(str(member_id))
        if not member:
            raise NotFoundError("Governance member not found")
        return member

    def add_member(
        self,
        *,
        actor_id: str,
        body_id: str,
        employee_id: str,
        role_in_body: str = "member",
        start_date: Any = None,
        end_date: Any = None,
        is_active: Optional[bool] = True,
    ) -> GovernanceMember:
        body = self.get_body(body_id)
        self._require_authority(actor_id, body.company_id)
        start = _as_date(start_date, "Start date")
        if start is None:
            raise ValidationError("Start date is required")
        end = _as_date(end_date, "End date")
        if end is not None and end < start:
            raise ValidationError("End date cannot be before start date")

        member_id = self._governance.add_member(
            body_id=str(body_id),
            employee_id=require_non_empty(employee_id, "Employee"),
            role_in_body=self._require_code(LOOKUP_GOVERNANCE_ROLE, role_in_body, "Role"),
            start_date=start,
            end_date=end,
            is_active=require_bool(is_active, "Active", default=True),
        )
        logger.info("Governance member added", extra={"body_id": str(body_id), "member_id": member_id})
        return self.get_member(member_id)

    def update_member(self, *, actor_id: str, member_id: str, changes: Mapping[str, Any]) -> GovernanceMember:
        current = self.get_member(member_id)
        self._require_authority(actor_id, self.get_body(current.governance_body_id).company_id)
        unknown = set(changes) - _MEMBER_FIELDS
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        patch: Dict[str, Any] = {}
        if "role_in_body" in changes:
            patch["role_in_body"] = self._require_code(LOOKUP_GOVERNANCE_ROLE, changes["role_in_body"], "Role")
        if "start_date" in changes:
            start = _as_date(changes["start_date"], "Start date")
            if start is None:
                raise ValidationError("Start date is required")
            patch["start_date"] = start
        if "end_date" in changes:
            patch["end_date"] = _as_date(changes["end_date"], "End date")
        if "is_active" in changes:
            patch["is_active"] = require_bool(changes["is_active"], "Active")

        start = patch.get("start_date", current.start_date)
        end = patch.get("end_date", current.end_date)
        if end is not None and start is not None and end < start:
            raise ValidationError("End date cannot be before start date")

        if patch:
            self._governance.update_member(member_id=str(member_id), changes=patch)
        return self.get_member(member_id)
