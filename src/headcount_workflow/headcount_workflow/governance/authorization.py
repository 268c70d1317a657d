from __future__ import annotations

from datetime import date
from typing import Callable

from ..common.datetime_utils import today_utc
from ..core.logging_config import get_logger
from .repository import GovernanceRepository

logger = get_logger("governance.authorization")


class ApprovalAuthority:
    """Answers whether an employee may approve headcount requests for a company.

    An actor qualifies through at least one membership that is active today in a
    body that is itself active, holds headcount approval capability and belongs
    to the same company.
    """

    def __init__(self, governance: GovernanceRepository, *, today: Callable[[], date] = today_utc):
        self._governance = governance
        self._today = today

    def can_approve(self, actor_id: str, scope_id: str) -> bool:
        if not actor_id or not scope_id:
            return False

        day = self._today()
        memberships = [m for m in self._governance.list_memberships_for(employee_id=str(actor_id)) if m.is_active_on(day)]
        if not memberships:
            return False

        bodies = self._governance.get_bodies(m.governance_body_id for m in memberships)
        allowed = any(b.can_approve_for(scope_id) for b in bodies.values())
        logger.debug("Approval authority check", extra={"actor_id": actor_id, "scope_id": scope_id, "allowed": allowed})
        return allowed
