from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import NotFoundError, ValidationError
from ..governance.model import GovernanceBody
from ..governance.repository import GovernanceRepository
from ..positions.model import Position
from ..positions.repository import PositionRepository


class LookupResolver:
    """Resolves the entities a headcount request refers to."""

    def __init__(self, positions: PositionRepository, governance: GovernanceRepository):
        self._positions = positions
        self._governance = governance

    def position(self, position_id: str) -> Position:
        position = self._positions.get(str(position_id)) if position_id else None
        if not position:
            raise NotFoundError("Position not found")
        return position

    def eligible_governance_bodies(self, company_id: str) -> Sequence[GovernanceBody]:
        return self._governance.list_bodies(company_id=str(company_id), active_only=True, approving_only=True)

    def governance_body(self, body_id: Optional[str], *, company_id: str) -> Optional[GovernanceBody]:
        """Routing body for a new request; None when the requester picked none."""
        if not body_id:
            return None
        body = self._governance.get_body(str(body_id))
        if not body:
            raise NotFoundError("Governance body not found")
        if not body.can_approve_for(company_id):
            raise ValidationError("Governance body cannot approve headcount for this company")
        return body
