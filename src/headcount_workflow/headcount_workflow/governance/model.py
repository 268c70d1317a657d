from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class GovernanceBody:
    body_id: str
    company_id: str
    name: str
    body_type: str
    description: Optional[str] = None
    can_approve_headcount: bool = False
    is_active: bool = True

    def can_approve_for(self, company_id: str) -> bool:
        return self.is_active and self.can_approve_headcount and self.company_id == str(company_id)


@dataclass(frozen=True)
class GovernanceMember:
    member_id: str
    governance_body_id: str
    employee_id: str
    role_in_body: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True

    def is_active_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.start_date and self.start_date > day:
            return False
        return self.end_date is None or self.end_date >= day
