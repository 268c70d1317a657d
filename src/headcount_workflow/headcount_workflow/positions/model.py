from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    position_id: str
    title: str
    code: str
    department_id: str
    company_id: str
    authorized_headcount: int
    is_active: bool = True
