from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import as_date
from ..database.record_store import RecordStore, Row
from .model import GovernanceBody, GovernanceMember

BODIES_TABLE = "governance_bodies"
MEMBERS_TABLE = "governance_members"


def _to_body(r: Row) -> GovernanceBody:
    return GovernanceBody(
        body_id=str(r["id"]),
        company_id=str(r["company_id"]),
        name=r.get("name") or "",
        body_type=r.get("body_type") or "",
        description=r.get("description"),
        can_approve_headcount=bool(r.get("can_approve_headcount")),
        is_active=bool(r.get("is_active", True)),
    )


def _to_member(r: Row) -> GovernanceMember:
    return GovernanceMember(
        member_id=str(r["id"]),
        governance_body_id=str(r["governance_body_id"]),
        employee_id=str(r["employee_id"]),
        role_in_body=r.get("role_in_body") or "member",
        start_date=as_date(r.get("start_date")),
        end_date=as_date(r.get("end_date")),
        is_active=bool(r.get("is_active", True)),
    )


class GovernanceRepository:
    def __init__(self, store: RecordStore):
        self._store = store

    # -------- Bodies --------
    def create_body(
        self,
        *,
        company_id: str,
        name: str,
        body_type: str,
        description: Optional[str],
        can_approve_headcount: bool,
        is_active: bool,
    ) -> str:
        return self._store.insert(
            BODIES_TABLE,
            {
                "company_id": str(company_id),
                "name": name,
                "body_type": body_type,
                "description": description,
                "can_approve_headcount": bool(can_approve_headcount),
                "is_active": bool(is_active),
            },
        )

    def get_body(self, body_id: str) -> Optional[GovernanceBody]:
        rows = self._store.select(BODIES_TABLE, {"id": str(body_id)}, limit=1)
        return _to_body(rows[0]) if rows else None

    def get_bodies(self, body_ids: Iterable[str]) -> dict[str, GovernanceBody]:
        ids = sorted({str(b) for b in body_ids if b})
        return {b.body_id: b for b in map(_to_body, self._store.select(BODIES_TABLE, {"id": ids}))}

    def list_bodies(
        self,
        *,
        company_id: str,
        active_only: bool = False,
        approving_only: bool = False,
    ) -> Sequence[GovernanceBody]:
        filters: dict[str, Any] = {"company_id": str(company_id)}
        if active_only:
            filters["is_active"] = True
        if approving_only:
            filters["can_approve_headcount"] = True
        return [_to_body(r) for r in self._store.select(BODIES_TABLE, filters, order=["name"])]

    def update_body(self, *, body_id: str, changes: Mapping[str, Any]) -> bool:
        return self._store.update(BODIES_TABLE, str(body_id), dict(changes)) > 0

    # -------- Members --------
    def add_member(
        self,
        *,
        body_id: str,
        employee_id: str,
        role_in_body: str,
        start_date: date,
        end_date: Optional[date],
        is_active: bool,
    ) -> str:
        return self._store.insert(
            MEMBERS_TABLE,
            {
                "governance_body_id": str(body_id),
                "employee_id": str(employee_id),
                "role_in_body": role_in_body,
                "start_date": start_date,
                "end_date": end_date,
                "is_active": bool(is_active),
            },
        )

    def get_member(self, member_id: str) -> Optional[GovernanceMember]:
        rows = self._store.select(MEMBERS_TABLE, {"id": str(member_id)}, limit=1)
        return _to_member(rows[0]) if rows else None

    def list_members(self, *, body_id: str) -> Sequence[GovernanceMember]:
        rows = self._store.select(MEMBERS_TABLE, {"governance_body_id": str(body_id)}, order=["role_in_body"])
        return [_to_member(r) for r in rows]

    def list_memberships_for(self, *, employee_id: str) -> Sequence[GovernanceMember]:
        rows = self._store.select(MEMBERS_TABLE, {"employee_id": str(employee_id), "is_active": True})
        return [_to_member(r) for r in rows]

    def update_member(self, *, member_id: str, changes: Mapping[str, Any]) -> bool:
        return self._store.update(MEMBERS_TABLE, str(member_id), dict(changes)) > 0
