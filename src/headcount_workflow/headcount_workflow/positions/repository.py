from __future__ import annotations

from typing import Optional, Sequence

from ..database.record_store import RecordStore, Row
from .model import Position

POSITIONS_TABLE = "positions"
DEPARTMENTS_TABLE = "departments"


def _to_position(r: Row, company_id: str) -> Position:
    return Position(
        position_id=str(r["id"]),
        title=r.get("title") or "",
        code=r.get("code") or "",
        department_id=str(r["department_id"]),
        company_id=str(company_id),
        authorized_headcount=int(r.get("authorized_headcount") or 0),
        is_active=bool(r.get("is_active", True)),
    )


class PositionRepository:
    def __init__(self, store: RecordStore):
        self._store = store

    def using(self, store: RecordStore) -> "PositionRepository":
        """Same repository bound to another store (e.g. an open transaction)."""
        return PositionRepository(store)

    def get(self, position_id: str) -> Optional[Position]:
        rows = self._store.select(POSITIONS_TABLE, {"id": str(position_id)}, limit=1)
        if not rows:
            return None
        depts = self._store.select(DEPARTMENTS_TABLE, {"id": rows[0]["department_id"]}, limit=1)
        company_id = depts[0]["company_id"] if depts else ""
        return _to_position(rows[0], company_id)

    def list_active_for_company(self, company_id: str) -> Sequence[Position]:
        dept_ids = [d["id"] for d in self._store.select(DEPARTMENTS_TABLE, {"company_id": str(company_id)})]
        if not dept_ids:
            return []
        rows = self._store.select(
            POSITIONS_TABLE,
            {"department_id": dept_ids, "is_active": True},
            order=["title"],
        )
        return [_to_position(r, company_id) for r in rows]

    def set_authorized_headcount(self, *, position_id: str, headcount: int) -> bool:
        return self._store.update(POSITIONS_TABLE, str(position_id), {"authorized_headcount": int(headcount)}) > 0
