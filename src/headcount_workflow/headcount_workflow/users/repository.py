from __future__ import annotations

from typing import Iterable, Optional

from ..database.record_store import RecordStore, Row
from .model import User

PROFILES_TABLE = "profiles"


def _to_user(r: Row) -> User:
    return User(
        user_id=str(r["id"]),
        full_name=r.get("full_name"),
        email=r.get("email") or "",
        is_active=bool(r.get("is_active", True)),
    )


class UserRepository:
    def __init__(self, store: RecordStore):
        self._store = store

    def get_by_id(self, user_id: str) -> Optional[User]:
        rows = self._store.select(PROFILES_TABLE, {"id": str(user_id)}, limit=1)
        return _to_user(rows[0]) if rows else None

    def get_many(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = sorted({str(u) for u in user_ids if u})
        return {u.user_id: u for u in map(_to_user, self._store.select(PROFILES_TABLE, {"id": ids}))}
