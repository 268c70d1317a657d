from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, ContextManager, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple

import mysql.connector

from ..core.exceptions import DependencyError
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchall, quote_identifier

Row = Dict[str, Any]


def new_id() -> str:
    return str(uuid.uuid4())


def parse_order(order: Optional[Sequence[str]]) -> List[Tuple[str, bool]]:
    """``["-created_at", "seq"]`` -> ``[("created_at", True), ("seq", False)]`` (column, descending)."""
    out: List[Tuple[str, bool]] = []
    for item in order or ():
        if item.startswith("-"):
            out.append((item[1:], True))
        else:
            out.append((item, False))
    return out


class RecordStore(Protocol):
    """Row-level persistence used by every repository.

    Filters are ``{column: value}`` mappings ANDed together: ``None`` matches NULL,
    a list/tuple/set matches any of its members, anything else matches by equality.
    """

    def insert(self, table: str, row: Mapping[str, Any]) -> str:
        """Insert a row and return its id (generated when the row has none)."""

        raise NotImplementedError

    def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
        condition: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Patch one row by id, only if ``condition`` also holds. Returns matched rows (0 or 1)."""

        raise NotImplementedError

    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        raise NotImplementedError

    def transaction(self) -> ContextManager["RecordStore"]:
        """Store bound to one unit of work: committed on exit, rolled back on error."""

        raise NotImplementedError


def _where_clause(filters: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any], bool]:
    """Returns (sql, params, matches_nothing)."""
    clauses = ["1=1"]
    params: List[Any] = []
    for column, value in (filters or {}).items():
        col = quote_identifier(column)
        if value is None:
            clauses.append(f"{col} IS NULL")
        elif isinstance(value, (list, tuple, set, frozenset)):
            values = list(value)
            if not values:
                return "", [], True
            clauses.append(f"{col} IN ({','.join(['%s'] * len(values))})")
            params.extend(values)
        else:
            clauses.append(f"{col}=%s")
            params.append(value)
    return " AND ".join(clauses), params, False


class _CursorOperations:
    """SQL for the RecordStore operations, executed on a given cursor."""

    @staticmethod
    def insert(cur, table: str, row: Mapping[str, Any]) -> str:
        data = dict(row)
        data.setdefault("id", new_id())
        columns = ",".join(quote_identifier(c) for c in data)
        placeholders = ",".join(["%s"] * len(data))
        cur.execute(
            f"INSERT INTO {quote_identifier(table)}({columns}) VALUES({placeholders})",
            tuple(data.values()),
        )
        return str(data["id"])

    @staticmethod
    def update(cur, table: str, row_id: str, patch: Mapping[str, Any], condition: Optional[Mapping[str, Any]]) -> int:
        if not patch:
            raise ValueError("Empty patch")
        assignments = ",".join(f"{quote_identifier(c)}=%s" for c in patch)
        where, params, nothing = _where_clause(condition)
        if nothing:
            return 0
        cur.execute(
            f"UPDATE {quote_identifier(table)} SET {assignments} WHERE `id`=%s AND {where}",
            tuple(list(patch.values()) + [row_id] + params),
        )
        return int(cur.rowcount or 0)

    @staticmethod
    def select(
        cur,
        table: str,
        filters: Optional[Mapping[str, Any]],
        order: Optional[Sequence[str]],
        limit: Optional[int],
    ) -> List[Row]:
        where, params, nothing = _where_clause(filters)
        if nothing:
            return []
        sql = f"SELECT * FROM {quote_identifier(table)} WHERE {where}"
        order_by = parse_order(order)
        if order_by:
            sql += " ORDER BY " + ",".join(
                f"{quote_identifier(c)} {'DESC' if desc else 'ASC'}" for c, desc in order_by
            )
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))
        cur.execute(sql, tuple(params))
        return fetchall(cur)


@contextmanager
def _driver_errors(action: str) -> Iterator[None]:
    try:
        yield
    except mysql.connector.Error as e:
        raise DependencyError(f"Database error while trying to {action}: {e}") from e


class MySQLRecordStore(RecordStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, table: str, row: Mapping[str, Any]) -> str:
        with _driver_errors(f"insert into {table}"), db_cursor(self._conn_factory) as (_, cur):
            return _CursorOperations.insert(cur, table, row)

    def update(self, table, row_id, patch, condition=None) -> int:
        with _driver_errors(f"update {table}"), db_cursor(self._conn_factory) as (_, cur):
            return _CursorOperations.update(cur, table, row_id, patch, condition)

    def select(self, table, filters=None, order=None, limit=None) -> List[Row]:
        with _driver_errors(f"read {table}"), db_cursor(self._conn_factory) as (_, cur):
            return _CursorOperations.select(cur, table, filters, order, limit)

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        with _driver_errors("run a transaction"), db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLTransaction(cur)


class _MySQLTransaction(RecordStore):
    """All operations share one connection; db_cursor commits or rolls back."""

    def __init__(self, cur):
        self._cur = cur

    def insert(self, table, row) -> str:
        with _driver_errors(f"insert into {table}"):
            return _CursorOperations.insert(self._cur, table, row)

    def update(self, table, row_id, patch, condition=None) -> int:
        with _driver_errors(f"update {table}"):
            return _CursorOperations.update(self._cur, table, row_id, patch, condition)

    def select(self, table, filters=None, order=None, limit=None) -> List[Row]:
        with _driver_errors(f"read {table}"):
            return _CursorOperations.select(self._cur, table, filters, order, limit)

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        # Nested units of work join the outer one.
        yield self
