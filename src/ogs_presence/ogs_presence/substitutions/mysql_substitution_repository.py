from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import GroupSubstitution, SubstitutionInput
from .repository import SubstitutionRepository

_COLUMNS = "substitution_id, group_id, regular_staff_id, substitute_staff_id, start_date, end_date, reason"


def _to_substitution(row: Dict[str, Any]) -> GroupSubstitution:
    return GroupSubstitution(
        substitution_id=int(row["substitution_id"]),
        group_id=int(row["group_id"]),
        regular_staff_id=row.get("regular_staff_id"),
        substitute_staff_id=int(row["substitute_staff_id"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        reason=row.get("reason") or "",
    )


class MySQLSubstitutionRepository(SubstitutionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, substitution_id: int) -> Optional[GroupSubstitution]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM group_substitutions WHERE substitution_id=%s", (substitution_id,))
            row = fetchone(cur)
            return _to_substitution(row) if row else None

    def _find_overlapping(
        self, column: str, value: int, start_date: date, end_date: date, exclude_id: Optional[int]
    ) -> Sequence[GroupSubstitution]:
        sql = f"""
            SELECT {_COLUMNS} FROM group_substitutions
            WHERE {column}=%s AND start_date <= %s AND end_date >= %s
        """
        params: list[Any] = [value, end_date, start_date]
        if exclude_id is not None:
            sql += " AND substitution_id <> %s"
            params.append(exclude_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY start_date", tuple(params))
            return [_to_substitution(r) for r in fetchall(cur)]

    def find_overlapping_by_substitute(
        self, staff_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        return self._find_overlapping("substitute_staff_id", staff_id, start_date, end_date, exclude_id)

    def find_overlapping_by_group(
        self, group_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        return self._find_overlapping("group_id", group_id, start_date, end_date, exclude_id)

    def find_active(self, day: date) -> Sequence[GroupSubstitution]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM group_substitutions
                WHERE start_date <= %s AND end_date >= %s
                ORDER BY group_id, start_date
                """,
                (day, day),
            )
            return [_to_substitution(r) for r in fetchall(cur)]

    def list_page(self, *, offset: int, limit: int) -> tuple[Sequence[GroupSubstitution], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM group_substitutions")
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM group_substitutions
                ORDER BY start_date DESC, substitution_id DESC
                LIMIT %s OFFSET %s
                """,
                (limit, offset),
            )
            return [_to_substitution(r) for r in fetchall(cur)], total

    def create(self, data: SubstitutionInput) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO group_substitutions
                    (group_id, regular_staff_id, substitute_staff_id, start_date, end_date, reason)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    data.group_id,
                    data.regular_staff_id,
                    data.substitute_staff_id,
                    data.start_date,
                    data.end_date,
                    data.reason,
                ),
            )
            return int(cur.lastrowid)

    def update(self, substitution_id: int, data: SubstitutionInput) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE group_substitutions
                SET group_id=%s, regular_staff_id=%s, substitute_staff_id=%s, start_date=%s, end_date=%s, reason=%s
                WHERE substitution_id=%s
                """,
                (
                    data.group_id,
                    data.regular_staff_id,
                    data.substitute_staff_id,
                    data.start_date,
                    data.end_date,
                    data.reason,
                    substitution_id,
                ),
            )
            return cur.rowcount >= 0

    def delete(self, substitution_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM group_substitutions WHERE substitution_id=%s", (substitution_id,))
            return cur.rowcount == 1
