from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AbsenceStatus, AbsenceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffAbsence
from .repository import AbsenceRepository

_COLUMNS = "absence_id, staff_id, absence_type, date_start, date_end, status, note, created_by"


def _to_absence(row: Dict[str, Any]) -> StaffAbsence:
    return StaffAbsence(
        absence_id=int(row["absence_id"]),
        staff_id=int(row["staff_id"]),
        absence_type=AbsenceType(row["absence_type"]),
        date_start=row["date_start"],
        date_end=row["date_end"],
        status=AbsenceStatus(row["status"]),
        note=row.get("note") or "",
        created_by=row.get("created_by"),
    )


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, absence_id: int) -> Optional[StaffAbsence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff_absences WHERE absence_id=%s", (absence_id,))
            row = fetchone(cur)
            return _to_absence(row) if row else None

    def find_overlapping(
        self, staff_id: int, date_start: date, date_end: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[StaffAbsence]:
        sql = f"""
            SELECT {_COLUMNS} FROM staff_absences
            WHERE staff_id=%s AND date_start <= %s AND date_end >= %s
        """
        params: list[Any] = [staff_id, date_end, date_start]
        if exclude_id is not None:
            sql += " AND absence_id <> %s"
            params.append(exclude_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY date_start", tuple(params))
            return [_to_absence(r) for r in fetchall(cur)]

    def list_for_range(self, staff_id: int, date_from: date, date_to: date) -> Sequence[StaffAbsence]:
        return self.find_overlapping(staff_id, date_from, date_to)

    def create(
        self,
        *,
        staff_id: int,
        absence_type: AbsenceType,
        date_start: date,
        date_end: date,
        note: str,
        created_by: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_absences (staff_id, absence_type, date_start, date_end, status, note, created_by)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                """,
                (staff_id, absence_type.value, date_start, date_end, AbsenceStatus.REPORTED.value, note, created_by),
            )
            return int(cur.lastrowid)

    def update(self, absence: StaffAbsence) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE staff_absences
                SET absence_type=%s, date_start=%s, date_end=%s, status=%s, note=%s
                WHERE absence_id=%s
                """,
                (
                    absence.absence_type.value,
                    absence.date_start,
                    absence.date_end,
                    absence.status.value,
                    absence.note,
                    absence.absence_id,
                ),
            )
            return cur.rowcount >= 0

    def delete(self, absence_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM staff_absences WHERE absence_id=%s", (absence_id,))
            return cur.rowcount == 1
