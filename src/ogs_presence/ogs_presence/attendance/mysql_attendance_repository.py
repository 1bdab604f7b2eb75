from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, attendance_date, check_in_time, check_out_time,
    checked_in_by, checked_out_by, device_id
"""


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        student_id=int(row["student_id"]),
        attendance_date=row["attendance_date"],
        check_in_time=row["check_in_time"],
        check_out_time=row.get("check_out_time"),
        checked_in_by=int(row["checked_in_by"]),
        checked_out_by=row.get("checked_out_by"),
        device_id=row.get("device_id"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_latest_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                ORDER BY check_in_time DESC, attendance_id DESC
                LIMIT 1
                """,
                (student_id, attendance_date),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create_checkin(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: datetime,
        checked_in_by: int,
        device_id: Optional[int],
    ) -> int:
        with conflict_on_duplicate("student is already checked in"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records
                        (student_id, attendance_date, check_in_time, checked_in_by, device_id)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (student_id, attendance_date, check_in_time, checked_in_by, device_id),
                )
                return int(cur.lastrowid)

    def close_record(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        checked_out_by: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, checked_out_by=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, checked_out_by, attendance_id),
            )
            return cur.rowcount == 1

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_date=%s
                ORDER BY check_in_time
                """,
                (attendance_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_open_before(self, before_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE check_out_time IS NULL AND attendance_date < %s
                ORDER BY attendance_date, attendance_id
                """,
                (before_date,),
            )
            return [_to_record(r) for r in fetchall(cur)]
