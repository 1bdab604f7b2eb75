from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository


def _to_student(row: Dict[str, Any]) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        group_id=row.get("group_id"),
        rfid_tag=row.get("rfid_tag"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, first_name, last_name, group_id, rfid_tag FROM students WHERE student_id=%s",
                (student_id,),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_by_rfid(self, rfid_tag: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, first_name, last_name, group_id, rfid_tag FROM students WHERE rfid_tag=%s",
                (rfid_tag,),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def staff_has_group_access(self, *, staff_id: int, group_id: int, on_day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok FROM group_supervisors WHERE group_id=%s AND staff_id=%s
                UNION ALL
                SELECT 1 AS ok FROM group_substitutions
                WHERE group_id=%s AND substitute_staff_id=%s AND start_date<=%s AND end_date>=%s
                LIMIT 1
                """,
                (group_id, staff_id, group_id, staff_id, on_day, on_day),
            )
            return fetchone(cur) is not None
