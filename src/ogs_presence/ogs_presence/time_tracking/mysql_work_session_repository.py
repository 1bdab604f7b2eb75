from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import WorkStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone
from .model import WorkSession
from .repository import WorkSessionRepository

_COLUMNS = """
    session_id, staff_id, work_date, status, check_in_time, check_out_time, break_minutes,
    planned_duration_minutes, notes, auto_checked_out, created_by, updated_by
"""


def _to_session(row: Dict[str, Any]) -> WorkSession:
    return WorkSession(
        session_id=int(row["session_id"]),
        staff_id=int(row["staff_id"]),
        work_date=row["work_date"],
        status=WorkStatus(row["status"]),
        check_in_time=row["check_in_time"],
        check_out_time=row.get("check_out_time"),
        break_minutes=int(row.get("break_minutes") or 0),
        planned_duration_minutes=row.get("planned_duration_minutes"),
        notes=row.get("notes") or "",
        auto_checked_out=bool(row.get("auto_checked_out")),
        created_by=row.get("created_by"),
        updated_by=row.get("updated_by"),
    )


class MySQLWorkSessionRepository(WorkSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_sessions WHERE session_id=%s", (session_id,))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_current_by_staff(self, staff_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_sessions WHERE staff_id=%s AND check_out_time IS NULL",
                (staff_id,),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_by_staff_and_date(self, staff_id: int, work_date: date) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM work_sessions
                WHERE staff_id=%s AND work_date=%s
                ORDER BY check_in_time DESC
                LIMIT 1
                """,
                (staff_id, work_date),
            )
            row = fetchone(cur)
            return _to_session(row) if row else None

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: WorkStatus,
        check_in_time: datetime,
        created_by: int,
    ) -> int:
        with conflict_on_duplicate("already checked in"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO work_sessions (staff_id, work_date, status, check_in_time, created_by)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (staff_id, work_date, status.value, check_in_time, created_by),
                )
                return int(cur.lastrowid)

    def close_session(self, *, session_id: int, check_out_time: datetime, auto_checked_out: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_sessions
                SET check_out_time=%s, auto_checked_out=%s
                WHERE session_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, int(auto_checked_out), session_id),
            )
            return cur.rowcount == 1

    def update(self, session: WorkSession) -> bool:
        with conflict_on_duplicate("another session is already open"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE work_sessions
                    SET status=%s, check_in_time=%s, check_out_time=%s, break_minutes=%s,
                        planned_duration_minutes=%s, notes=%s, auto_checked_out=%s, updated_by=%s
                    WHERE session_id=%s
                    """,
                    (
                        session.status.value,
                        session.check_in_time,
                        session.check_out_time,
                        int(session.break_minutes),
                        session.planned_duration_minutes,
                        session.notes,
                        int(session.auto_checked_out),
                        session.updated_by,
                        session.session_id,
                    ),
                )
                return cur.rowcount >= 0

    def update_break_minutes(self, session_id: int, break_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE work_sessions SET break_minutes=%s WHERE session_id=%s",
                (int(break_minutes), session_id),
            )
            return cur.rowcount >= 0

    def get_history(self, staff_id: int, date_from: date, date_to: date) -> Sequence[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM work_sessions
                WHERE staff_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC, check_in_time DESC
                """,
                (staff_id, date_from, date_to),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_open_before(self, before_date: date) -> Sequence[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM work_sessions
                WHERE check_out_time IS NULL AND work_date < %s
                ORDER BY work_date, session_id
                """,
                (before_date,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def get_presence_map(self, work_date: date) -> Dict[int, str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT staff_id, status FROM work_sessions
                WHERE work_date=%s AND check_out_time IS NULL
                """,
                (work_date,),
            )
            return {int(r["staff_id"]): r["status"] for r in fetchall(cur)}
