from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone
from .model import WorkSessionBreak
from .repository import WorkSessionBreakRepository

_COLUMNS = "break_id, session_id, start_time, end_time, duration_minutes, planned_duration_minutes"


def _to_break(row: Dict[str, Any]) -> WorkSessionBreak:
    return WorkSessionBreak(
        break_id=int(row["break_id"]),
        session_id=int(row["session_id"]),
        start_time=row["start_time"],
        end_time=row.get("end_time"),
        duration_minutes=int(row.get("duration_minutes") or 0),
        planned_duration_minutes=row.get("planned_duration_minutes"),
    )


class MySQLWorkSessionBreakRepository(WorkSessionBreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_by_session(self, session_id: int) -> Optional[WorkSessionBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_session_breaks WHERE session_id=%s AND end_time IS NULL",
                (session_id,),
            )
            row = fetchone(cur)
            return _to_break(row) if row else None

    def get_by_session(self, session_id: int) -> Sequence[WorkSessionBreak]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_session_breaks WHERE session_id=%s ORDER BY start_time",
                (session_id,),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def create(self, *, session_id: int, start_time: datetime, planned_duration_minutes: Optional[int]) -> int:
        with conflict_on_duplicate("break already active"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO work_session_breaks (session_id, start_time, planned_duration_minutes)
                    VALUES (%s, %s, %s)
                    """,
                    (session_id, start_time, planned_duration_minutes),
                )
                return int(cur.lastrowid)

    def end_break(self, *, break_id: int, end_time: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_session_breaks
                SET end_time=%s, duration_minutes=%s
                WHERE break_id=%s AND end_time IS NULL
                """,
                (end_time, int(duration_minutes), break_id),
            )
            return cur.rowcount == 1

    def update_duration(self, *, break_id: int, duration_minutes: int, end_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_session_breaks
                SET end_time=%s, duration_minutes=%s
                WHERE break_id=%s AND end_time IS NOT NULL
                """,
                (end_time, int(duration_minutes), break_id),
            )
            return cur.rowcount == 1
