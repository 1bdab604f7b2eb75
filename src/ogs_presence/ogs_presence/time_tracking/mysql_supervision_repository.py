from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import SupervisionRepository


class MySQLSupervisionRepository(SupervisionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def end_all_active_by_staff(self, staff_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE active_supervisions SET ended_at=NOW() WHERE staff_id=%s AND ended_at IS NULL",
                (staff_id,),
            )
            return int(cur.rowcount or 0)
