from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Staff
from .repository import StaffRepository

_COLUMNS = "staff_id, full_name, username, password_hash, pin_hash, role, is_active"


def _to_staff(row: Dict[str, Any]) -> Staff:
    return Staff(
        staff_id=int(row["staff_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        pin_hash=row.get("pin_hash"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE staff_id=%s", (staff_id,))
            row = fetchone(cur)
            return _to_staff(row) if row else None

    def get_by_username(self, username: str) -> Optional[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE username=%s", (username,))
            row = fetchone(cur)
            return _to_staff(row) if row else None
