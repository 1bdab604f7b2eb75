from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .device_model import Device
from .device_repository import DeviceRepository


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_api_key_hash(self, api_key_hash: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT device_id, device_name, api_key_hash, is_active
                FROM devices
                WHERE api_key_hash=%s
                """,
                (api_key_hash,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Device(
                device_id=int(row["device_id"]),
                device_name=row["device_name"],
                api_key_hash=row["api_key_hash"],
                is_active=bool(row.get("is_active", True)),
            )
