from __future__ import annotations

from typing import Dict, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import WorkSessionEdit
from .repository import WorkSessionEditRepository


class MySQLWorkSessionEditRepository(WorkSessionEditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_batch(self, edits: Sequence[WorkSessionEdit]) -> None:
        if not edits:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO work_session_edits
                    (session_id, staff_id, edited_by, field_name, old_value, new_value, notes, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                [
                    (e.session_id, e.staff_id, e.edited_by, e.field_name, e.old_value, e.new_value, e.notes, e.created_at)
                    for e in edits
                ],
            )

    def get_by_session(self, session_id: int) -> Sequence[WorkSessionEdit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT edit_id, session_id, staff_id, edited_by, field_name, old_value, new_value, notes, created_at
                FROM work_session_edits
                WHERE session_id=%s
                ORDER BY created_at DESC, edit_id DESC
                """,
                (session_id,),
            )
            return [
                WorkSessionEdit(
                    edit_id=int(r["edit_id"]),
                    session_id=int(r["session_id"]),
                    staff_id=int(r["staff_id"]),
                    edited_by=int(r["edited_by"]),
                    field_name=r["field_name"],
                    old_value=r.get("old_value"),
                    new_value=r.get("new_value"),
                    notes=r.get("notes"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def count_by_sessions(self, session_ids: Sequence[int]) -> Dict[int, int]:
        if not session_ids:
            return {}
        placeholders = ", ".join(["%s"] * len(session_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, COUNT(*) AS edit_count
                FROM work_session_edits
                WHERE session_id IN ({placeholders})
                GROUP BY session_id
                """,
                tuple(session_ids),
            )
            return {int(r["session_id"]): int(r["edit_count"]) for r in fetchall(cur)}
