from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        """Latest record of the day ordered by check_in_time desc."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: datetime,
        checked_in_by: int,
        device_id: Optional[int],
    ) -> int:
        """Insert an open record. Raises ConflictError if one is already open for the day."""

        raise NotImplementedError

    def close_record(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        checked_out_by: Optional[int],
    ) -> bool:
        """Close the record only if it is still open; False when another writer got there first."""

        raise NotImplementedError

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_open_before(self, before_date: date) -> Sequence[AttendanceRecord]:
        """Open records whose attendance_date is strictly before the given day."""

        raise NotImplementedError
