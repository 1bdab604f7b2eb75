from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceState, ToggleAction
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student check-in event (closed by the matching check-out)."""

    attendance_id: int
    student_id: int
    attendance_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    checked_in_by: int
    checked_out_by: Optional[int] = None
    device_id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None


@dataclass(frozen=True)
class AttendanceStatusView:
    """Read-model returned by the status endpoint."""

    status: AttendanceState
    date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    checked_in_by: Optional[int] = None
    checked_out_by: Optional[int] = None


@dataclass(frozen=True)
class ToggleResult:
    action: ToggleAction
    record: Optional[AttendanceRecord]
    student: Optional[Student] = None
