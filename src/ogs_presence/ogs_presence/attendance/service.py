from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_non_empty
from ..core.enums import AttendanceState, DeviceAction, ToggleAction
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import AttendanceRecord, AttendanceStatusView, ToggleResult
from .repository import AttendanceRepository


class AttendanceService:
    """Toggles a student's daily check-in/check-out state from RFID scans.

    Every call computes "today" once from ``now`` (defaults to the local clock).
    The store keeps at most one open record per (student, day); the service never
    retries on its own because a retried toggle would flip the state twice.
    """

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    @staticmethod
    def _state_of(record: Optional[AttendanceRecord]) -> AttendanceState:
        if record is None:
            return AttendanceState.NOT_CHECKED_IN
        if record.is_open:
            return AttendanceState.CHECKED_IN
        return AttendanceState.CHECKED_OUT

    def get_status(self, student_id: int, *, now: datetime | None = None) -> AttendanceStatusView:
        today = (now or now_local()).date()
        latest = self._attendance.get_latest_for_student_and_date(student_id, today)
        state = self._state_of(latest)
        if latest is None:
            return AttendanceStatusView(status=state, date=today)
        return AttendanceStatusView(
            status=state,
            date=today,
            check_in_time=latest.check_in_time,
            check_out_time=latest.check_out_time,
            checked_in_by=latest.checked_in_by,
            checked_out_by=latest.checked_out_by,
        )

    def toggle(
        self,
        student_id: int,
        staff_id: int,
        device_id: Optional[int],
        *,
        now: datetime | None = None,
    ) -> ToggleResult:
        now = now or now_local()
        today = now.date()

        latest = self._attendance.get_latest_for_student_and_date(student_id, today)
        if self._state_of(latest) == AttendanceState.CHECKED_IN:
            closed = self._attendance.close_record(
                attendance_id=latest.attendance_id,
                check_out_time=now,
                checked_out_by=staff_id,
            )
            if not closed:
                raise ConflictError("attendance changed concurrently; re-read the status before retrying")
            record = replace(latest, check_out_time=now, checked_out_by=staff_id)
            return ToggleResult(action=ToggleAction.CHECKED_OUT, record=record)

        attendance_id = self._attendance.create_checkin(
            student_id=student_id,
            attendance_date=today,
            check_in_time=now,
            checked_in_by=staff_id,
            device_id=device_id,
        )
        record = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student_id,
            attendance_date=today,
            check_in_time=now,
            check_out_time=None,
            checked_in_by=staff_id,
            device_id=device_id,
        )
        return ToggleResult(action=ToggleAction.CHECKED_IN, record=record)

    def resolve_rfid(self, rfid: str) -> Student:
        rfid = require_non_empty(rfid, "rfid")
        student = self._students.get_by_rfid(rfid)
        if not student:
            raise NotFoundError("RFID tag not registered")
        return student

    def ensure_group_access(self, staff_id: int, student: Student, *, today: date) -> None:
        if student.group_id is None or not self._students.staff_has_group_access(
            staff_id=staff_id, group_id=student.group_id, on_day=today
        ):
            raise AuthorizationError("staff member has no access to this student's group")

    def get_status_by_rfid(self, rfid: str, *, now: datetime | None = None) -> tuple[Student, AttendanceStatusView]:
        now = now or now_local()
        student = self.resolve_rfid(rfid)
        return student, self.get_status(student.student_id, now=now)

    def toggle_by_rfid(
        self,
        rfid: str,
        *,
        staff_id: int,
        device_id: Optional[int],
        action: str,
        now: datetime | None = None,
    ) -> ToggleResult:
        """Device flow: identity and access checks, then the toggle itself.

        ``cancel`` is the device UI backing out of the confirmation dialog; it is
        acknowledged without touching any row.
        """
        now = now or now_local()
        device_action = require_enum(DeviceAction, action, "action")
        if device_action == DeviceAction.CANCEL:
            return ToggleResult(action=ToggleAction.CANCELLED, record=None)

        student = self.resolve_rfid(rfid)
        self.ensure_group_access(staff_id, student, today=now.date())
        result = self.toggle(student.student_id, staff_id, device_id, now=now)
        return replace(result, student=student)

    def list_for_date(self, day: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_date(day)
