from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.ogs_presence.ogs_presence.absences.model import StaffAbsence
from src.ogs_presence.ogs_presence.absences.service import AbsenceService
from src.ogs_presence.ogs_presence.attendance.model import AttendanceRecord
from src.ogs_presence.ogs_presence.attendance.service import AttendanceService
from src.ogs_presence.ogs_presence.cleanup.service import StaleSessionReconciler
from src.ogs_presence.ogs_presence.container import Container
from src.ogs_presence.ogs_presence.core.enums import AbsenceStatus, Role
from src.ogs_presence.ogs_presence.core.exceptions import ConflictError
from src.ogs_presence.ogs_presence.staff.device_model import Device
from src.ogs_presence.ogs_presence.staff.model import Staff
from src.ogs_presence.ogs_presence.staff.service import AuthService, DeviceAuthService, hash_api_key
from src.ogs_presence.ogs_presence.students.model import Student
from src.ogs_presence.ogs_presence.substitutions.model import GroupSubstitution
from src.ogs_presence.ogs_presence.substitutions.service import SubstitutionService
from src.ogs_presence.ogs_presence.time_tracking.model import WorkSession, WorkSessionBreak
from src.ogs_presence.ogs_presence.time_tracking.service import WorkSessionService

FAST_HASH = "pbkdf2:sha256:1000"

DEVICE_KEY = "terminal-key-1"
ADMIN_ID = 1
STAFF_ID = 2
OTHER_STAFF_ID = 3
GROUP_ID = 10


# -- in-memory repositories ----------------------------------------------------
# Open-row uniqueness is enforced the same way the MySQL unique keys do it:
# a second open row raises ConflictError.


class InMemoryAttendance:
    def __init__(self):
        self.records: Dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def get_latest_for_student_and_date(self, student_id: int, attendance_date: date):
        items = [r for r in self.records.values() if r.student_id == student_id and r.attendance_date == attendance_date]
        items.sort(key=lambda r: r.check_in_time, reverse=True)
        return items[0] if items else None

    def create_checkin(self, *, student_id, attendance_date, check_in_time, checked_in_by, device_id) -> int:
        if any(r.is_open for r in self.records.values() if r.student_id == student_id and r.attendance_date == attendance_date):
            raise ConflictError("already checked in")
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            student_id=student_id,
            attendance_date=attendance_date,
            check_in_time=check_in_time,
            check_out_time=None,
            checked_in_by=checked_in_by,
            device_id=device_id,
        )
        return self._id

    def add(self, **kwargs) -> AttendanceRecord:
        """Insert a row directly, bypassing the open-row check (seeds stale or corrupted data)."""
        self._id += 1
        rec = AttendanceRecord(attendance_id=self._id, **kwargs)
        self.records[self._id] = rec
        return rec

    def close_record(self, *, attendance_id, check_out_time, checked_out_by) -> bool:
        rec = self.records.get(attendance_id)
        if not rec or not rec.is_open:
            return False
        assert check_out_time >= rec.check_in_time
        self.records[attendance_id] = replace(rec, check_out_time=check_out_time, checked_out_by=checked_out_by)
        return True

    def list_for_date(self, attendance_date: date):
        return sorted(
            (r for r in self.records.values() if r.attendance_date == attendance_date),
            key=lambda r: r.check_in_time,
        )

    def list_open_before(self, before_date: date):
        return [r for r in self.records.values() if r.is_open and r.attendance_date < before_date]

    def open_count(self, student_id: int, day: date) -> int:
        return sum(1 for r in self.records.values() if r.student_id == student_id and r.attendance_date == day and r.is_open)


class InMemoryStudents:
    def __init__(self, students: list[Student], access: set[tuple[int, int]]):
        self._students = {s.student_id: s for s in students}
        self._access = access

    def get_by_id(self, student_id: int):
        return self._students.get(student_id)

    def get_by_rfid(self, rfid_tag: str):
        return next((s for s in self._students.values() if s.rfid_tag == rfid_tag), None)

    def staff_has_group_access(self, *, staff_id: int, group_id: int, on_day: date) -> bool:
        return (staff_id, group_id) in self._access


class InMemoryWorkSessions:
    def __init__(self):
        self.sessions: Dict[int, WorkSession] = {}
        self._id = 0

    def _open_for(self, staff_id: int, *, exclude: Optional[int] = None):
        return [s for s in self.sessions.values() if s.staff_id == staff_id and s.is_active and s.session_id != exclude]

    def get_by_id(self, session_id: int):
        return self.sessions.get(session_id)

    def get_current_by_staff(self, staff_id: int):
        items = self._open_for(staff_id)
        return items[0] if items else None

    def get_by_staff_and_date(self, staff_id: int, work_date: date):
        items = [s for s in self.sessions.values() if s.staff_id == staff_id and s.work_date == work_date]
        items.sort(key=lambda s: s.check_in_time, reverse=True)
        return items[0] if items else None

    def create(self, *, staff_id, work_date, status, check_in_time, created_by) -> int:
        if self._open_for(staff_id):
            raise ConflictError("already checked in")
        self._id += 1
        self.sessions[self._id] = WorkSession(
            session_id=self._id,
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            check_in_time=check_in_time,
            check_out_time=None,
            created_by=created_by,
        )
        return self._id

    def add(self, **kwargs) -> WorkSession:
        self._id += 1
        s = WorkSession(session_id=self._id, **kwargs)
        self.sessions[self._id] = s
        return s

    def close_session(self, *, session_id, check_out_time, auto_checked_out) -> bool:
        s = self.sessions.get(session_id)
        if not s or not s.is_active:
            return False
        assert check_out_time >= s.check_in_time
        self.sessions[session_id] = replace(s, check_out_time=check_out_time, auto_checked_out=auto_checked_out)
        return True

    def update(self, session: WorkSession) -> bool:
        if session.is_active and self._open_for(session.staff_id, exclude=session.session_id):
            raise ConflictError("another session is already open")
        self.sessions[session.session_id] = session
        return True

    def update_break_minutes(self, session_id: int, break_minutes: int) -> bool:
        self.sessions[session_id] = replace(self.sessions[session_id], break_minutes=break_minutes)
        return True

    def get_history(self, staff_id: int, date_from: date, date_to: date):
        items = [s for s in self.sessions.values() if s.staff_id == staff_id and date_from <= s.work_date <= date_to]
        items.sort(key=lambda s: (s.work_date, s.check_in_time), reverse=True)
        return items

    def list_open_before(self, before_date: date):
        return [s for s in self.sessions.values() if s.is_active and s.work_date < before_date]

    def get_presence_map(self, work_date: date):
        return {s.staff_id: s.status.value for s in self.sessions.values() if s.is_active and s.work_date == work_date}


class InMemoryBreaks:
    def __init__(self):
        self.breaks: Dict[int, WorkSessionBreak] = {}
        self._id = 0

    def get_active_by_session(self, session_id: int):
        return next((b for b in self.breaks.values() if b.session_id == session_id and b.is_active), None)

    def get_by_session(self, session_id: int):
        return sorted((b for b in self.breaks.values() if b.session_id == session_id), key=lambda b: b.start_time)

    def create(self, *, session_id, start_time, planned_duration_minutes) -> int:
        if self.get_active_by_session(session_id):
            raise ConflictError("break already active")
        self._id += 1
        self.breaks[self._id] = WorkSessionBreak(
            break_id=self._id,
            session_id=session_id,
            start_time=start_time,
            end_time=None,
            planned_duration_minutes=planned_duration_minutes,
        )
        return self._id

    def end_break(self, *, break_id, end_time, duration_minutes) -> bool:
        b = self.breaks.get(break_id)
        if not b or not b.is_active:
            return False
        self.breaks[break_id] = replace(b, end_time=end_time, duration_minutes=duration_minutes)
        return True

    def update_duration(self, *, break_id, duration_minutes, end_time) -> bool:
        b = self.breaks[break_id]
        self.breaks[break_id] = replace(b, end_time=end_time, duration_minutes=duration_minutes)
        return True


class InMemoryEdits:
    def __init__(self):
        self.edits = []

    def create_batch(self, edits) -> None:
        for e in edits:
            self.edits.append(replace(e, edit_id=len(self.edits) + 1))

    def get_by_session(self, session_id: int):
        return [e for e in reversed(self.edits) if e.session_id == session_id]

    def count_by_sessions(self, session_ids):
        counts: Dict[int, int] = {}
        for e in self.edits:
            if e.session_id in session_ids:
                counts[e.session_id] = counts.get(e.session_id, 0) + 1
        return counts


class InMemorySupervisions:
    def __init__(self, active: int = 0, fail: bool = False):
        self.active = active
        self.fail = fail
        self.calls: list[int] = []

    def end_all_active_by_staff(self, staff_id: int) -> int:
        self.calls.append(staff_id)
        if self.fail:
            raise RuntimeError("supervision store unavailable")
        ended, self.active = self.active, 0
        return ended


class InMemoryAbsences:
    def __init__(self):
        self.absences: Dict[int, StaffAbsence] = {}
        self._id = 0

    def get_by_id(self, absence_id: int):
        return self.absences.get(absence_id)

    def find_overlapping(self, staff_id, date_start, date_end, *, exclude_id=None):
        return [
            a
            for a in self.absences.values()
            if a.staff_id == staff_id and a.date_start <= date_end and a.date_end >= date_start and a.absence_id != exclude_id
        ]

    def list_for_range(self, staff_id, date_from, date_to):
        return sorted(self.find_overlapping(staff_id, date_from, date_to), key=lambda a: a.date_start)

    def create(self, *, staff_id, absence_type, date_start, date_end, note, created_by) -> int:
        self._id += 1
        self.absences[self._id] = StaffAbsence(
            absence_id=self._id,
            staff_id=staff_id,
            absence_type=absence_type,
            date_start=date_start,
            date_end=date_end,
            status=AbsenceStatus.REPORTED,
            note=note,
            created_by=created_by,
        )
        return self._id

    def update(self, absence: StaffAbsence) -> bool:
        self.absences[absence.absence_id] = absence
        return True

    def delete(self, absence_id: int) -> bool:
        return self.absences.pop(absence_id, None) is not None


class InMemorySubstitutions:
    def __init__(self):
        self.items: Dict[int, GroupSubstitution] = {}
        self._id = 0

    def get_by_id(self, substitution_id: int):
        return self.items.get(substitution_id)

    def _overlapping(self, pred, start_date, end_date, exclude_id):
        return [
            s
            for s in self.items.values()
            if pred(s) and s.start_date <= end_date and s.end_date >= start_date and s.substitution_id != exclude_id
        ]

    def find_overlapping_by_substitute(self, staff_id, start_date, end_date, *, exclude_id=None):
        return self._overlapping(lambda s: s.substitute_staff_id == staff_id, start_date, end_date, exclude_id)

    def find_overlapping_by_group(self, group_id, start_date, end_date, *, exclude_id=None):
        return self._overlapping(lambda s: s.group_id == group_id, start_date, end_date, exclude_id)

    def find_active(self, day: date):
        return [s for s in self.items.values() if s.is_active_on(day)]

    def list_page(self, *, offset: int, limit: int):
        items = sorted(self.items.values(), key=lambda s: (s.start_date, s.substitution_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def add(self, **kwargs) -> GroupSubstitution:
        self._id += 1
        s = GroupSubstitution(substitution_id=self._id, **kwargs)
        self.items[self._id] = s
        return s

    def create(self, data) -> int:
        return self.add(
            group_id=data.group_id,
            regular_staff_id=data.regular_staff_id,
            substitute_staff_id=data.substitute_staff_id,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
        ).substitution_id

    def update(self, substitution_id, data) -> bool:
        self.items[substitution_id] = GroupSubstitution(
            substitution_id=substitution_id,
            group_id=data.group_id,
            regular_staff_id=data.regular_staff_id,
            substitute_staff_id=data.substitute_staff_id,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
        )
        return True

    def delete(self, substitution_id) -> bool:
        return self.items.pop(substitution_id, None) is not None


class InMemoryStaff:
    def __init__(self, members: list[Staff]):
        self._members = {m.staff_id: m for m in members}

    def get_by_id(self, staff_id: int):
        return self._members.get(staff_id)

    def get_by_username(self, username: str):
        return next((m for m in self._members.values() if m.username == username), None)


class InMemoryDevices:
    def __init__(self, devices: list[Device]):
        self._devices = devices

    def get_by_api_key_hash(self, api_key_hash: str):
        return next((d for d in self._devices if d.api_key_hash == api_key_hash), None)


# -- fixtures ------------------------------------------------------------------


@pytest.fixture
def staff_repo() -> InMemoryStaff:
    def member(staff_id, username, password, pin, role):
        return Staff(
            staff_id=staff_id,
            full_name=username.title(),
            username=username,
            password_hash=generate_password_hash(password, method=FAST_HASH),
            role=role,
            pin_hash=generate_password_hash(pin, method=FAST_HASH),
        )

    return InMemoryStaff(
        [
            member(ADMIN_ID, "admin", "admin123", "1234", Role.ADMIN),
            member(STAFF_ID, "erzieherin", "staff123", "0000", Role.STAFF),
            member(OTHER_STAFF_ID, "kollege", "staff456", "5555", Role.STAFF),
        ]
    )


@pytest.fixture
def device_repo() -> InMemoryDevices:
    return InMemoryDevices(
        [
            Device(device_id=7, device_name="Eingang", api_key_hash=hash_api_key(DEVICE_KEY), is_active=True),
            Device(device_id=8, device_name="Alt", api_key_hash=hash_api_key("retired-key"), is_active=False),
        ]
    )


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents(
        [
            Student(student_id=100, first_name="Mia", last_name="Schulz", group_id=GROUP_ID, rfid_tag="RFID-MIA"),
            Student(student_id=101, first_name="Ben", last_name="Wolf", group_id=GROUP_ID + 1, rfid_tag="RFID-BEN"),
        ],
        access={(STAFF_ID, GROUP_ID), (ADMIN_ID, GROUP_ID)},
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def sessions_repo() -> InMemoryWorkSessions:
    return InMemoryWorkSessions()


@pytest.fixture
def breaks_repo() -> InMemoryBreaks:
    return InMemoryBreaks()


@pytest.fixture
def edits_repo() -> InMemoryEdits:
    return InMemoryEdits()


@pytest.fixture
def supervisions_repo() -> InMemorySupervisions:
    return InMemorySupervisions()


@pytest.fixture
def absences_repo() -> InMemoryAbsences:
    return InMemoryAbsences()


@pytest.fixture
def substitutions_repo() -> InMemorySubstitutions:
    return InMemorySubstitutions()


@pytest.fixture
def attendance_service(attendance_repo, students_repo) -> AttendanceService:
    return AttendanceService(attendance_repo, students_repo)


@pytest.fixture
def reconciler(attendance_repo, sessions_repo, breaks_repo) -> StaleSessionReconciler:
    return StaleSessionReconciler(
        attendance_repo,
        sessions_repo,
        breaks_repo,
        clock=lambda: datetime(2026, 3, 1, 2, 0, 5),
    )


@pytest.fixture
def work_sessions(sessions_repo, breaks_repo, edits_repo, absences_repo, supervisions_repo, reconciler) -> WorkSessionService:
    return WorkSessionService(
        sessions_repo,
        breaks_repo,
        edits_repo,
        absences=absences_repo,
        supervisions=supervisions_repo,
        reconciler=reconciler,
    )


@pytest.fixture
def absence_service(absences_repo) -> AbsenceService:
    return AbsenceService(absences_repo)


@pytest.fixture
def substitution_service(substitutions_repo) -> SubstitutionService:
    return SubstitutionService(substitutions_repo)


@pytest.fixture
def container(
    staff_repo,
    device_repo,
    attendance_service,
    work_sessions,
    reconciler,
    absence_service,
    substitution_service,
) -> Container:
    return Container(
        auth_service=AuthService(staff_repo),
        device_auth_service=DeviceAuthService(device_repo, staff_repo),
        attendance_service=attendance_service,
        work_session_service=work_sessions,
        reconciler=reconciler,
        absence_service=absence_service,
        substitution_service=substitution_service,
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.ogs_presence.ogs_presence.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username: str, password: str):
    return client.post("/auth/login", json={"username": username, "password": password})


@pytest.fixture
def staff_client(client):
    assert login(client, "erzieherin", "staff123").status_code == 200
    return client


@pytest.fixture
def admin_client(client):
    assert login(client, "admin", "admin123").status_code == 200
    return client


@pytest.fixture
def device_headers() -> dict:
    return {"X-Device-Key": DEVICE_KEY, "X-Staff-ID": str(STAFF_ID), "X-Staff-PIN": "0000"}
