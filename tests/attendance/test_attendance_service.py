from __future__ import annotations

from datetime import date, datetime

import pytest

from src.ogs_presence.ogs_presence.core.enums import AttendanceState, ToggleAction
from src.ogs_presence.ogs_presence.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

STAFF_ID = 2
MIA = 100


def test_status_without_record_is_not_checked_in(attendance_service):
    view = attendance_service.get_status(MIA, now=datetime(2026, 2, 2, 8, 0))

    assert view.status == AttendanceState.NOT_CHECKED_IN
    assert view.date == date(2026, 2, 2)
    assert view.check_in_time is None


def test_toggle_round_trip_creates_new_record_on_third_call(attendance_service, attendance_repo):
    day = date(2026, 2, 2)

    first = attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 8, 0))
    assert first.action == ToggleAction.CHECKED_IN
    assert attendance_service.get_status(MIA, now=datetime(2026, 2, 2, 8, 1)).status == AttendanceState.CHECKED_IN

    second = attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 12, 0))
    assert second.action == ToggleAction.CHECKED_OUT
    assert second.record.attendance_id == first.record.attendance_id
    assert second.record.checked_out_by == STAFF_ID
    assert attendance_service.get_status(MIA, now=datetime(2026, 2, 2, 12, 1)).status == AttendanceState.CHECKED_OUT

    third = attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 14, 0))
    assert third.action == ToggleAction.CHECKED_IN
    assert third.record.attendance_id != first.record.attendance_id
    assert len(attendance_repo.list_for_date(day)) == 2
    assert attendance_repo.open_count(MIA, day) == 1


def test_status_reports_latest_record_of_the_day(attendance_service):
    attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 8, 0))
    attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 12, 0))
    attendance_service.toggle(MIA, 1, 7, now=datetime(2026, 2, 2, 14, 0))

    view = attendance_service.get_status(MIA, now=datetime(2026, 2, 2, 15, 0))
    assert view.status == AttendanceState.CHECKED_IN
    assert view.check_in_time == datetime(2026, 2, 2, 14, 0)
    assert view.checked_in_by == 1
    assert view.check_out_time is None


def test_yesterdays_open_record_does_not_count_for_today(attendance_service, attendance_repo):
    attendance_repo.add(
        student_id=MIA,
        attendance_date=date(2026, 2, 1),
        check_in_time=datetime(2026, 2, 1, 8, 0),
        check_out_time=None,
        checked_in_by=STAFF_ID,
    )

    view = attendance_service.get_status(MIA, now=datetime(2026, 2, 2, 8, 0))
    assert view.status == AttendanceState.NOT_CHECKED_IN


def test_lost_close_race_is_a_conflict(attendance_service, attendance_repo):
    attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 8, 0))
    attendance_repo.close_record = lambda **kwargs: False

    with pytest.raises(ConflictError):
        attendance_service.toggle(MIA, STAFF_ID, 7, now=datetime(2026, 2, 2, 9, 0))


def test_concurrent_double_check_in_is_rejected_by_store(attendance_repo):
    day = date(2026, 2, 2)
    kwargs = dict(student_id=MIA, attendance_date=day, checked_in_by=STAFF_ID, device_id=None)
    attendance_repo.create_checkin(check_in_time=datetime(2026, 2, 2, 8, 0), **kwargs)

    with pytest.raises(ConflictError):
        attendance_repo.create_checkin(check_in_time=datetime(2026, 2, 2, 8, 0), **kwargs)
    assert attendance_repo.open_count(MIA, day) == 1


def test_toggle_by_rfid_confirm(attendance_service):
    result = attendance_service.toggle_by_rfid(
        "RFID-MIA", staff_id=STAFF_ID, device_id=7, action="confirm", now=datetime(2026, 2, 2, 8, 0)
    )

    assert result.action == ToggleAction.CHECKED_IN
    assert result.student.full_name == "Mia Schulz"
    assert result.record.device_id == 7


def test_cancel_never_mutates(attendance_service, attendance_repo):
    result = attendance_service.toggle_by_rfid(
        "RFID-MIA", staff_id=STAFF_ID, device_id=7, action="cancel", now=datetime(2026, 2, 2, 8, 0)
    )

    assert result.action == ToggleAction.CANCELLED
    assert result.record is None
    assert attendance_repo.records == {}


def test_cancel_succeeds_even_for_unknown_tag(attendance_service):
    result = attendance_service.toggle_by_rfid(
        "UNKNOWN", staff_id=99, device_id=None, action="cancel", now=datetime(2026, 2, 2, 8, 0)
    )
    assert result.action == ToggleAction.CANCELLED


def test_unknown_action_is_invalid(attendance_service):
    with pytest.raises(ValidationError):
        attendance_service.toggle_by_rfid(
            "RFID-MIA", staff_id=STAFF_ID, device_id=7, action="toggle", now=datetime(2026, 2, 2, 8, 0)
        )


def test_unregistered_rfid_is_not_found(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.get_status_by_rfid("NOPE", now=datetime(2026, 2, 2, 8, 0))


def test_toggle_without_group_access_is_forbidden(attendance_service, attendance_repo):
    # Ben is in a group the staff member neither supervises nor substitutes for.
    with pytest.raises(AuthorizationError):
        attendance_service.toggle_by_rfid(
            "RFID-BEN", staff_id=STAFF_ID, device_id=7, action="confirm", now=datetime(2026, 2, 2, 8, 0)
        )
    assert attendance_repo.records == {}
