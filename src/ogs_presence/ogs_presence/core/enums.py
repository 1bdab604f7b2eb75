from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff role used for authorization."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceState(str, Enum):
    """Derived daily attendance state of a student."""

    NOT_CHECKED_IN = "not_checked_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class ToggleAction(str, Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class DeviceAction(str, Enum):
    """Two-step confirmation sent by the RFID terminal."""

    CONFIRM = "confirm"
    CANCEL = "cancel"


class WorkStatus(str, Enum):
    PRESENT = "present"
    HOME_OFFICE = "home_office"


class AbsenceType(str, Enum):
    SICK = "sick"
    VACATION = "vacation"
    TRAINING = "training"
    OTHER = "other"


class AbsenceStatus(str, Enum):
    REPORTED = "reported"
    APPROVED = "approved"


class EditField(str, Enum):
    """Fields tracked by the work session edit log."""

    CHECK_IN_TIME = "check_in_time"
    CHECK_OUT_TIME = "check_out_time"
    BREAK_MINUTES = "break_minutes"
    BREAK_DURATION = "break_duration"
    STATUS = "status"
    NOTES = "notes"
    PLANNED_DURATION = "planned_duration_minutes"
