from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AbsenceStatus, AbsenceType


@dataclass(frozen=True)
class StaffAbsence:
    """A staff member's absence window, both ends inclusive."""

    absence_id: int
    staff_id: int
    absence_type: AbsenceType
    date_start: date
    date_end: date
    status: AbsenceStatus = AbsenceStatus.REPORTED
    note: str = ""
    created_by: Optional[int] = None

    @property
    def duration_days(self) -> int:
        return (self.date_end - self.date_start).days + 1

    def covers(self, day: date) -> bool:
        return self.date_start <= day <= self.date_end


@dataclass(frozen=True)
class AbsenceUpdate:
    """Partial update; None means "leave unchanged"."""

    absence_type: Optional[str] = None
    date_start: Optional[str] = None
    date_end: Optional[str] = None
    note: Optional[str] = None
