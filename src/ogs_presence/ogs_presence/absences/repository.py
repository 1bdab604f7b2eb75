from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AbsenceType
from .model import StaffAbsence


class AbsenceRepository(Protocol):
    def get_by_id(self, absence_id: int) -> Optional[StaffAbsence]:
        raise NotImplementedError

    def find_overlapping(
        self, staff_id: int, date_start: date, date_end: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[StaffAbsence]:
        """Absences of the staff member sharing at least one day with the window."""

        raise NotImplementedError

    def list_for_range(self, staff_id: int, date_from: date, date_to: date) -> Sequence[StaffAbsence]:
        raise NotImplementedError

    def create(
        self,
        *,
        staff_id: int,
        absence_type: AbsenceType,
        date_start: date,
        date_end: date,
        note: str,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, absence: StaffAbsence) -> bool:
        raise NotImplementedError

    def delete(self, absence_id: int) -> bool:
        raise NotImplementedError
