from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import parse_date_param
from ..common.validators import require_date_order, require_enum
from ..core.enums import AbsenceType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from .model import AbsenceUpdate, StaffAbsence
from .repository import AbsenceRepository


class AbsenceService:
    """Staff absences: one non-overlapping set of windows per staff member."""

    def __init__(self, absences: AbsenceRepository):
        self._absences = absences

    def _ensure_no_overlap(self, staff_id: int, start: date, end: date, *, exclude_id: Optional[int] = None) -> None:
        if self._absences.find_overlapping(staff_id, start, end, exclude_id=exclude_id):
            raise ConflictError("absence overlaps with an existing absence")

    def _get_owned(self, staff_id: int, absence_id: int) -> StaffAbsence:
        absence = self._absences.get_by_id(absence_id)
        if not absence:
            raise NotFoundError("absence not found")
        if absence.staff_id != staff_id:
            raise AuthorizationError("absence belongs to another staff member")
        return absence

    def create_absence(
        self,
        staff_id: int,
        absence_type: str,
        date_start: str,
        date_end: str,
        note: str = "",
    ) -> StaffAbsence:
        kind = require_enum(AbsenceType, absence_type, "absence_type")
        start = parse_date_param(date_start, "date_start")
        end = parse_date_param(date_end, "date_end")
        require_date_order(start, end)
        self._ensure_no_overlap(staff_id, start, end)

        note = (note or "").strip()
        absence_id = self._absences.create(
            staff_id=staff_id,
            absence_type=kind,
            date_start=start,
            date_end=end,
            note=note,
            created_by=staff_id,
        )
        return StaffAbsence(
            absence_id=absence_id,
            staff_id=staff_id,
            absence_type=kind,
            date_start=start,
            date_end=end,
            note=note,
            created_by=staff_id,
        )

    def update_absence(self, staff_id: int, absence_id: int, updates: AbsenceUpdate) -> StaffAbsence:
        absence = self._get_owned(staff_id, absence_id)

        kind = absence.absence_type
        if updates.absence_type is not None:
            kind = require_enum(AbsenceType, updates.absence_type, "absence_type")
        start = parse_date_param(updates.date_start, "date_start") if updates.date_start is not None else absence.date_start
        end = parse_date_param(updates.date_end, "date_end") if updates.date_end is not None else absence.date_end
        require_date_order(start, end)
        self._ensure_no_overlap(staff_id, start, end, exclude_id=absence_id)

        note = absence.note if updates.note is None else updates.note.strip()
        updated = replace(absence, absence_type=kind, date_start=start, date_end=end, note=note)
        self._absences.update(updated)
        return updated

    def delete_absence(self, staff_id: int, absence_id: int) -> None:
        self._get_owned(staff_id, absence_id)
        self._absences.delete(absence_id)

    def get_absences_for_range(self, staff_id: int, date_from: date, date_to: date) -> Sequence[StaffAbsence]:
        require_date_order(date_from, date_to, "from must not be after to")
        return self._absences.list_for_range(staff_id, date_from, date_to)

    def has_absence_on_date(self, staff_id: int, day: date) -> bool:
        return bool(self._absences.find_overlapping(staff_id, day, day))
