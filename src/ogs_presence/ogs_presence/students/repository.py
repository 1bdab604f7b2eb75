from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Student


class StudentRepository(Protocol):
    """Identity lookups for RFID scans plus the group-access rule used before toggling."""

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_rfid(self, rfid_tag: str) -> Optional[Student]:
        raise NotImplementedError

    def staff_has_group_access(self, *, staff_id: int, group_id: int, on_day: date) -> bool:
        """True if the staff member supervises the group or substitutes for it on that day."""

        raise NotImplementedError
