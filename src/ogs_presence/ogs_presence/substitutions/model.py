from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class GroupSubstitution:
    """Temporary supervision of a group by a substitute, both dates inclusive."""

    substitution_id: int
    group_id: int
    regular_staff_id: Optional[int]
    substitute_staff_id: int
    start_date: date
    end_date: date
    reason: str = ""

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def is_active_on(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class SubstitutionInput:
    group_id: int
    regular_staff_id: Optional[int]
    substitute_staff_id: int
    start_date: date
    end_date: date
    reason: str = ""
