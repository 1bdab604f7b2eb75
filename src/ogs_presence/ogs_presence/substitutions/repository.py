from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import GroupSubstitution, SubstitutionInput


class SubstitutionRepository(Protocol):
    def get_by_id(self, substitution_id: int) -> Optional[GroupSubstitution]:
        raise NotImplementedError

    def find_overlapping_by_substitute(
        self, staff_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        raise NotImplementedError

    def find_overlapping_by_group(
        self, group_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        raise NotImplementedError

    def find_active(self, day: date) -> Sequence[GroupSubstitution]:
        raise NotImplementedError

    def list_page(self, *, offset: int, limit: int) -> tuple[Sequence[GroupSubstitution], int]:
        """One page ordered by start_date desc, plus the total count."""

        raise NotImplementedError

    def create(self, data: SubstitutionInput) -> int:
        raise NotImplementedError

    def update(self, substitution_id: int, data: SubstitutionInput) -> bool:
        raise NotImplementedError

    def delete(self, substitution_id: int) -> bool:
        raise NotImplementedError
