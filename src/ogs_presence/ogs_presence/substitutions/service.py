from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_date_order
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import GroupSubstitution, SubstitutionInput
from .repository import SubstitutionRepository


class SubstitutionService:
    """Substitution CRUD with double-booking checks.

    A substitute holds at most one substitution at a time, and a group has at
    most one substitution at a time. Overlap is inclusive on both ends.
    """

    def __init__(self, substitutions: SubstitutionRepository):
        self._substitutions = substitutions

    @staticmethod
    def _require_admin(current_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("only admins may manage substitutions")

    def check_conflicts(
        self, staff_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        return self._substitutions.find_overlapping_by_substitute(staff_id, start_date, end_date, exclude_id=exclude_id)

    def check_group_conflicts(
        self, group_id: int, start_date: date, end_date: date, *, exclude_id: Optional[int] = None
    ) -> Sequence[GroupSubstitution]:
        return self._substitutions.find_overlapping_by_group(group_id, start_date, end_date, exclude_id=exclude_id)

    def _validate(self, data: SubstitutionInput, *, today: date, exclude_id: Optional[int] = None) -> None:
        if not data.group_id or data.group_id <= 0:
            raise ValidationError("group_id is required")
        if not data.substitute_staff_id or data.substitute_staff_id <= 0:
            raise ValidationError("substitute_staff_id is required")
        if data.regular_staff_id is not None and data.regular_staff_id == data.substitute_staff_id:
            raise ValidationError("substitute must differ from the regular staff member")
        require_date_order(data.start_date, data.end_date)
        if data.start_date < today:
            raise ValidationError("start date must not be in the past")

        if self.check_conflicts(data.substitute_staff_id, data.start_date, data.end_date, exclude_id=exclude_id):
            raise ConflictError("staff member already has a substitution in this period")
        if self.check_group_conflicts(data.group_id, data.start_date, data.end_date, exclude_id=exclude_id):
            raise ConflictError("group already has a substitution in this period")

    def create_substitution(
        self,
        data: SubstitutionInput,
        *,
        current_role: Role,
        now: datetime | None = None,
    ) -> GroupSubstitution:
        self._require_admin(current_role)
        today = (now or now_local()).date()
        data = SubstitutionInput(
            group_id=data.group_id,
            regular_staff_id=data.regular_staff_id,
            substitute_staff_id=data.substitute_staff_id,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=(data.reason or "").strip(),
        )
        self._validate(data, today=today)
        substitution_id = self._substitutions.create(data)
        return GroupSubstitution(substitution_id=substitution_id, **asdict(data))

    def update_substitution(
        self,
        substitution_id: int,
        data: SubstitutionInput,
        *,
        current_role: Role,
        now: datetime | None = None,
    ) -> GroupSubstitution:
        self._require_admin(current_role)
        today = (now or now_local()).date()
        self.get_substitution(substitution_id)
        self._validate(data, today=today, exclude_id=substitution_id)
        self._substitutions.update(substitution_id, data)
        return GroupSubstitution(substitution_id=substitution_id, **asdict(data))

    def get_substitution(self, substitution_id: int) -> GroupSubstitution:
        sub = self._substitutions.get_by_id(substitution_id)
        if not sub:
            raise NotFoundError("substitution not found")
        return sub

    def list_substitutions(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> tuple[Sequence[GroupSubstitution], int]:
        page = max(int(page or 1), 1)
        page_size = min(max(int(page_size or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
        return self._substitutions.list_page(offset=(page - 1) * page_size, limit=page_size)

    def get_active_substitutions(self, day: date) -> Sequence[GroupSubstitution]:
        return self._substitutions.find_active(day)

    def delete_substitution(self, substitution_id: int, *, current_role: Role) -> None:
        self._require_admin(current_role)
        self.get_substitution(substitution_id)
        self._substitutions.delete(substitution_id)
