from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import WorkStatus
from .model import WorkSession, WorkSessionBreak, WorkSessionEdit


class WorkSessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def get_current_by_staff(self, staff_id: int) -> Optional[WorkSession]:
        """The open session of a staff member, whatever its date."""

        raise NotImplementedError

    def get_by_staff_and_date(self, staff_id: int, work_date: date) -> Optional[WorkSession]:
        raise NotImplementedError

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: WorkStatus,
        check_in_time: datetime,
        created_by: int,
    ) -> int:
        """Insert an open session. Raises ConflictError if the staff member already has one."""

        raise NotImplementedError

    def close_session(self, *, session_id: int, check_out_time: datetime, auto_checked_out: bool) -> bool:
        """Close only if still open; False when another writer closed it first."""

        raise NotImplementedError

    def update(self, session: WorkSession) -> bool:
        raise NotImplementedError

    def update_break_minutes(self, session_id: int, break_minutes: int) -> bool:
        raise NotImplementedError

    def get_history(self, staff_id: int, date_from: date, date_to: date) -> Sequence[WorkSession]:
        raise NotImplementedError

    def list_open_before(self, before_date: date) -> Sequence[WorkSession]:
        raise NotImplementedError

    def get_presence_map(self, work_date: date) -> Dict[int, str]:
        """staff_id -> status for sessions of that day that are still open."""

        raise NotImplementedError


class WorkSessionBreakRepository(Protocol):
    def get_active_by_session(self, session_id: int) -> Optional[WorkSessionBreak]:
        raise NotImplementedError

    def get_by_session(self, session_id: int) -> Sequence[WorkSessionBreak]:
        raise NotImplementedError

    def create(self, *, session_id: int, start_time: datetime, planned_duration_minutes: Optional[int]) -> int:
        """Insert an open break. Raises ConflictError if the session already has one."""

        raise NotImplementedError

    def end_break(self, *, break_id: int, end_time: datetime, duration_minutes: int) -> bool:
        raise NotImplementedError

    def update_duration(self, *, break_id: int, duration_minutes: int, end_time: datetime) -> bool:
        raise NotImplementedError


class WorkSessionEditRepository(Protocol):
    def create_batch(self, edits: Sequence[WorkSessionEdit]) -> None:
        raise NotImplementedError

    def get_by_session(self, session_id: int) -> Sequence[WorkSessionEdit]:
        raise NotImplementedError

    def count_by_sessions(self, session_ids: Sequence[int]) -> Dict[int, int]:
        raise NotImplementedError


class SupervisionRepository(Protocol):
    """Active group supervisions, ended when the supervisor checks out."""

    def end_all_active_by_staff(self, staff_id: int) -> int:
        raise NotImplementedError
