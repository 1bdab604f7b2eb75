from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import WorkStatus


@dataclass(frozen=True)
class WorkSession:
    """Domain entity: one staff attendance session."""

    session_id: int
    staff_id: int
    work_date: date
    status: WorkStatus
    check_in_time: datetime
    check_out_time: Optional[datetime]
    break_minutes: int = 0
    planned_duration_minutes: Optional[int] = None
    notes: str = ""
    auto_checked_out: bool = False
    created_by: Optional[int] = None
    updated_by: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.check_out_time is None


@dataclass(frozen=True)
class WorkSessionBreak:
    break_id: int
    session_id: int
    start_time: datetime
    end_time: Optional[datetime]
    duration_minutes: int = 0
    planned_duration_minutes: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class WorkSessionEdit:
    """Edit-log entry: one changed field of a session."""

    session_id: int
    staff_id: int
    edited_by: int
    field_name: str
    old_value: Optional[str]
    new_value: Optional[str]
    created_at: datetime
    notes: Optional[str] = None
    edit_id: Optional[int] = None


@dataclass(frozen=True)
class BreakDurationUpdate:
    break_id: int
    duration_minutes: int


@dataclass(frozen=True)
class SessionUpdate:
    """Partial update; None means "leave unchanged"."""

    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    break_minutes: Optional[int] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    planned_duration_minutes: Optional[int] = None
    breaks: tuple[BreakDurationUpdate, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionResponse:
    """Session wrapped with calculated fields for history views."""

    session: WorkSession
    net_minutes: int
    is_overtime: bool
    is_break_compliant: bool
    breaks: list[WorkSessionBreak]
    edit_count: int = 0
