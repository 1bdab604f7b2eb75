from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import minutes_between, now_local
from ..time_tracking.model import WorkSession
from ..time_tracking.repository import WorkSessionBreakRepository, WorkSessionRepository
from .factory import CloseStrategyFactory
from .model import CleanupPreview, CleanupResult

logger = logging.getLogger(__name__)


class StaleSessionReconciler:
    """Closes attendance rows and work sessions still open after their day ended.

    Only rows dated before today are touched. Each row is closed with its own
    conditional update, so a row that someone else closed in the meantime is
    skipped and a second run over the same data closes nothing.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: WorkSessionRepository,
        breaks: WorkSessionBreakRepository,
        *,
        strategy_factory: CloseStrategyFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._breaks = breaks
        self._factory = strategy_factory or CloseStrategyFactory()
        self._clock = clock or now_local

    def _completed_at(self, started_at: datetime) -> datetime:
        return max(started_at, self._clock())

    def _close_time_for(self, record: AttendanceRecord) -> datetime:
        strategy = self._factory.for_record(day=record.attendance_date, check_in_time=record.check_in_time)
        return strategy.decide(day=record.attendance_date, check_in_time=record.check_in_time).check_out_time

    def cleanup_stale_attendance(self, *, now: datetime | None = None) -> CleanupResult:
        now = now or self._clock()
        today = now.date()

        closed = 0
        students: set[int] = set()
        errors: list[str] = []
        for record in self._attendance.list_open_before(today):
            try:
                ok = self._attendance.close_record(
                    attendance_id=record.attendance_id,
                    check_out_time=self._close_time_for(record),
                    checked_out_by=None,
                )
            except Exception as exc:
                logger.error("failed to close stale attendance record %s", record.attendance_id, exc_info=True)
                errors.append(f"attendance {record.attendance_id}: {exc}")
                continue
            if not ok:
                logger.info("attendance record %s was closed concurrently, skipped", record.attendance_id)
                continue
            closed += 1
            students.add(record.student_id)

        result = CleanupResult(
            started_at=now,
            completed_at=self._completed_at(now),
            records_closed=closed,
            actors_affected=len(students),
            errors=tuple(errors),
        )
        logger.info(
            "attendance cleanup: closed=%s students=%s errors=%s",
            result.records_closed,
            result.actors_affected,
            len(result.errors),
        )
        return result

    def close_stale_session(self, session: WorkSession) -> bool:
        """Close one stale work session and its open break. False if already closed.

        The break is ended and the session's break minutes are stored before the
        session itself is closed, so a failure part-way leaves the session open
        and the next run picks it up again.
        """
        strategy = self._factory.for_record(day=session.work_date, check_in_time=session.check_in_time)
        check_out = strategy.decide(day=session.work_date, check_in_time=session.check_in_time).check_out_time

        active = self._breaks.get_active_by_session(session.session_id)
        if active:
            # Never end a break before it started.
            end = max(check_out, active.start_time)
            self._breaks.end_break(
                break_id=active.break_id,
                end_time=end,
                duration_minutes=minutes_between(active.start_time, end),
            )
            total = sum(b.duration_minutes for b in self._breaks.get_by_session(session.session_id))
            self._sessions.update_break_minutes(session.session_id, total)

        return self._sessions.close_session(
            session_id=session.session_id,
            check_out_time=check_out,
            auto_checked_out=True,
        )

    def cleanup_stale_work_sessions(self, *, now: datetime | None = None) -> CleanupResult:
        now = now or self._clock()
        today = now.date()

        closed = 0
        staff: set[int] = set()
        errors: list[str] = []
        for session in self._sessions.list_open_before(today):
            try:
                ok = self.close_stale_session(session)
            except Exception as exc:
                logger.error("failed to close stale work session %s", session.session_id, exc_info=True)
                errors.append(f"work session {session.session_id}: {exc}")
                continue
            if not ok:
                logger.info("work session %s was closed concurrently, skipped", session.session_id)
                continue
            closed += 1
            staff.add(session.staff_id)

        result = CleanupResult(
            started_at=now,
            completed_at=self._completed_at(now),
            records_closed=closed,
            actors_affected=len(staff),
            errors=tuple(errors),
        )
        logger.info(
            "work session cleanup: closed=%s staff=%s errors=%s",
            result.records_closed,
            result.actors_affected,
            len(result.errors),
        )
        return result

    def preview_attendance_cleanup(self, *, now: datetime | None = None) -> CleanupPreview:
        now = now or self._clock()
        records = self._attendance.list_open_before(now.date())

        by_date = Counter(r.attendance_date for r in records)
        by_student = Counter(r.student_id for r in records)
        oldest: Optional[date] = min(by_date) if by_date else None
        return CleanupPreview(
            total_records=len(records),
            oldest_record_date=oldest,
            records_by_date=dict(sorted(by_date.items())),
            student_records=dict(by_student),
        )

    def run_all(self, *, now: datetime | None = None) -> dict[str, CleanupResult]:
        now = now or self._clock()
        return {
            "attendance": self.cleanup_stale_attendance(now=now),
            "work_sessions": self.cleanup_stale_work_sessions(now=now),
        }
