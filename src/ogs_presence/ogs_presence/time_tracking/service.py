from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Protocol, Sequence

from ..absences.repository import AbsenceRepository
from ..common.datetime_utils import minutes_between, now_local
from ..common.validators import optional_non_negative, require_date_order, require_enum
from ..core.enums import EditField, WorkStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from .calculator.base import SessionCalculator
from .calculator.standard_calculator import StandardSessionCalculator
from .export import ExportFile, SessionExporter
from .model import SessionResponse, SessionUpdate, WorkSession, WorkSessionBreak, WorkSessionEdit
from .repository import (
    SupervisionRepository,
    WorkSessionBreakRepository,
    WorkSessionEditRepository,
    WorkSessionRepository,
)

logger = logging.getLogger(__name__)


class StaleSessionCloser(Protocol):
    def close_stale_session(self, session: WorkSession) -> bool:
        raise NotImplementedError


def _ts(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


class _EditLog:
    """Collects edit-log rows for one update call."""

    def __init__(self, session: WorkSession, edited_by: int, now: datetime, notes: Optional[str]):
        self._session = session
        self._edited_by = edited_by
        self._now = now
        self._notes = notes
        self.entries: list[WorkSessionEdit] = []

    def add(self, field: EditField, old: Optional[str], new: Optional[str]) -> None:
        if old == new:
            return
        self.entries.append(
            WorkSessionEdit(
                session_id=self._session.session_id,
                staff_id=self._session.staff_id,
                edited_by=self._edited_by,
                field_name=field.value,
                old_value=old,
                new_value=new,
                created_at=self._now,
                notes=self._notes,
            )
        )


class WorkSessionService:
    """Staff work sessions: check-in, check-out, breaks and audited edits.

    At most one session per staff member is open at a time and at most one
    break per session; both rules are backed by unique keys in the store, so a
    lost race surfaces as ConflictError from the repository.
    """

    def __init__(
        self,
        sessions: WorkSessionRepository,
        breaks: WorkSessionBreakRepository,
        edits: WorkSessionEditRepository,
        *,
        calculator: SessionCalculator | None = None,
        absences: AbsenceRepository | None = None,
        supervisions: SupervisionRepository | None = None,
        reconciler: StaleSessionCloser | None = None,
        exporter: SessionExporter | None = None,
    ):
        self._sessions = sessions
        self._breaks = breaks
        self._edits = edits
        self._calculator = calculator or StandardSessionCalculator()
        self._absences = absences
        self._supervisions = supervisions
        self._reconciler = reconciler
        self._exporter = exporter or SessionExporter()

    # -- helpers -------------------------------------------------------------

    def _require_open_session(self, staff_id: int) -> WorkSession:
        session = self._sessions.get_current_by_staff(staff_id)
        if not session:
            raise NotFoundError("no active session found")
        return session

    def _reload(self, session_id: int) -> WorkSession:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("session not found")
        return session

    def _break_total(self, session_id: int, *, now: datetime) -> int:
        total = 0
        for b in self._breaks.get_by_session(session_id):
            # Open breaks count up to now.
            total += b.duration_minutes if not b.is_active else minutes_between(b.start_time, now)
        return total

    def _recalc_break_minutes(self, session_id: int, *, now: datetime) -> int:
        total = self._break_total(session_id, now=now)
        self._sessions.update_break_minutes(session_id, total)
        return total

    def _end_active_break(self, session_id: int, *, at: datetime) -> bool:
        active = self._breaks.get_active_by_session(session_id)
        if not active:
            return False
        end = max(at, active.start_time)
        if not self._breaks.end_break(
            break_id=active.break_id,
            end_time=end,
            duration_minutes=minutes_between(active.start_time, end),
        ):
            raise ConflictError("break changed concurrently; re-read the session before retrying")
        return True

    def _end_supervisions(self, staff_id: int) -> None:
        if not self._supervisions:
            return
        try:
            ended = self._supervisions.end_all_active_by_staff(staff_id)
        except Exception:
            logger.warning("failed to end active supervisions for staff %s on checkout", staff_id, exc_info=True)
            return
        if ended:
            logger.info("ended %s active supervision(s) for staff %s on checkout", ended, staff_id)

    # -- state machine -------------------------------------------------------

    def check_in(self, staff_id: int, status: str = WorkStatus.PRESENT.value, *, now: datetime | None = None) -> WorkSession:
        now = now or now_local()
        today = now.date()
        work_status = require_enum(WorkStatus, status or WorkStatus.PRESENT.value, "status")

        current = self._sessions.get_current_by_staff(staff_id)
        if current:
            if current.work_date >= today:
                raise ConflictError("already checked in")
            # Left open on an earlier day; close it before opening today's session.
            if not self._reconciler:
                raise ConflictError("previous session is still open")
            self._reconciler.close_stale_session(current)
            logger.info("closed stale work session %s of staff %s before check-in", current.session_id, staff_id)

        session_id = self._sessions.create(
            staff_id=staff_id,
            work_date=today,
            status=work_status,
            check_in_time=now,
            created_by=staff_id,
        )
        return WorkSession(
            session_id=session_id,
            staff_id=staff_id,
            work_date=today,
            status=work_status,
            check_in_time=now,
            check_out_time=None,
            created_by=staff_id,
        )

    def check_out(self, staff_id: int, *, now: datetime | None = None) -> WorkSession:
        now = now or now_local()
        session = self._require_open_session(staff_id)

        if self._end_active_break(session.session_id, at=now):
            self._recalc_break_minutes(session.session_id, now=now)

        check_out = max(now, session.check_in_time)
        if not self._sessions.close_session(session_id=session.session_id, check_out_time=check_out, auto_checked_out=False):
            raise ConflictError("session changed concurrently; re-read the session before retrying")

        self._end_supervisions(staff_id)
        return self._reload(session.session_id)

    def start_break(
        self,
        staff_id: int,
        planned_duration_minutes: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> WorkSessionBreak:
        now = now or now_local()
        planned = optional_non_negative(planned_duration_minutes, "planned_duration_minutes")
        session = self._require_open_session(staff_id)

        if self._breaks.get_active_by_session(session.session_id):
            raise ConflictError("break already active")

        break_id = self._breaks.create(session_id=session.session_id, start_time=now, planned_duration_minutes=planned)
        return WorkSessionBreak(
            break_id=break_id,
            session_id=session.session_id,
            start_time=now,
            end_time=None,
            planned_duration_minutes=planned,
        )

    def end_break(self, staff_id: int, *, now: datetime | None = None) -> WorkSession:
        now = now or now_local()
        session = self._require_open_session(staff_id)

        if not self._end_active_break(session.session_id, at=now):
            raise NotFoundError("no active break found")
        self._recalc_break_minutes(session.session_id, now=now)
        return self._reload(session.session_id)

    # -- edits ---------------------------------------------------------------

    def update_session(
        self,
        staff_id: int,
        session_id: int,
        updates: SessionUpdate,
        *,
        now: datetime | None = None,
    ) -> WorkSession:
        """Apply a partial edit and log one row per changed field.

        Every field is validated before the first write, so a rejected update
        leaves sessions, breaks and the edit log untouched.
        """
        now = now or now_local()
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("session not found")
        if session.staff_id != staff_id:
            raise AuthorizationError("can only update own sessions")

        log = _EditLog(session, staff_id, now, updates.notes)
        updated = session

        if updates.check_in_time is not None:
            log.add(EditField.CHECK_IN_TIME, _ts(updated.check_in_time), _ts(updates.check_in_time))
            updated = replace(updated, check_in_time=updates.check_in_time)
        if updates.check_out_time is not None:
            log.add(EditField.CHECK_OUT_TIME, _ts(updated.check_out_time), _ts(updates.check_out_time))
            updated = replace(updated, check_out_time=updates.check_out_time)
        if updated.check_out_time is not None and updated.check_out_time < updated.check_in_time:
            raise ValidationError("check-out time must not be before check-in time")

        break_writes: list[tuple[WorkSessionBreak, int]] = []
        if updates.breaks:
            updated, break_writes = self._plan_break_updates(updated, updates, log)
        elif updates.break_minutes is not None:
            minutes = optional_non_negative(updates.break_minutes, "break_minutes")
            log.add(EditField.BREAK_MINUTES, str(updated.break_minutes), str(minutes))
            updated = replace(updated, break_minutes=minutes)

        if updates.status is not None:
            status = require_enum(WorkStatus, updates.status, "status")
            log.add(EditField.STATUS, updated.status.value, status.value)
            updated = replace(updated, status=status)
        if updates.notes is not None:
            log.add(EditField.NOTES, updated.notes, updates.notes)
            updated = replace(updated, notes=updates.notes)
        if updates.planned_duration_minutes is not None:
            planned = optional_non_negative(updates.planned_duration_minutes, "planned_duration_minutes")
            old = "" if updated.planned_duration_minutes is None else str(updated.planned_duration_minutes)
            log.add(EditField.PLANNED_DURATION, old, str(planned))
            updated = replace(updated, planned_duration_minutes=planned)

        for brk, minutes in break_writes:
            self._breaks.update_duration(
                break_id=brk.break_id,
                duration_minutes=minutes,
                end_time=brk.start_time + timedelta(minutes=minutes),
            )

        closing = session.is_active and not updated.is_active
        if closing and self._end_active_break(session_id, at=updated.check_out_time):
            updated = replace(updated, break_minutes=self._break_total(session_id, now=updated.check_out_time))

        updated = replace(updated, updated_by=staff_id)
        self._sessions.update(updated)
        self._edits.create_batch(log.entries)
        return updated

    def _plan_break_updates(
        self, session: WorkSession, updates: SessionUpdate, log: _EditLog
    ) -> tuple[WorkSession, list[tuple[WorkSessionBreak, int]]]:
        """Validate break duration edits and return the writes to perform."""
        existing = {b.break_id: b for b in self._breaks.get_by_session(session.session_id)}

        writes: list[tuple[WorkSessionBreak, int]] = []
        for bu in updates.breaks:
            brk = existing.get(bu.break_id)
            if brk is None:
                raise ValidationError(f"break {bu.break_id} does not belong to this session")
            if brk.is_active:
                raise ValidationError("cannot edit duration of an active break")
            minutes = optional_non_negative(bu.duration_minutes, "duration_minutes")
            # A break never ends after its session.
            if session.check_out_time is not None and brk.start_time + timedelta(minutes=minutes) > session.check_out_time:
                raise ValidationError(f"break {bu.break_id} would end after the session's check-out time")
            if brk.duration_minutes == minutes:
                continue
            log.add(EditField.BREAK_DURATION, str(brk.duration_minutes), str(minutes))
            existing[bu.break_id] = replace(brk, duration_minutes=minutes)
            writes.append((brk, minutes))

        total = sum(b.duration_minutes for b in existing.values() if not b.is_active)
        return replace(session, break_minutes=total), writes

    # -- reads ---------------------------------------------------------------

    def get_current_session(self, staff_id: int) -> Optional[WorkSession]:
        return self._sessions.get_current_by_staff(staff_id)

    def get_history(
        self,
        staff_id: int,
        date_from: date,
        date_to: date,
        *,
        now: datetime | None = None,
    ) -> list[SessionResponse]:
        now = now or now_local()
        require_date_order(date_from, date_to, "from must not be after to")

        sessions = self._sessions.get_history(staff_id, date_from, date_to)
        counts = self._edits.count_by_sessions([s.session_id for s in sessions])

        out: list[SessionResponse] = []
        for s in sessions:
            net = self._calculator.net_minutes(s, now=now)
            out.append(
                SessionResponse(
                    session=s,
                    net_minutes=net,
                    is_overtime=self._calculator.is_overtime(net),
                    is_break_compliant=self._calculator.is_break_compliant(net, s.break_minutes),
                    breaks=list(self._breaks.get_by_session(s.session_id)),
                    edit_count=counts.get(s.session_id, 0),
                )
            )
        return out

    def get_session_breaks(self, session_id: int) -> Sequence[WorkSessionBreak]:
        return self._breaks.get_by_session(session_id)

    def get_session_edits(self, session_id: int) -> Sequence[WorkSessionEdit]:
        return self._edits.get_by_session(session_id)

    def get_today_presence_map(self, *, now: datetime | None = None) -> Dict[int, str]:
        now = now or now_local()
        return self._sessions.get_presence_map(now.date())

    def ensure_checked_in(self, staff_id: int, *, now: datetime | None = None) -> Optional[WorkSession]:
        """Check the staff member in unless they already worked and checked out today."""
        now = now or now_local()
        today = now.date()

        current = self._sessions.get_current_by_staff(staff_id)
        if current and current.work_date >= today:
            return current

        todays = self._sessions.get_by_staff_and_date(staff_id, today)
        if todays and not todays.is_active:
            return None
        return self.check_in(staff_id, WorkStatus.PRESENT.value, now=now)

    def export_sessions(
        self,
        staff_id: int,
        date_from: date,
        date_to: date,
        fmt: str = "csv",
        *,
        now: datetime | None = None,
    ) -> ExportFile:
        history = self.get_history(staff_id, date_from, date_to, now=now)
        absences = self._absences.list_for_range(staff_id, date_from, date_to) if self._absences else []
        # Oldest first in the file.
        return self._exporter.export(list(reversed(history)), absences, date_from, date_to, fmt)
