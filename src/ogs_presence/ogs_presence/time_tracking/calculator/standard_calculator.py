from __future__ import annotations

from datetime import datetime

from ...core.constants import (
    BREAK_REQUIRED_AFTER_6H,
    BREAK_REQUIRED_AFTER_9H,
    NINE_HOURS_MINUTES,
    OVERTIME_THRESHOLD_MINUTES,
    SIX_HOURS_MINUTES,
)
from ..model import WorkSession
from .base import SessionCalculator


class StandardSessionCalculator(SessionCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0.

    Open sessions are measured up to ``now``. Break compliance follows the
    German working-time rule: more than 6h needs 30 minutes, more than 9h needs 45.
    """

    def net_minutes(self, session: WorkSession, *, now: datetime) -> int:
        end = session.check_out_time or now
        minutes = int((end - session.check_in_time).total_seconds() // 60)
        minutes -= int(session.break_minutes or 0)
        return max(minutes, 0)

    def is_overtime(self, net_minutes: int) -> bool:
        return net_minutes > OVERTIME_THRESHOLD_MINUTES

    def is_break_compliant(self, net_minutes: int, break_minutes: int) -> bool:
        if net_minutes > NINE_HOURS_MINUTES:
            return break_minutes >= BREAK_REQUIRED_AFTER_9H
        if net_minutes > SIX_HOURS_MINUTES:
            return break_minutes >= BREAK_REQUIRED_AFTER_6H
        return True
