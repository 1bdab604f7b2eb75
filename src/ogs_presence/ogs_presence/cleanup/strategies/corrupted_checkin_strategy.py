from __future__ import annotations

from datetime import date, datetime, timedelta

from .base import CloseDecision, CloseStrategy


class CorruptedCheckInStrategy(CloseStrategy):
    """Check-in stamped after the end of its own day.

    Closing at end of day would put check-out before check-in, so the row is
    closed one second after its check-in instead.
    """

    def decide(self, *, day: date, check_in_time: datetime) -> CloseDecision:
        return CloseDecision(check_out_time=check_in_time + timedelta(seconds=1), reason="corrupted_check_in")
