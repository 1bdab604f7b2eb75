from __future__ import annotations

from datetime import date, datetime

from ...common.datetime_utils import end_of_day
from .base import CloseDecision, CloseStrategy


class EndOfDayStrategy(CloseStrategy):
    """Regular case: close at 23:59:59 of the row's own day."""

    def decide(self, *, day: date, check_in_time: datetime) -> CloseDecision:
        return CloseDecision(check_out_time=end_of_day(day), reason="end_of_day")
