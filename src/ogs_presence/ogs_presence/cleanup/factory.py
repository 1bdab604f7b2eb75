from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..common.datetime_utils import end_of_day
from .strategies.base import CloseStrategy
from .strategies.corrupted_checkin_strategy import CorruptedCheckInStrategy
from .strategies.end_of_day_strategy import EndOfDayStrategy


@dataclass
class CloseStrategyFactory:
    """Factory Pattern: choose the close policy for one stale row."""

    def for_record(self, *, day: date, check_in_time: datetime) -> CloseStrategy:
        if check_in_time > end_of_day(day):
            return CorruptedCheckInStrategy()
        return EndOfDayStrategy()
