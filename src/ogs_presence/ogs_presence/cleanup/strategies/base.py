from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class CloseDecision:
    check_out_time: datetime
    reason: str


class CloseStrategy(ABC):
    """Strategy Pattern: decide when a row left open past its day gets closed."""

    @abstractmethod
    def decide(self, *, day: date, check_in_time: datetime) -> CloseDecision:
        raise NotImplementedError
