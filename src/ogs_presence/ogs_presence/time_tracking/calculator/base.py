from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..model import WorkSession


class SessionCalculator(ABC):
    """Calculator interface for derived session figures."""

    @abstractmethod
    def net_minutes(self, session: WorkSession, *, now: datetime) -> int:
        raise NotImplementedError

    @abstractmethod
    def is_overtime(self, net_minutes: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_break_compliant(self, net_minutes: int, break_minutes: int) -> bool:
        raise NotImplementedError
