from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class CleanupResult:
    """Outcome of one reconciler run over one kind of row."""

    started_at: datetime
    completed_at: datetime
    records_closed: int
    actors_affected: int
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class CleanupPreview:
    """What an attendance cleanup would close, without closing anything."""

    total_records: int
    oldest_record_date: Optional[date]
    records_by_date: Dict[date, int]
    student_records: Dict[int, int]
