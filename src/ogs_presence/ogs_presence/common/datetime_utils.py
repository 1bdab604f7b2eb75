from __future__ import annotations

from datetime import date, datetime, time, timedelta

from ..core.constants import DATE_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_date_param(value: str | None, field_name: str) -> date:
    """Like parse_iso_date, but raises ValidationError for missing or malformed input."""
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"invalid {field_name} format, expected YYYY-MM-DD")


def parse_rfc3339(value: str, field_name: str) -> datetime:
    """Parse an RFC 3339 timestamp into a naive server-local datetime."""
    v = (value or "").strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"invalid {field_name}, expected RFC 3339 timestamp")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_rfc3339(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone().isoformat()


def end_of_day(day: date) -> datetime:
    """23:59:59 of the given day."""
    return datetime.combine(day, time(23, 59, 59))


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded to the nearest minute."""
    return int(round((end - start) / timedelta(minutes=1)))


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now().replace(microsecond=0)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive date ranges overlap when they share at least one day."""
    return a_start <= b_end and a_end >= b_start
