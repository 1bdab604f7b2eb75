from __future__ import annotations

from datetime import date
from typing import Optional, Type, TypeVar
from enum import Enum

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_id(value, field_name: str) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if v <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return v


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"'{m.value}'" for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of {allowed}")


def require_date_order(start: date, end: date, message: str = "start date must not be after end date") -> None:
    if start > end:
        raise ValidationError(message)


def optional_non_negative(value: Optional[int], field_name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if v < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return v
