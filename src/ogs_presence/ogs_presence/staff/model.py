from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Staff:
    """Domain entity: staff member (educator or admin).

    Note: plain data object; no DB access here.
    """

    staff_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    pin_hash: Optional[str] = None
    is_active: bool = True
