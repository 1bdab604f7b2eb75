from __future__ import annotations

from typing import Optional, Protocol

from .model import Staff


class StaffRepository(Protocol):
    """Repository interface for Staff.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Staff]:
        raise NotImplementedError
