from __future__ import annotations

import hashlib
from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty, require_positive_id
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .device_repository import DeviceRepository
from .repository import StaffRepository


def hash_api_key(api_key: str) -> str:
    """Deterministic digest so a device can be looked up by its key."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def _safe_check(hash_value: str | None, secret: str) -> bool:
    if not hash_value:
        return False
    try:
        return check_password_hash(hash_value, secret)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


@dataclass(frozen=True)
class SessionStaff:
    """What we store into the Flask session after login."""

    staff_id: int
    full_name: str
    role: Role


@dataclass(frozen=True)
class DeviceContext:
    """Authenticated terminal plus the staff member operating it."""

    device_id: int
    staff_id: int


class AuthService:
    """Use case: authenticate a staff member (login)."""

    def __init__(self, staff: StaffRepository):
        self._staff = staff

    def authenticate(self, username: str, password: str) -> SessionStaff:
        member = self._staff.get_by_username((username or "").strip())
        if not member or not member.is_active:
            raise AuthenticationError("invalid username or password")
        if not _safe_check(member.password_hash, password or ""):
            raise AuthenticationError("invalid username or password")
        return SessionStaff(staff_id=member.staff_id, full_name=member.full_name, role=member.role)


class DeviceAuthService:
    """Validates the three device credentials: API key, staff id and staff PIN."""

    def __init__(self, devices: DeviceRepository, staff: StaffRepository):
        self._devices = devices
        self._staff = staff

    def authenticate(self, *, api_key: str, staff_id, pin: str) -> DeviceContext:
        try:
            api_key = require_non_empty(api_key, "device API key")
            pin = require_non_empty(pin, "staff PIN")
            staff_id = require_positive_id(staff_id, "staff id")
        except ValidationError as exc:
            raise AuthenticationError(str(exc)) from exc

        device = self._devices.get_by_api_key_hash(hash_api_key(api_key))
        if not device or not device.is_active:
            raise AuthenticationError("invalid device API key")

        member = self._staff.get_by_id(staff_id)
        if not member or not member.is_active or not _safe_check(member.pin_hash, pin):
            raise AuthenticationError("invalid staff credentials")

        return DeviceContext(device_id=device.device_id, staff_id=member.staff_id)
