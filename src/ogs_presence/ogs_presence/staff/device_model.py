from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Device:
    """A registered RFID terminal."""

    device_id: int
    device_name: str
    api_key_hash: str
    is_active: bool = True
