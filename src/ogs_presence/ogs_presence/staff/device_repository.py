from __future__ import annotations

from typing import Optional, Protocol

from .device_model import Device


class DeviceRepository(Protocol):
    def get_by_api_key_hash(self, api_key_hash: str) -> Optional[Device]:
        raise NotImplementedError
