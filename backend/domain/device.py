"""Console device domain model."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DeviceType(str, Enum):
    PS4 = "PS4"
    PS5 = "PS5"


class DeviceStatus(str, Enum):
    AVAILABLE = "Available"
    BUSY = "Busy"
    MAINTENANCE = "Maintenance"


@dataclass
class Device:
    device_id: str
    name: str
    type: DeviceType = DeviceType.PS4
    status: DeviceStatus = DeviceStatus.AVAILABLE

    @property
    def is_available(self) -> bool:
        return self.status == DeviceStatus.AVAILABLE

    @property
    def is_busy(self) -> bool:
        return self.status == DeviceStatus.BUSY

    def mark_busy(self) -> None:
        """Only the session engine calls this, right after creating a session."""
        self.status = DeviceStatus.BUSY

    def mark_available(self) -> None:
        self.status = DeviceStatus.AVAILABLE
