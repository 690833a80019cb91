"""Device records and the status transitions allowed on them."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from domain.device import Device, DeviceStatus, DeviceType
from domain.errors import DeviceBusyError, DeviceNotFoundError, InvalidRequestError
from infrastructure.repository import LoungeRepository

logger = logging.getLogger(__name__)

# statuses an administrator may set directly
ADMIN_STATUSES = {DeviceStatus.AVAILABLE, DeviceStatus.MAINTENANCE}
PATCHABLE_FIELDS = {"name", "type", "status"}


class DeviceRegistry:
    """CRUD over devices.

    Busy is never set through the administrative API; only ``occupy`` and
    ``release``, called by the session engine inside a transition, move a
    device into and out of Busy.
    """

    def __init__(self, repository: LoungeRepository):
        self.repo = repository

    # Queries ---------------------------------------------------------------
    def get(self, device_id: str) -> Optional[Device]:
        return self.repo.get_device(device_id)

    def require(self, device_id: str) -> Device:
        device = self.repo.get_device(device_id)
        if not device:
            raise DeviceNotFoundError(device_id)
        return device

    def list_devices(self) -> List[Device]:
        return list(self.repo.list_devices())

    # Administrative operations ---------------------------------------------
    def add_device(
        self,
        name: Optional[str] = None,
        device_type: DeviceType | str = DeviceType.PS4,
    ) -> Device:
        device = Device(
            device_id=uuid4().hex[:12],
            name=(name or "").strip() or self._next_default_name(),
            type=_parse_device_type(device_type),
            status=DeviceStatus.AVAILABLE,
        )
        self.repo.save_device(device)
        logger.info("Device %s added (%s, %s)", device.device_id, device.name, device.type.value)
        return device

    def update_device(self, device_id: str, patch: Mapping[str, Any]) -> Device:
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise InvalidRequestError(f"Unknown device fields: {', '.join(sorted(unknown))}")

        device = self.require(device_id)
        # validate everything before touching the record
        new_name = device.name
        if patch.get("name") is not None:
            new_name = str(patch["name"]).strip()
            if not new_name:
                raise InvalidRequestError("Device name cannot be empty")
        new_type = device.type
        if patch.get("type") is not None:
            new_type = _parse_device_type(patch["type"])
            if new_type != device.type and device.is_busy:
                raise DeviceBusyError(device_id)
        new_status = device.status
        if patch.get("status") is not None:
            new_status = self._checked_admin_status(device, patch["status"])

        device.name = new_name
        device.type = new_type
        device.status = new_status
        self.repo.save_device(device)
        return device

    def set_status(self, device_id: str, status: DeviceStatus | str) -> Device:
        """Administrative status toggle: Available <-> Maintenance only."""
        device = self.require(device_id)
        device.status = self._checked_admin_status(device, status)
        self.repo.save_device(device)
        logger.info("Device %s set to %s", device_id, device.status.value)
        return device

    def delete_device(self, device_id: str) -> None:
        device = self.require(device_id)
        if device.is_busy:
            raise DeviceBusyError(device_id)
        self.repo.delete_device(device_id)
        logger.info("Device %s deleted", device_id)

    # Session engine hooks ---------------------------------------------------
    def occupy(self, device: Device) -> None:
        device.mark_busy()
        self.repo.save_device(device)

    def release(self, device: Device) -> None:
        device.mark_available()
        self.repo.save_device(device)

    # Helpers ----------------------------------------------------------------
    def _checked_admin_status(self, device: Device, raw_status: DeviceStatus | str) -> DeviceStatus:
        try:
            status = DeviceStatus(raw_status)
        except ValueError as exc:
            raise InvalidRequestError(f"Unknown device status {raw_status!r}") from exc
        if status == device.status:
            return status
        if device.is_busy:
            raise DeviceBusyError(device.device_id)
        if status not in ADMIN_STATUSES:
            raise InvalidRequestError("Busy is only reachable by starting a session")
        return status

    def _next_default_name(self) -> str:
        taken = {device.name for device in self.repo.list_devices()}
        ordinal = len(taken) + 1
        while f"Device {ordinal}" in taken:
            ordinal += 1
        return f"Device {ordinal}"


def _parse_device_type(raw: DeviceType | str) -> DeviceType:
    try:
        return DeviceType(str(getattr(raw, "value", raw)).upper())
    except ValueError as exc:
        raise InvalidRequestError(f"Unknown device type {raw!r}") from exc


def device_to_dict(device: Device) -> Dict[str, Any]:
    return {
        "deviceId": device.device_id,
        "name": device.name,
        "type": device.type.value,
        "status": device.status.value,
    }
