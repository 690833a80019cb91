"""Unit tests for DeviceRegistry status rules."""
import pytest

from application.device_registry import DeviceRegistry
from domain.device import DeviceStatus, DeviceType
from domain.errors import DeviceBusyError, DeviceNotFoundError, InvalidRequestError


@pytest.fixture
def registry(repository) -> DeviceRegistry:
    return DeviceRegistry(repository)


class TestAddDevice:
    def test_default_device_is_available_ps4_with_generated_name(self, registry):
        first = registry.add_device()
        second = registry.add_device()

        assert (first.name, first.type, first.status) == ("Device 1", DeviceType.PS4, DeviceStatus.AVAILABLE)
        assert second.name == "Device 2"
        assert first.device_id != second.device_id

    def test_generated_name_skips_taken_names(self, registry):
        registry.add_device("Device 2")
        assert registry.add_device().name == "Device 3"

    def test_explicit_name_and_type(self, registry):
        device = registry.add_device("VIP", "ps5")
        assert device.name == "VIP"
        assert device.type == DeviceType.PS5

    def test_unknown_type(self, registry):
        with pytest.raises(InvalidRequestError):
            registry.add_device("X", "XBOX")


class TestStatus:
    def test_admin_can_toggle_maintenance(self, registry):
        device = registry.add_device()
        assert registry.set_status(device.device_id, "Maintenance").status == DeviceStatus.MAINTENANCE
        assert registry.set_status(device.device_id, DeviceStatus.AVAILABLE).status == DeviceStatus.AVAILABLE

    def test_admin_cannot_set_busy(self, registry):
        device = registry.add_device()
        with pytest.raises(InvalidRequestError):
            registry.set_status(device.device_id, DeviceStatus.BUSY)
        assert registry.require(device.device_id).is_available

    def test_busy_device_status_is_locked(self, registry):
        device = registry.add_device()
        registry.occupy(device)
        with pytest.raises(DeviceBusyError):
            registry.set_status(device.device_id, DeviceStatus.AVAILABLE)

    def test_unknown_status(self, registry):
        device = registry.add_device()
        with pytest.raises(InvalidRequestError):
            registry.set_status(device.device_id, "Broken")


class TestUpdateDevice:
    def test_patch_name_and_type(self, registry):
        device = registry.add_device()
        updated = registry.update_device(device.device_id, {"name": "Window", "type": "PS5"})
        assert (updated.name, updated.type) == ("Window", DeviceType.PS5)

    def test_busy_device_can_be_renamed_but_not_retyped(self, registry):
        device = registry.add_device()
        registry.occupy(device)

        assert registry.update_device(device.device_id, {"name": "Busy one"}).name == "Busy one"
        with pytest.raises(DeviceBusyError):
            registry.update_device(device.device_id, {"type": "PS5"})
        assert registry.require(device.device_id).type == DeviceType.PS4

    def test_invalid_patch_changes_nothing(self, registry):
        device = registry.add_device()
        with pytest.raises(InvalidRequestError):
            registry.update_device(device.device_id, {"name": "New", "status": "Busy"})
        assert registry.require(device.device_id).name == "Device 1"

    def test_unknown_field(self, registry):
        device = registry.add_device()
        with pytest.raises(InvalidRequestError):
            registry.update_device(device.device_id, {"price": 10})


class TestDeleteDevice:
    def test_delete_available_device(self, registry):
        device = registry.add_device()
        registry.delete_device(device.device_id)
        assert registry.get(device.device_id) is None

    def test_delete_busy_device_fails(self, registry):
        device = registry.add_device()
        registry.occupy(device)
        with pytest.raises(DeviceBusyError):
            registry.delete_device(device.device_id)
        assert registry.get(device.device_id) is not None

    def test_delete_unknown_device(self, registry):
        with pytest.raises(DeviceNotFoundError):
            registry.delete_device("missing")
