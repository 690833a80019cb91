"""Domain error codes for the lounge core."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Domain error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
    DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
    DEVICE_BUSY = "DEVICE_BUSY"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    CONFIGURATION = "CONFIGURATION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message.

    Every subclass is raised before any state is touched, so callers can
    correct the request and resubmit.
    """

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidRequestError(DomainError):
    """Raised for malformed caller input."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class DeviceNotFoundError(DomainError):
    """Raised when a device id does not exist."""

    def __init__(self, device_id: str) -> None:
        super().__init__(
            code=ErrorCode.DEVICE_NOT_FOUND,
            message=f"Device {device_id} not found",
        )
        object.__setattr__(self, "device_id", device_id)


class DeviceUnavailableError(DomainError):
    """Raised when a session start targets a device that is not Available."""

    def __init__(self, device_id: str, status: str) -> None:
        super().__init__(
            code=ErrorCode.DEVICE_UNAVAILABLE,
            message=f"Device {device_id} is {status}",
        )
        object.__setattr__(self, "device_id", device_id)


class DeviceBusyError(DomainError):
    """Raised when an administrative change targets a Busy device."""

    def __init__(self, device_id: str) -> None:
        super().__init__(
            code=ErrorCode.DEVICE_BUSY,
            message=f"Device {device_id} has a running session",
        )
        object.__setattr__(self, "device_id", device_id)


class NoActiveSessionError(DomainError):
    """Raised when extend/end targets a device without an active session."""

    def __init__(self, device_id: str) -> None:
        super().__init__(
            code=ErrorCode.NO_ACTIVE_SESSION,
            message=f"Device {device_id} has no active session",
        )
        object.__setattr__(self, "device_id", device_id)


class ConfigurationError(DomainError):
    """Raised when the price table has no rate for a tier."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.CONFIGURATION, message=message)
