"""Abstract repository interfaces for persistence."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from domain.device import Device
from domain.price_table import PriceTable
from domain.report import Report
from domain.session import Session


class LoungeRepository(ABC):
    """Unified gateway so memory store / SQLite share the same API.

    Devices, sessions, prices and reports are independent keyed
    collections; the only cross reference is ``device_id``.
    """

    # Devices -------------------------------------------------------------
    @abstractmethod
    def get_device(self, device_id: str) -> Optional[Device]:
        raise NotImplementedError

    @abstractmethod
    def list_devices(self) -> Iterable[Device]:
        raise NotImplementedError

    @abstractmethod
    def save_device(self, device: Device) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_device(self, device_id: str) -> None:
        raise NotImplementedError

    # Sessions ------------------------------------------------------------
    @abstractmethod
    def get_session(self, device_id: str) -> Optional[Session]:
        raise NotImplementedError

    @abstractmethod
    def list_sessions(self) -> Iterable[Session]:
        raise NotImplementedError

    @abstractmethod
    def save_session(self, session: Session) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_session(self, device_id: str) -> None:
        raise NotImplementedError

    # Prices --------------------------------------------------------------
    @abstractmethod
    def get_price_table(self) -> Optional[PriceTable]:
        raise NotImplementedError

    @abstractmethod
    def save_price_table(self, table: PriceTable) -> None:
        raise NotImplementedError

    # Reports -------------------------------------------------------------
    @abstractmethod
    def add_report(self, report: Report) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_reports(self, day: Optional[date] = None) -> Iterable[Report]:
        """List reports, optionally only those whose session ended on ``day``."""
        raise NotImplementedError

    @abstractmethod
    def delete_all_reports(self) -> int:
        """Drop every report; returns how many were removed."""
        raise NotImplementedError

    # Transitions -----------------------------------------------------------
    @abstractmethod
    def commit_session_start(self, session: Session, device: Device) -> None:
        """Store a new session and its Busy device as one unit; all or nothing."""
        raise NotImplementedError

    @abstractmethod
    def commit_session_end(self, report: Report, device: Device) -> None:
        """Append ``report``, drop the device's session and store the released
        device as one unit; all or nothing."""
        raise NotImplementedError
