"""In-memory data store, used by tests and the `memory` storage backend."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from domain.device import Device
from domain.price_table import PriceTable
from domain.report import Report
from domain.session import Session
from .repository import LoungeRepository


class InMemoryLoungeRepository(LoungeRepository):
    def __init__(self):
        self._devices: Dict[str, Device] = {}
        self._sessions: Dict[str, Session] = {}
        self._price_table: Optional[PriceTable] = None
        self._reports: List[Report] = []

    def get_device(self, device_id: str) -> Optional[Device]:
        return self._devices.get(device_id)

    def list_devices(self) -> Iterable[Device]:
        return list(self._devices.values())

    def save_device(self, device: Device) -> None:
        self._devices[device.device_id] = device

    def delete_device(self, device_id: str) -> None:
        self._devices.pop(device_id, None)

    def get_session(self, device_id: str) -> Optional[Session]:
        return self._sessions.get(device_id)

    def list_sessions(self) -> Iterable[Session]:
        return list(self._sessions.values())

    def save_session(self, session: Session) -> None:
        self._sessions[session.device_id] = session

    def remove_session(self, device_id: str) -> None:
        self._sessions.pop(device_id, None)

    def get_price_table(self) -> Optional[PriceTable]:
        return self._price_table

    def save_price_table(self, table: PriceTable) -> None:
        self._price_table = table

    def add_report(self, report: Report) -> None:
        self._reports.append(report)

    def list_reports(self, day: Optional[date] = None) -> Iterable[Report]:
        if day is None:
            return list(self._reports)
        return [report for report in self._reports if report.date == day]

    def delete_all_reports(self) -> int:
        removed = len(self._reports)
        self._reports.clear()
        return removed

    # Transitions -------------------------------------------------------------
    def commit_session_start(self, session: Session, device: Device) -> None:
        saved = self._checkpoint(device.device_id)
        try:
            self.save_session(session)
            self.save_device(device)
        except Exception:
            self._restore(device.device_id, saved)
            raise

    def commit_session_end(self, report: Report, device: Device) -> None:
        saved = self._checkpoint(device.device_id)
        try:
            self.add_report(report)
            self.remove_session(device.device_id)
            self.save_device(device)
        except Exception:
            self._restore(device.device_id, saved)
            raise

    def _checkpoint(self, device_id: str) -> Tuple[Optional[Device], Optional[Session], int]:
        return self._devices.get(device_id), self._sessions.get(device_id), len(self._reports)

    def _restore(self, device_id: str, saved: Tuple[Optional[Device], Optional[Session], int]) -> None:
        device, session, report_count = saved
        if device is None:
            self._devices.pop(device_id, None)
        else:
            self._devices[device_id] = device
        if session is None:
            self._sessions.pop(device_id, None)
        else:
            self._sessions[device_id] = session
        del self._reports[report_count:]
