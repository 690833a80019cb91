"""Session engine - owns the rental state machine of every device.

Per device: NoSession -> Active(Open | Timed) -> Ended (record removed,
replaced by a Report). All mutations of devices, sessions, prices and reports
go through this object and run under one re-entrant lock, so a tick scan can
never interleave with half of a start/extend/end transition.

The engine holds no timer. An external scheduler calls ``tick(now)`` at
>= 1 Hz; every operation also accepts an explicit ``now`` for testing.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from app.config import AppConfig
from application.billing_service import billed_minutes, compute_cost
from application.device_registry import DeviceRegistry, device_to_dict
from application.events import AsyncEventBus, EventType, LoungeEvent
from application.report_ledger import DailySummary, ReportLedger
from domain.device import Device, DeviceStatus, DeviceType
from domain.errors import (
    ConfigurationError,
    DeviceUnavailableError,
    InvalidRequestError,
    NoActiveSessionError,
)
from domain.price_table import PriceTable
from domain.report import Report
from domain.session import GameType, Session, SessionStatus, TimeMode
from infrastructure.repository import LoungeRepository

logger = logging.getLogger(__name__)

E = TypeVar("E", TimeMode, GameType)


@dataclass
class SessionEngine:
    config: AppConfig
    repository: LoungeRepository
    event_bus: Optional[AsyncEventBus] = None
    clock: Callable[[], datetime] = field(default=datetime.now)

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self.devices = DeviceRegistry(self.repository)
        self.ledger = ReportLedger(self.repository)
        self._sessions: Dict[str, Session] = {}
        self._last_ended: Optional[Report] = None
        self._price_table = self._load_price_table()
        self._recover_sessions()

    def update_config(self, config: AppConfig) -> None:
        """Refresh runtime configuration. Stored prices are left as they are."""
        self.config = config

    # ================== Lock ==================
    def acquire_lock(self) -> None:
        self._lock.acquire()

    def release_lock(self) -> None:
        self._lock.release()

    # ================== Bootstrap ==================
    def _load_price_table(self) -> PriceTable:
        table = self.repository.get_price_table()
        if table is None:
            table = PriceTable.from_mapping(self.config.pricing)
            self.repository.save_price_table(table)
        return table

    def _recover_sessions(self) -> None:
        """Reload active sessions after a restart and repair device status.

        Sessions whose timed expiry passed while the process was down keep
        ``time_up_notified = False``, so the next tick fires them once.
        """
        for rental in self.repository.list_sessions():
            device = self.devices.get(rental.device_id)
            if not device or not rental.is_active:
                logger.warning("Dropping orphan session on device %s", rental.device_id)
                self.repository.remove_session(rental.device_id)
                continue
            self._sessions[rental.device_id] = rental
            if not device.is_busy:
                self.devices.occupy(device)
        for device in self.devices.list_devices():
            if device.is_busy and device.device_id not in self._sessions:
                logger.warning("Device %s was Busy without a session, releasing", device.device_id)
                self.devices.release(device)

    def seed_devices(self, seeds: List[Mapping[str, Any]]) -> List[Device]:
        """Create the configured devices when the device collection is empty."""
        with self._lock:
            if self.devices.list_devices():
                return []
            created = [
                self.devices.add_device(seed.get("name"), seed.get("type", DeviceType.PS4))
                for seed in seeds
            ]
        if created:
            self._publish_state()
        return created

    # ================== Session transitions ==================
    def start_session(
        self,
        device_id: str,
        mode: TimeMode | str,
        game_type: GameType | str,
        duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Session:
        """
        Start a rental on an Available device and mark it Busy.

        Raises:
            DeviceNotFoundError: unknown device.
            DeviceUnavailableError: device is Busy or in Maintenance.
            InvalidRequestError: bad mode/game type, or Timed without a positive duration.
            ConfigurationError: no rate for the device's tier.
        """
        time_mode = _parse_choice(TimeMode, mode, "time mode")
        tier = _parse_choice(GameType, game_type, "game type")
        if time_mode == TimeMode.TIMED:
            duration_minutes = _positive_minutes(duration_minutes, "duration_minutes")

        with self._lock:
            now = now or self.clock()
            device = self.devices.require(device_id)
            if not device.is_available or device_id in self._sessions:
                raise DeviceUnavailableError(device_id, device.status.value)
            if self._price_table.rate_for(device.type, tier) is None:
                raise ConfigurationError(
                    f"No hourly rate configured for {device.type.value}/{tier.value}"
                )

            rental = Session(
                device_id=device_id,
                time_mode=time_mode,
                game_type=tier,
                start_time=now,
                end_time=now + timedelta(minutes=duration_minutes) if time_mode == TimeMode.TIMED else None,
            )
            # nothing is visible in memory until the store accepted both writes
            self.repository.commit_session_start(rental, replace(device, status=DeviceStatus.BUSY))
            self._sessions[device_id] = rental
            logger.info(
                "Session started on %s (%s, %s%s)",
                device_id,
                time_mode.value,
                tier.value,
                f", {duration_minutes} min" if duration_minutes and time_mode == TimeMode.TIMED else "",
            )
            self._publish_state()
            return rental

    def extend_session(
        self,
        device_id: str,
        additional_minutes: int,
        now: Optional[datetime] = None,
    ) -> Session:
        """Push a timed session's scheduled end; re-arms the time-up signal."""
        with self._lock:
            now = now or self.clock()
            self.devices.require(device_id)
            rental = self._require_session(device_id)
            if not rental.is_timed:
                raise InvalidRequestError("Only timed sessions can be extended")
            minutes = _positive_minutes(additional_minutes, "additional_minutes")

            rental = replace(rental)
            rental.extend(minutes, now)
            self._store_session(rental)
            logger.info("Session on %s extended by %d min", device_id, minutes)
            self._publish_state()
            return rental

    def end_session(self, device_id: str, now: Optional[datetime] = None) -> Report:
        """
        Single commit point of a rental: bill actual elapsed time, append the
        report, free the device and drop the session.

        Cost is computed before anything is written, so a ConfigurationError
        leaves the session running. The report, the session removal and the
        released device are written as one unit; if the store rejects it the
        session stays active and the device Busy.
        """
        with self._lock:
            now = now or self.clock()
            device = self.devices.require(device_id)
            rental = self._require_session(device_id)

            elapsed_ms = rental.elapsed_ms(now)
            cost = compute_cost(device.type, rental.game_type, elapsed_ms, self._price_table)
            report = Report(
                device_id=device_id,
                date=now.date(),
                start_time=rental.start_time,
                end_time=now,
                duration_minutes=billed_minutes(elapsed_ms),
                game_type=rental.game_type,
                cost=cost,
            )
            self.ledger.check(report)
            self.repository.commit_session_end(report, replace(device, status=DeviceStatus.AVAILABLE))

            rental.status = SessionStatus.ENDED
            self._sessions.pop(device_id, None)
            self._last_ended = report
            logger.info(
                "Session on %s ended: %d min, cost %s",
                device_id,
                report.duration_minutes,
                report.cost,
            )
            self._publish(EventType.SESSION_ENDED, device_id, {"report": report.to_dict()})
            self._publish_state()
            return report

    def tick(self, now: Optional[datetime] = None) -> List[str]:
        """
        Scan timed sessions for expiry; returns the device ids signalled.

        Expiry is a state comparison, so a session that ran out while nobody
        was ticking still fires exactly once on the next scan.
        """
        fired: List[str] = []
        with self._lock:
            now = now or self.clock()
            for rental in list(self._sessions.values()):
                if not rental.needs_time_up(now):
                    continue
                rental = replace(rental)
                rental.mark_time_up()
                self._store_session(rental)
                fired.append(rental.device_id)
                logger.info("Time up on %s", rental.device_id)
                self._publish(EventType.TIME_UP, rental.device_id, {"deviceId": rental.device_id})
            if fired:
                self._publish_state()
        return fired

    def acknowledge_time_up(self, device_id: str) -> Session:
        """Close the time-up prompt; billing state is untouched."""
        with self._lock:
            rental = replace(self._require_session(device_id), show_time_up_modal=False)
            self._store_session(rental)
            self._publish_state()
            return rental

    # ================== Queries ==================
    def get_session(self, device_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(device_id)

    def list_active_sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    @property
    def price_table(self) -> PriceTable:
        return self._price_table

    @property
    def last_ended_report(self) -> Optional[Report]:
        return self._last_ended

    def dismiss_summary(self, report_id: Optional[str] = None) -> bool:
        """Clear the end-of-session summary; with ``report_id`` only if it is still shown."""
        with self._lock:
            if self._last_ended is None:
                return False
            if report_id is not None and self._last_ended.report_id != report_id:
                return False
            self._last_ended = None
        self._publish_state()
        return True

    def running_cost(self, rental: Session, now: Optional[datetime] = None) -> Optional[Decimal]:
        device = self.devices.get(rental.device_id)
        if not device:
            return None
        try:
            return compute_cost(device.type, rental.game_type, rental.elapsed_ms(now or self.clock()), self._price_table)
        except ConfigurationError:
            return None

    def snapshot(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Read-only view of the lounge for the presentation layer."""
        with self._lock:
            now = now or self.clock()
            devices = []
            for device in self.devices.list_devices():
                data = device_to_dict(device)
                rental = self._sessions.get(device.device_id)
                data["session"] = session_to_dict(rental, now, self.running_cost(rental, now)) if rental else None
                devices.append(data)
            return {
                "now": now.isoformat(),
                "devices": devices,
                "prices": self._price_table.to_dict(),
                "lastEndedReport": self._last_ended.to_dict() if self._last_ended else None,
            }

    # ================== Administrative operations ==================
    def add_device(self, name: Optional[str] = None, device_type: DeviceType | str = DeviceType.PS4) -> Device:
        with self._lock:
            device = self.devices.add_device(name, device_type)
            self._publish_state()
            return device

    def update_device(self, device_id: str, patch: Mapping[str, Any]) -> Device:
        with self._lock:
            device = self.devices.update_device(device_id, patch)
            self._publish_state()
            return device

    def set_device_status(self, device_id: str, status: DeviceStatus | str) -> Device:
        with self._lock:
            device = self.devices.set_status(device_id, status)
            self._publish_state()
            return device

    def delete_device(self, device_id: str) -> None:
        with self._lock:
            self.devices.delete_device(device_id)
            self._publish_state()

    def update_prices(self, table: PriceTable | Mapping[str, Mapping[str, Any]]) -> PriceTable:
        """Replace the whole price table. Running sessions are billed at the new rates."""
        if not isinstance(table, PriceTable):
            table = PriceTable.from_mapping(table)
        with self._lock:
            self.repository.save_price_table(table)
            self._price_table = table
            logger.info("Price table updated")
            self._publish_state()
            return table

    def query_reports(self, day: date) -> List[Report]:
        with self._lock:
            return self.ledger.query_by_date(day)

    def summarize_reports(self, day: date) -> DailySummary:
        with self._lock:
            return self.ledger.summarize(day)

    def delete_all_reports(self) -> int:
        with self._lock:
            removed = self.ledger.delete_all()
            self._publish_state()
            return removed

    # ================== Helpers ==================
    def _require_session(self, device_id: str) -> Session:
        rental = self._sessions.get(device_id)
        if rental is None or not rental.is_active:
            raise NoActiveSessionError(device_id)
        return rental

    def _store_session(self, rental: Session) -> None:
        # in-memory state follows only a successful write
        self.repository.save_session(rental)
        self._sessions[rental.device_id] = rental

    def _publish(self, event_type: EventType, device_id: Optional[str], payload: Optional[Dict[str, Any]] = None) -> None:
        if self.event_bus is None:
            return
        self.event_bus.publish_sync(LoungeEvent(event_type=event_type, device_id=device_id, payload=payload))

    def _publish_state(self) -> None:
        self._publish(EventType.STATE_CHANGED, None)


def session_to_dict(rental: Session, now: datetime, running_cost: Optional[Decimal] = None) -> Dict[str, Any]:
    elapsed_ms = rental.elapsed_ms(now)
    return {
        "sessionId": rental.session_id,
        "deviceId": rental.device_id,
        "status": rental.status.value,
        "timeMode": rental.time_mode.value,
        "gameType": rental.game_type.value,
        "startTime": rental.start_time.isoformat(),
        "endTime": rental.end_time.isoformat() if rental.end_time else None,
        "elapsedMinutes": billed_minutes(elapsed_ms),
        "remainingSeconds": rental.remaining_seconds(now),
        "runningCost": float(running_cost) if running_cost is not None else None,
        "timeUpNotified": rental.time_up_notified,
        "showTimeUpModal": rental.show_time_up_modal,
    }


def _parse_choice(enum_cls: Type[E], raw: Any, label: str) -> E:
    if isinstance(raw, enum_cls):
        return raw
    text = str(raw or "").strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    raise InvalidRequestError(f"Unknown {label} {raw!r}")


def _positive_minutes(value: Any, label: str) -> int:
    if value is None or isinstance(value, bool):
        raise InvalidRequestError(f"{label} is required and must be a positive number of minutes")
    try:
        minutes = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"{label} must be a whole number of minutes") from exc
    if minutes != value or minutes <= 0:
        raise InvalidRequestError(f"{label} must be a positive whole number of minutes")
    return minutes
