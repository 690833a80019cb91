"""SQLite-backed repository implementation."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlmodel import select

from domain.device import Device, DeviceStatus, DeviceType
from domain.price_table import PriceTable
from domain.report import Report
from domain.session import GameType, Session, SessionStatus, TimeMode
from .repository import LoungeRepository
from .database import create_db_engine, init_db, session_factory
from .models import DeviceModel, PriceModel, ReportModel, SessionModel

CENT = Decimal("0.01")


class SQLiteLoungeRepository(LoungeRepository):
    def __init__(self, database_url: str = "sqlite:///lounge.db"):
        self.engine = create_db_engine(database_url)
        init_db(self.engine)
        self.SessionLocal = session_factory(self.engine)

    # Devices --------------------------------------------------------------
    def get_device(self, device_id: str) -> Optional[Device]:
        with self.SessionLocal() as session:
            model = session.get(DeviceModel, device_id)
            if not model:
                return None
            return self._device_from_model(model)

    def list_devices(self) -> Iterable[Device]:
        with self.SessionLocal() as session:
            statement = select(DeviceModel).order_by(DeviceModel.created_at.asc())
            models = session.exec(statement).all()
            return [self._device_from_model(model) for model in models]

    def save_device(self, device: Device) -> None:
        with self.SessionLocal() as session, session.begin():
            self._write_device(session, device)

    def delete_device(self, device_id: str) -> None:
        with self.SessionLocal() as session, session.begin():
            model = session.get(DeviceModel, device_id)
            if model:
                session.delete(model)

    # Sessions -------------------------------------------------------------
    def get_session(self, device_id: str) -> Optional[Session]:
        with self.SessionLocal() as session:
            model = session.get(SessionModel, device_id)
            if not model:
                return None
            return self._session_from_model(model)

    def list_sessions(self) -> Iterable[Session]:
        with self.SessionLocal() as session:
            models = session.exec(select(SessionModel)).all()
            return [self._session_from_model(model) for model in models]

    def save_session(self, rental: Session) -> None:
        with self.SessionLocal() as session, session.begin():
            self._write_session(session, rental)

    def remove_session(self, device_id: str) -> None:
        with self.SessionLocal() as session, session.begin():
            self._delete_session(session, device_id)

    # Prices ---------------------------------------------------------------
    def get_price_table(self) -> Optional[PriceTable]:
        with self.SessionLocal() as session:
            models = session.exec(select(PriceModel)).all()
            if not models:
                return None
            data: dict = {}
            for model in models:
                data.setdefault(model.device_type, {})[model.game_type] = model.rate_per_hour
            return PriceTable.from_mapping(data)

    def save_price_table(self, table: PriceTable) -> None:
        with self.SessionLocal() as session, session.begin():
            for model in session.exec(select(PriceModel)).all():
                session.delete(model)
            session.flush()
            for device_type, tiers in table.rates.items():
                for game_type, rate in tiers.items():
                    session.add(
                        PriceModel(
                            device_type=device_type.value,
                            game_type=game_type.value,
                            rate_per_hour=rate,
                        )
                    )

    # Reports --------------------------------------------------------------
    def add_report(self, report: Report) -> None:
        with self.SessionLocal() as session, session.begin():
            self._write_report(session, report)

    def list_reports(self, day: Optional[date] = None) -> Iterable[Report]:
        with self.SessionLocal() as session:
            statement = select(ReportModel).order_by(ReportModel.start_time.asc())
            if day is not None:
                statement = statement.where(ReportModel.day == day)
            models = session.exec(statement).all()
            return [self._report_from_model(model) for model in models]

    def delete_all_reports(self) -> int:
        with self.SessionLocal() as session, session.begin():
            models = session.exec(select(ReportModel)).all()
            for model in models:
                session.delete(model)
            return len(models)

    # Transitions ------------------------------------------------------------
    def commit_session_start(self, rental: Session, device: Device) -> None:
        with self.SessionLocal() as session, session.begin():
            self._write_session(session, rental)
            self._write_device(session, device)

    def commit_session_end(self, report: Report, device: Device) -> None:
        with self.SessionLocal() as session, session.begin():
            self._write_report(session, report)
            self._delete_session(session, device.device_id)
            self._write_device(session, device)

    # Helpers --------------------------------------------------------------
    def _write_device(self, session, device: Device) -> None:
        model = session.get(DeviceModel, device.device_id)
        if not model:
            model = DeviceModel(device_id=device.device_id, name=device.name)
        model.name = device.name
        model.type = device.type.value
        model.status = device.status.value
        session.add(model)

    def _write_session(self, session, rental: Session) -> None:
        model = session.get(SessionModel, rental.device_id)
        if not model:
            model = SessionModel(
                device_id=rental.device_id,
                session_id=rental.session_id,
                time_mode=rental.time_mode.value,
                game_type=rental.game_type.value,
                start_time=rental.start_time,
            )
        model.session_id = rental.session_id
        model.time_mode = rental.time_mode.value
        model.game_type = rental.game_type.value
        model.start_time = rental.start_time
        model.end_time = rental.end_time
        model.status = rental.status.value
        model.time_up_notified = rental.time_up_notified
        model.show_time_up_modal = rental.show_time_up_modal
        session.add(model)

    def _delete_session(self, session, device_id: str) -> None:
        model = session.get(SessionModel, device_id)
        if model:
            session.delete(model)

    def _write_report(self, session, report: Report) -> None:
        session.add(
            ReportModel(
                report_id=report.report_id,
                device_id=report.device_id,
                day=report.date,
                start_time=report.start_time,
                end_time=report.end_time,
                duration_minutes=report.duration_minutes,
                game_type=report.game_type.value,
                cost=report.cost,
            )
        )

    def _device_from_model(self, model: DeviceModel) -> Device:
        return Device(
            device_id=model.device_id,
            name=model.name,
            type=DeviceType(model.type),
            status=DeviceStatus(model.status),
        )

    def _session_from_model(self, model: SessionModel) -> Session:
        return Session(
            device_id=model.device_id,
            time_mode=TimeMode(model.time_mode),
            game_type=GameType(model.game_type),
            start_time=model.start_time,
            end_time=model.end_time,
            status=SessionStatus(model.status),
            time_up_notified=model.time_up_notified,
            show_time_up_modal=model.show_time_up_modal,
            session_id=model.session_id,
        )

    def _report_from_model(self, model: ReportModel) -> Report:
        return Report(
            device_id=model.device_id,
            date=model.day,
            start_time=model.start_time,
            end_time=model.end_time,
            duration_minutes=model.duration_minutes,
            game_type=GameType(model.game_type),
            cost=Decimal(model.cost).quantize(CENT),
            report_id=model.report_id,
        )
