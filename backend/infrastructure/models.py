"""SQLModel ORM tables mirroring the domain entities."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import SQLModel, Field

from domain.price_table import RATE_PLACES


class DeviceModel(SQLModel, table=True):
    device_id: str = Field(primary_key=True)
    name: str
    type: str = Field(default="PS4")
    status: str = Field(default="Available")
    created_at: datetime = Field(default_factory=datetime.now)


class SessionModel(SQLModel, table=True):
    # one row per device: at most one active session each
    device_id: str = Field(primary_key=True)
    session_id: str
    time_mode: str
    game_type: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str = Field(default="active")
    time_up_notified: bool = Field(default=False)
    show_time_up_modal: bool = Field(default=False)


class PriceModel(SQLModel, table=True):
    device_type: str = Field(primary_key=True)
    game_type: str = Field(primary_key=True)
    rate_per_hour: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=RATE_PLACES)


class ReportModel(SQLModel, table=True):
    report_id: str = Field(primary_key=True)
    device_id: str = Field(index=True)
    day: date = Field(index=True)
    start_time: datetime
    end_time: datetime
    duration_minutes: int = 0
    game_type: str
    cost: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
