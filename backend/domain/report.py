"""Completed-session summary written once at session end."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict
from uuid import uuid4

from .session import GameType


@dataclass(frozen=True)
class Report:
    device_id: str
    date: date
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    game_type: GameType
    cost: Decimal
    report_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reportId": self.report_id,
            "deviceId": self.device_id,
            "date": self.date.isoformat(),
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "durationMinutes": self.duration_minutes,
            "gameType": self.game_type.value,
            "cost": float(self.cost),
        }
