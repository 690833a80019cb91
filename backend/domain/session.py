"""Rental session model representing one device usage lifecycle."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import uuid4


class TimeMode(str, Enum):
    OPEN = "Open"
    TIMED = "Timed"


class GameType(str, Enum):
    """Player-count mode, selects the price table column."""

    SINGLE = "single"
    DOUBLE = "double"
    QUAD = "quad"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Session:
    """A running rental on one device.

    For timed sessions ``end_time`` is the scheduled expiry. It only drives
    the time-up signal; billing always uses the real stop instant.
    """

    device_id: str
    time_mode: TimeMode
    game_type: GameType
    start_time: datetime
    end_time: Optional[datetime] = None
    status: SessionStatus = SessionStatus.ACTIVE
    time_up_notified: bool = False
    # presentation flag, not billing state
    show_time_up_modal: bool = False
    session_id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def is_timed(self) -> bool:
        return self.time_mode == TimeMode.TIMED

    def is_expired(self, now: datetime) -> bool:
        return self.is_timed and self.end_time is not None and self.end_time <= now

    def needs_time_up(self, now: datetime) -> bool:
        """True when the scheduled expiry has passed and nobody was told yet."""
        return self.is_active and self.is_expired(now) and not self.time_up_notified

    def mark_time_up(self) -> None:
        self.time_up_notified = True
        self.show_time_up_modal = True

    def extend(self, additional_minutes: int, now: datetime) -> None:
        """Push the scheduled expiry; re-arm the time-up check if it is in the future again."""
        if self.end_time is None:
            return
        self.end_time = self.end_time + timedelta(minutes=additional_minutes)
        if self.end_time > now:
            self.time_up_notified = False
            self.show_time_up_modal = False

    def elapsed_ms(self, now: datetime) -> int:
        return max(0, (now - self.start_time) // timedelta(milliseconds=1))

    def remaining_seconds(self, now: datetime) -> Optional[int]:
        if not self.is_timed or self.end_time is None:
            return None
        return max(0, int((self.end_time - now).total_seconds()))
