"""Pytest configuration and shared fixtures."""
import logging
import os
from datetime import datetime, timedelta
from typing import List

import pytest

# the API tests import interfaces.deps, keep it off the on-disk database
os.environ.setdefault("LOUNGE_STORAGE", "memory")

from app.config import AppConfig
from application.events import EventType, LoungeEvent
from application.session_engine import SessionEngine
from domain.device import DeviceType
from infrastructure.memory_store import InMemoryLoungeRepository

logging.basicConfig(level=logging.INFO)

T0 = datetime(2024, 5, 10, 18, 0, 0)

PRICING = {
    "PS4": {"single": 20, "double": 25, "quad": 35},
    "PS5": {"single": 25, "double": 30, "quad": 45},
}


class RecordingBus:
    """Stands in for AsyncEventBus; keeps every published event."""

    def __init__(self):
        self.events: List[LoungeEvent] = []

    def publish_sync(self, event: LoungeEvent) -> bool:
        self.events.append(event)
        return True

    def of_type(self, event_type: EventType) -> List[LoungeEvent]:
        return [event for event in self.events if event.event_type == event_type]


class FakeClock:
    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def settings() -> AppConfig:
    return AppConfig(
        raw={
            "version": "test",
            "pricing": PRICING,
            "clock": {"tick_interval_seconds": 1.0, "summary_dismiss_seconds": 5.0},
            "storage": {"backend": "memory"},
        }
    )


@pytest.fixture
def repository() -> InMemoryLoungeRepository:
    return InMemoryLoungeRepository()


@pytest.fixture
def bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(settings, repository, bus, clock) -> SessionEngine:
    return SessionEngine(settings, repository, bus, clock)


@pytest.fixture
def ps4(engine):
    return engine.add_device("Device 1", DeviceType.PS4)


@pytest.fixture
def ps5(engine):
    return engine.add_device("Device 2", DeviceType.PS5)
