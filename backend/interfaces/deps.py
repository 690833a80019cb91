"""Shared singletons for settings, repository, event bus and the session engine.

The storage backend (sqlite / memory) comes from the `storage` section of
app_config.yaml, or the LOUNGE_STORAGE environment variable.
"""
from __future__ import annotations

import logging

from app.config import AppConfig, get_settings
from application.events import AsyncEventBus
from application.session_engine import SessionEngine
from infrastructure.memory_store import InMemoryLoungeRepository
from infrastructure.repository import LoungeRepository
from infrastructure.sqlite_repo import SQLiteLoungeRepository

logger = logging.getLogger(__name__)

settings = get_settings()


def _create_repository() -> LoungeRepository:
    backend = settings.database_backend
    if backend == "memory":
        return InMemoryLoungeRepository()
    elif backend == "sqlite":
        return SQLiteLoungeRepository(settings.database_url)
    else:
        raise ValueError(f"Unknown database backend: {backend}. Supported: sqlite, memory")


repository = _create_repository()
event_bus = AsyncEventBus()
engine = SessionEngine(settings, repository, event_bus)
engine.seed_devices(settings.seed_devices)

logger.info("Storage backend: %s", settings.database_backend)

# seconds between two engine.tick() calls of the startup clock loop
tick_interval: float = settings.tick_interval_seconds


def set_tick_interval(seconds: float) -> None:
    global tick_interval
    if seconds <= 0:
        raise ValueError("tick_interval must be positive")
    tick_interval = seconds


def apply_settings(new_settings: AppConfig) -> None:
    """Update global settings reference and refresh dependent singletons."""
    global settings
    settings = new_settings
    engine.update_config(new_settings)
    set_tick_interval(new_settings.tick_interval_seconds)


def reload_settings_from_disk() -> AppConfig:
    """Force re-read of app_config.yaml and propagate changes."""
    get_settings.cache_clear()
    fresh = get_settings()
    apply_settings(fresh)
    return fresh
