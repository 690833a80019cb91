"""Configuration loader that keeps all runtime constants centralized."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONFIG_PATH = Path(__file__).resolve().parent / "app_config.yaml"


@dataclass(frozen=True)
class AppConfig:
    """Strongly-typed wrapper over the raw YAML document."""

    raw: Dict[str, Any]

    @property
    def version(self) -> str:
        return str(self.raw.get("version", "v1"))

    @property
    def pricing(self) -> Dict[str, Any]:
        return self.raw.get("pricing", {})

    @property
    def clock(self) -> Dict[str, Any]:
        return self.raw.get("clock", {})

    @property
    def storage(self) -> Dict[str, Any]:
        return self.raw.get("storage", {})

    @property
    def devices(self) -> Dict[str, Any]:
        return self.raw.get("devices", {})

    @property
    def logging(self) -> Dict[str, Any]:
        return self.raw.get("logging", {})

    @property
    def database_backend(self) -> str:
        override = os.environ.get("LOUNGE_STORAGE")
        if override:
            return override
        return str(self.storage.get("backend", "sqlite"))

    @property
    def database_url(self) -> str:
        return str(self.storage.get("database_url", "sqlite:///lounge.db"))

    @property
    def tick_interval_seconds(self) -> float:
        return float(self.clock.get("tick_interval_seconds", 1.0))

    @property
    def summary_dismiss_seconds(self) -> float:
        return float(self.clock.get("summary_dismiss_seconds", 5.0))

    @property
    def seed_devices(self) -> List[Dict[str, Any]]:
        return list(self.devices.get("seed", []) or [])

    @property
    def log_level(self) -> str:
        return str(self.logging.get("level", "INFO")).upper()


@lru_cache(maxsize=1)
def get_settings(path: Optional[Path] = None) -> AppConfig:
    """Load configuration once per process."""

    env_path = os.environ.get("LOUNGE_CONFIG")
    config_path = path or (Path(env_path) if env_path else CONFIG_PATH)
    data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):  # pragma: no cover - invalid file guard
        raise ValueError("Configuration file must define a mapping at the top level.")
    return AppConfig(raw=data)
