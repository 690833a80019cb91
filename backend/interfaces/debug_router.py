"""Debug routes - manual clock control and config reload."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, field_validator

from interfaces import deps

router = APIRouter(prefix="/debug", tags=["debug"])


class TickRequest(BaseModel):
    now: Optional[datetime] = Field(default=None, description="Defaults to the wall clock")

    @field_validator("now")
    @classmethod
    def as_local_naive(cls, value: Optional[datetime]) -> Optional[datetime]:
        # session times are naive local time
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value


class TickIntervalRequest(BaseModel):
    seconds: float = Field(..., gt=0)


@router.post("/tick")
def tick(payload: Optional[TickRequest] = None) -> Dict[str, Any]:
    """Run one expiry scan immediately, optionally at a given instant."""
    fired = deps.engine.tick(payload.now if payload else None)
    return {"timeUp": fired}


@router.post("/tick-interval")
def set_tick_interval(payload: TickIntervalRequest) -> Dict[str, Any]:
    deps.set_tick_interval(payload.seconds)
    return {"tickInterval": deps.tick_interval}


@router.post("/reload-config")
def reload_config() -> Dict[str, Any]:
    try:
        fresh = deps.reload_settings_from_disk()
    except (OSError, ValueError) as exc:
        raise HTTPException(status_code=500, detail=f"Config reload failed: {exc}") from exc
    return {"configVersion": fresh.version, "tickInterval": deps.tick_interval}
