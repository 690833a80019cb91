"""Device administration and per-device session control."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from application.device_registry import device_to_dict
from application.session_engine import session_to_dict
from interfaces import deps

router = APIRouter(prefix="/devices", tags=["devices"])


class AddDeviceRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Defaults to 'Device N'")
    type: str = Field(default="PS4", description="PS4 or PS5")


class UpdateDeviceRequest(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = Field(default=None, description="Available or Maintenance")


class StartSessionRequest(BaseModel):
    timeMode: str = Field(..., description="Open or Timed")
    gameType: str = Field(..., description="single, double or quad")
    durationMinutes: Optional[int] = Field(default=None, description="Required for Timed sessions")


class ExtendSessionRequest(BaseModel):
    additionalMinutes: int


def _device_state(device_id: str) -> Dict[str, Any]:
    engine = deps.engine
    device = engine.devices.require(device_id)
    data = device_to_dict(device)
    rental = engine.get_session(device_id)
    now = engine.clock()
    data["session"] = session_to_dict(rental, now, engine.running_cost(rental, now)) if rental else None
    return data


# ========== Devices ==========
@router.get("")
def list_devices() -> List[Dict[str, Any]]:
    return [_device_state(device.device_id) for device in deps.engine.devices.list_devices()]


@router.post("", status_code=201)
def add_device(payload: Optional[AddDeviceRequest] = None) -> Dict[str, Any]:
    payload = payload or AddDeviceRequest()
    device = deps.engine.add_device(payload.name, payload.type)
    return device_to_dict(device)


@router.patch("/{device_id}")
def update_device(device_id: str, payload: UpdateDeviceRequest) -> Dict[str, Any]:
    patch = {key: value for key, value in payload.model_dump().items() if value is not None}
    device = deps.engine.update_device(device_id, patch)
    return device_to_dict(device)


@router.delete("/{device_id}", status_code=204)
def delete_device(device_id: str) -> Response:
    deps.engine.delete_device(device_id)
    return Response(status_code=204)


# ========== Sessions ==========
@router.get("/{device_id}/state")
def device_state(device_id: str) -> Dict[str, Any]:
    return _device_state(device_id)


@router.post("/{device_id}/session/start")
def start_session(device_id: str, payload: StartSessionRequest) -> Dict[str, Any]:
    deps.engine.start_session(device_id, payload.timeMode, payload.gameType, payload.durationMinutes)
    return _device_state(device_id)


@router.post("/{device_id}/session/extend")
def extend_session(device_id: str, payload: ExtendSessionRequest) -> Dict[str, Any]:
    deps.engine.extend_session(device_id, payload.additionalMinutes)
    return _device_state(device_id)


@router.post("/{device_id}/session/end")
def end_session(device_id: str) -> Dict[str, Any]:
    report = deps.engine.end_session(device_id)
    return report.to_dict()


@router.post("/{device_id}/session/acknowledge-time-up")
def acknowledge_time_up(device_id: str) -> Dict[str, Any]:
    deps.engine.acknowledge_time_up(device_id)
    return _device_state(device_id)
