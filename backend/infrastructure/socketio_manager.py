"""Socket.IO manager - pushes lounge state to connected dashboards.

Flow:
    SessionEngine -> AsyncEventBus -> handlers registered here -> clients
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

import socketio

from application.events import AsyncEventBus, EventType, LoungeEvent

if TYPE_CHECKING:
    from application.session_engine import SessionEngine

logger = logging.getLogger(__name__)

LOUNGE_ROOM = "lounge"

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=["http://localhost:5173", "http://localhost:5174"],
    logger=False,
    engineio_logger=False,
)

_engine: Optional["SessionEngine"] = None


def set_session_engine(engine: "SessionEngine") -> None:
    """Engine used to build the state snapshot that is pushed."""
    global _engine
    _engine = engine


# ========== Socket.IO event handlers ==========

@sio.event
async def connect(sid: str, environ: dict) -> None:
    logger.debug("Client connected: %s", sid)


@sio.event
async def disconnect(sid: str) -> None:
    logger.debug("Client disconnected: %s", sid)


@sio.event
async def subscribe_lounge(sid: str, data: Optional[dict] = None) -> None:
    """Join the lounge room and receive the current state right away."""
    await sio.enter_room(sid, LOUNGE_ROOM)
    await push_lounge_state()


@sio.event
async def unsubscribe_lounge(sid: str, data: Optional[dict] = None) -> None:
    await sio.leave_room(sid, LOUNGE_ROOM)


# ========== Push functions ==========

async def push_lounge_state() -> None:
    if not _engine:
        return
    # snapshot() waits on the engine lock and may hit the database
    loop = asyncio.get_running_loop()
    snapshot = await loop.run_in_executor(None, _engine.snapshot)
    await sio.emit("lounge_state", snapshot, room=LOUNGE_ROOM)


async def push_time_up(device_id: str) -> None:
    await sio.emit("time_up", {"deviceId": device_id}, room=LOUNGE_ROOM)


async def push_session_ended(report: dict) -> None:
    await sio.emit("session_ended", report, room=LOUNGE_ROOM)


# ========== Event bus wiring ==========

def register_push_handlers(event_bus: AsyncEventBus, engine: "SessionEngine") -> None:
    """Subscribe the push layer to engine events.

    The end-of-session summary is cleared again after
    ``engine.config.summary_dismiss_seconds`` (read per report, so a config
    reload applies) with a deferred callback on the running loop.
    """
    set_session_engine(engine)

    async def _on_state_changed(event: LoungeEvent) -> None:
        await push_lounge_state()

    async def _on_time_up(event: LoungeEvent) -> None:
        if event.device_id:
            await push_time_up(event.device_id)

    async def _on_session_ended(event: LoungeEvent) -> None:
        report = (event.payload or {}).get("report") or {}
        await push_session_ended(report)
        report_id = report.get("reportId")
        dismiss_after = engine.config.summary_dismiss_seconds
        if report_id and dismiss_after > 0:
            loop = asyncio.get_running_loop()
            loop.call_later(dismiss_after, engine.dismiss_summary, report_id)

    event_bus.register_handler(EventType.STATE_CHANGED, _on_state_changed)
    event_bus.register_handler(EventType.TIME_UP, _on_time_up)
    event_bus.register_handler(EventType.SESSION_ENDED, _on_session_ended)
