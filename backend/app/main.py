"""FastAPI entry point for the console lounge session service."""
import asyncio
import contextlib
import logging

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interfaces import device_router, price_router, report_router, debug_router
from interfaces import deps
from interfaces.errors import install_error_handlers
from infrastructure.socketio_manager import sio, register_push_handlers

logging.basicConfig(
    level=deps.settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

register_push_handlers(deps.event_bus, deps.engine)

app = FastAPI(title="Console Lounge Session Service")

app.include_router(device_router)
app.include_router(price_router)
app.include_router(report_router)
app.include_router(debug_router)
install_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:5174"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Socket.IO mounted in front of FastAPI as one ASGI app
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)


@app.get("/health", tags=["health"])
def health_check() -> dict:
    """Expose a minimal health endpoint to help dev tooling."""
    return {"status": "ok", "configVersion": deps.settings.version}


# Background tasks ----------------------------------------------
@app.on_event("startup")
async def _start_background_tasks() -> None:  # pragma: no cover - runtime wiring
    """Start the event consumer and the clock loop that drives engine.tick()."""
    await deps.event_bus.start()

    async def _clock_loop():
        loop = asyncio.get_running_loop()
        while True:
            try:
                await loop.run_in_executor(None, deps.engine.tick)
            except Exception:
                logger.exception("Clock loop error")
            await asyncio.sleep(deps.tick_interval)

    app.state._clock_task = asyncio.create_task(_clock_loop())
    logger.info("Background tasks started: event bus + clock (%.2fs)", deps.tick_interval)


@app.on_event("shutdown")
async def _stop_background_tasks() -> None:  # pragma: no cover - runtime wiring
    # ticks run to completion in the executor; only the schedule needs cancelling
    clock_task = getattr(app.state, "_clock_task", None)
    if clock_task:
        clock_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await clock_task

    await deps.event_bus.stop()
    logger.info("Background tasks stopped")
