"""Outbound lounge events + the async bus that carries them to the push layer."""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Coroutine, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event types published by the session engine."""

    TIME_UP = "TIME_UP"                # timed session reached its scheduled end
    SESSION_ENDED = "SESSION_ENDED"    # completed report, shown transiently
    STATE_CHANGED = "STATE_CHANGED"    # any device/session/price/report mutation


@dataclass
class LoungeEvent:
    event_type: EventType
    device_id: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    event_id: str = field(default_factory=lambda: str(uuid4()))


EventHandler = Callable[[LoungeEvent], Coroutine[Any, Any, None]]


class AsyncEventBus:
    """
    Buffers events in an asyncio.Queue; a consumer task dispatches them to
    async handlers. The engine publishes synchronously and never waits on a
    handler.
    """

    def __init__(self, maxsize: int = 1000):
        self._queue: asyncio.Queue[LoungeEvent] = asyncio.Queue(maxsize=maxsize)
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._running: bool = False
        self._consumer_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[int] = None

    def register_handler(self, event_type: EventType, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unregister_handler(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
            except ValueError:
                pass

    async def publish(self, event: LoungeEvent) -> None:
        await self._queue.put(event)

    def publish_sync(self, event: LoungeEvent) -> bool:
        """
        Publish from synchronous code.

        Calls from a worker thread (FastAPI runs sync endpoints in a pool)
        are handed to the loop thread, since asyncio.Queue is not thread-safe.
        Returns False if the event had to be dropped.
        """
        loop = self._loop
        if loop is not None and loop.is_running() and threading.get_ident() != self._loop_thread:
            loop.call_soon_threadsafe(self._put_nowait, event)
            return True
        return self._put_nowait(event)

    def _put_nowait(self, event: LoungeEvent) -> bool:
        try:
            self._queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            # drop the oldest event to make room
            try:
                self._queue.get_nowait()
                self._queue.put_nowait(event)
                return True
            except (asyncio.QueueEmpty, asyncio.QueueFull):
                logger.warning("Event bus full, dropped %s", event.event_type.value)
                return False

    async def _dispatch(self, event: LoungeEvent) -> None:
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                await handler(event)
            except Exception:
                logger.exception("Handler error for %s", event.event_type.value)

    async def _consume_loop(self) -> None:
        while self._running:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break
            await self._dispatch(event)
            self._queue.task_done()

    async def drain(self) -> int:
        """Dispatch everything queued right now; returns the number of events handled."""
        handled = 0
        while not self._queue.empty():
            event = self._queue.get_nowait()
            await self._dispatch(event)
            self._queue.task_done()
            handled += 1
        return handled

    async def start(self) -> None:
        if self._running:
            return
        self._loop = asyncio.get_running_loop()
        self._loop_thread = threading.get_ident()
        self._running = True
        self._consumer_task = asyncio.create_task(self._consume_loop())
        logger.info("Event bus started")

    async def stop(self) -> None:
        self._running = False
        if self._consumer_task:
            self._consumer_task.cancel()
            try:
                await self._consumer_task
            except asyncio.CancelledError:
                pass
            self._consumer_task = None
        self._loop = None
        self._loop_thread = None
        logger.info("Event bus stopped")

    def pending_count(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._running
