"""WebSocket endpoint streaming event-log entries as they are recorded.

On connect the client receives the current log (newest first), then one
JSON message per new event.  Event-log listeners are synchronous, so the
listener only drops events onto a per-connection queue and a forwarding
task does the sending.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from shadowsync.models.events import SystemEvent
from shadowsync.stores.event_log import EventLog
from shadowsync.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


async def websocket_events(websocket: WebSocket) -> None:
    """Stream the event log to one client until it disconnects."""
    event_log: EventLog = websocket.app.state.event_log

    await websocket.accept()
    _logger.info("websocket_connected")

    queue: asyncio.Queue[SystemEvent] = asyncio.Queue()
    event_log.register_listener(queue.put_nowait)
    forwarder: asyncio.Task[None] | None = None

    try:
        await websocket.send_json(
            {
                "type": "snapshot",
                "events": [event.model_dump(mode="json") for event in event_log.list()],
            }
        )
        forwarder = asyncio.create_task(_forward(websocket, queue))

        # Blocks until the client goes away (raises WebSocketDisconnect).
        while True:
            await websocket.receive_text()

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected")

    finally:
        event_log.unregister_listener(queue.put_nowait)
        if forwarder is not None:
            forwarder.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await forwarder
        _logger.debug("websocket_listener_cleaned_up")


async def _forward(websocket: WebSocket, queue: asyncio.Queue[SystemEvent]) -> None:
    while True:
        event = await queue.get()
        try:
            await websocket.send_json({"type": "event", "event": event.model_dump(mode="json")})
        except (WebSocketDisconnect, RuntimeError) as exc:
            # The receive loop notices the disconnect and cleans up.
            _logger.debug("websocket_send_failed", error=str(exc))
            return
