"""Bounded, newest-first event log with listener notification.

Every stage of the ingestion pipeline (and the context agent) records a
:class:`SystemEvent` here.  The log keeps only the most recent ``max_events``
entries; recording one more silently drops the oldest, whatever its type.

Listeners follow the Observer pattern used for progress reporting elsewhere:

    Orchestrator --record()--> EventLog --callback(event)--> WebSocket queue
                                                        --> (any other listener)

Callbacks are plain synchronous callables.  A callback that raises is
logged and skipped, so a broken listener can never make ``record`` fail.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

import structlog

from shadowsync.models.events import EventType, SystemEvent
from shadowsync.utils.logging import get_logger

DEFAULT_MAX_EVENTS = 50

EventListener = Callable[[SystemEvent], None]


class EventLog:
    """Keeps the last ``max_events`` :class:`SystemEvent` records, newest first."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        if max_events < 1:
            raise ValueError("max_events must be at least 1")
        # appendleft + maxlen: newest at index 0, oldest falls off the right.
        self._events: deque[SystemEvent] = deque(maxlen=max_events)
        self._listeners: list[EventListener] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def max_events(self) -> int:
        return self._events.maxlen or DEFAULT_MAX_EVENTS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(self, event_type: EventType, message: str) -> SystemEvent:
        """Create, store and broadcast a new event.

        Parameters
        ----------
        event_type:
            The stage that produced the event.
        message:
            Human-readable description.

        Returns
        -------
        SystemEvent
            The stored event (fresh id, current UTC time, status ``success``).
        """
        event = SystemEvent(type=event_type, message=message)
        self._events.appendleft(event)

        self._logger.info(
            "event_recorded",
            event_type=event.type.value,
            message=message,
            size=len(self._events),
        )

        self._notify_listeners(event)
        return event

    def list(self) -> list[SystemEvent]:
        """Return all retained events, newest first."""
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def register_listener(self, callback: EventListener) -> None:
        """Call *callback* with every event recorded from now on."""
        if callback not in self._listeners:
            self._listeners.append(callback)
            self._logger.debug("listener_registered", total_listeners=len(self._listeners))

    def unregister_listener(self, callback: EventListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
            self._logger.debug(
                "listener_unregistered",
                remaining_listeners=len(self._listeners),
            )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _notify_listeners(self, event: SystemEvent) -> None:
        # Iterate over a copy: a listener may unregister itself.
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    event_id=event.id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
