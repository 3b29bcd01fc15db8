"""Event-log records.

A :class:`SystemEvent` is an immutable note that some stage of the pipeline
(or the context agent) did something.  The log keeps only the most recent
ones; see :class:`shadowsync.stores.event_log.EventLog`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Pipeline stage (or subsystem) that produced an event."""

    CAPTURE = "CAPTURE"     # raw text received
    PROCESS = "PROCESS"     # normalisation / extraction outcome
    EMBED = "EMBED"         # vector point generated
    STORE = "STORE"         # knowledge graph updated
    SYNC = "SYNC"           # replication / mesh notices
    RETRIEVE = "RETRIEVE"   # context agent read the stores
    SYSTEM = "SYSTEM"       # lifecycle (boot, shutdown)


class EventStatus(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Event status.

    Only SUCCESS is ever assigned today: events are recorded once their
    stage has finished.  PENDING and PROCESSING are reserved for staged
    reporting.
    """

    PENDING = "pending"
    SUCCESS = "success"
    PROCESSING = "processing"


class SystemEvent(BaseModel):
    """One recorded pipeline or system occurrence."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: EventType
    message: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    status: EventStatus = EventStatus.SUCCESS
