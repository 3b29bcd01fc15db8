"""ShadowSync domain models -- re-exports all public model classes.

    - memory.py     -- knowledge-graph nodes/links and vector points
    - events.py     -- event-log records
    - health.py     -- synthetic health snapshot
    - extraction.py -- structured LLM extraction result
    - chat.py       -- context-agent transcript
"""

from __future__ import annotations

from shadowsync.models.chat import ChatMessage, ChatRole
from shadowsync.models.events import EventStatus, EventType, SystemEvent
from shadowsync.models.extraction import (
    ExtractedEntity,
    ExtractedRelationship,
    ProcessingResult,
    VectorCoordinate,
)
from shadowsync.models.health import HealthSnapshot
from shadowsync.models.memory import MemoryLink, MemoryNode, NodeType, VectorPoint

__all__ = [
    "ChatMessage",
    "ChatRole",
    "EventStatus",
    "EventType",
    "ExtractedEntity",
    "ExtractedRelationship",
    "HealthSnapshot",
    "MemoryLink",
    "MemoryNode",
    "NodeType",
    "ProcessingResult",
    "SystemEvent",
    "VectorCoordinate",
    "VectorPoint",
]
