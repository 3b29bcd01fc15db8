"""Pydantic request/response schemas for the ShadowSync API.

Request schemas end with ``Request``, response schemas with ``Response``.
Domain records (nodes, links, points, events, chat messages) are returned
as-is; they are already Pydantic models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from shadowsync.models.chat import ChatMessage
from shadowsync.models.events import SystemEvent
from shadowsync.models.health import HealthSnapshot
from shadowsync.models.memory import MemoryLink, MemoryNode, VectorPoint


class IngestRequest(BaseModel):
    """Free-form text to push through the ingestion pipeline."""

    text: str = Field(description="Raw context, e.g. a note or meeting summary")


class IngestResponse(BaseModel):
    """Acknowledgement that an ingestion was scheduled."""

    accepted: bool
    message: str


class GraphResponse(BaseModel):
    """The whole knowledge graph."""

    nodes: list[MemoryNode]
    links: list[MemoryLink]
    node_count: int
    edge_count: int


class VectorsResponse(BaseModel):
    points: list[VectorPoint]
    count: int


class EventsResponse(BaseModel):
    """Event log, newest first."""

    events: list[SystemEvent]
    count: int


class StatsResponse(BaseModel):
    nodes: int
    edges: int
    vectors: int
    events: int
    busy: bool


class HealthResponse(BaseModel):
    """Application health check plus the simulated telemetry snapshot."""

    status: str
    version: str
    provider: str
    llm_configured: bool
    llm_verified: bool | None = None
    metrics: HealthSnapshot


class AskRequest(BaseModel):
    """A chat message for the context agent."""

    message: str


class AskResponse(BaseModel):
    reply: ChatMessage


class HistoryResponse(BaseModel):
    messages: list[ChatMessage]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
