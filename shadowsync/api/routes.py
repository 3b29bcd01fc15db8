"""FastAPI routes for the ShadowSync context engine.

Route map (all under ``/api/v1``):

    /ingest          POST  schedule an ingestion (202; 400 blank; 409 busy)
    /graph           GET   knowledge-graph nodes and links
    /vectors         GET   vector-space points
    /events          GET   event log, newest first
    /stats           GET   store sizes and the busy flag
    /health          GET   service status and simulated telemetry
    /agent/ask       POST  ask the context agent
    /agent/history   GET   agent chat transcript

Components are built once in ``shadowsync.main._build_all`` and read from
``app.state`` through ``Depends`` helpers.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from shadowsync import __version__
from shadowsync.api.schemas import (
    AskRequest,
    AskResponse,
    ErrorResponse,
    EventsResponse,
    GraphResponse,
    HealthResponse,
    HistoryResponse,
    IngestRequest,
    IngestResponse,
    StatsResponse,
    VectorsResponse,
)
from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.pipeline.orchestrator import IngestionOrchestrator
from shadowsync.services.context_agent import ContextAgent
from shadowsync.services.health_simulator import HealthSimulator
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


def _get_knowledge_store(request: Request) -> KnowledgeStore:
    return request.app.state.knowledge_store


def _get_vector_store(request: Request) -> VectorStore:
    return request.app.state.vector_store


def _get_event_log(request: Request) -> EventLog:
    return request.app.state.event_log


def _get_health(request: Request) -> HealthSimulator:
    return request.app.state.health_simulator


def _get_agent(request: Request) -> ContextAgent:
    return request.app.state.context_agent


def _get_llm(request: Request) -> ILLMProvider:
    return request.app.state.llm


OrchestratorDep = Annotated[IngestionOrchestrator, Depends(_get_orchestrator)]
KnowledgeStoreDep = Annotated[KnowledgeStore, Depends(_get_knowledge_store)]
VectorStoreDep = Annotated[VectorStore, Depends(_get_vector_store)]
EventLogDep = Annotated[EventLog, Depends(_get_event_log)]
HealthDep = Annotated[HealthSimulator, Depends(_get_health)]
AgentDep = Annotated[ContextAgent, Depends(_get_agent)]
LLMDep = Annotated[ILLMProvider, Depends(_get_llm)]


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/ingest",
    status_code=202,
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Ingest a piece of free-form context",
)
async def ingest(
    body: IngestRequest,
    orchestrator: OrchestratorDep,
    background_tasks: BackgroundTasks,
) -> IngestResponse:
    """Validate the text and run the ingestion pipeline in the background."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Text must not be blank")
    if not orchestrator.reserve():
        raise HTTPException(status_code=409, detail="An ingestion is already in progress")

    background_tasks.add_task(orchestrator.ingest_reserved, body.text)
    _logger.info("ingest_accepted", text_length=len(body.text))
    return IngestResponse(accepted=True, message="Ingestion scheduled.")


# ---------------------------------------------------------------------------
# Store views
# ---------------------------------------------------------------------------


@router.get("/graph", response_model=GraphResponse, summary="Knowledge graph")
async def get_graph(knowledge_store: KnowledgeStoreDep) -> GraphResponse:
    return GraphResponse(
        nodes=knowledge_store.nodes(),
        links=knowledge_store.edges(),
        node_count=knowledge_store.node_count,
        edge_count=knowledge_store.edge_count,
    )


@router.get("/vectors", response_model=VectorsResponse, summary="Vector-space points")
async def get_vectors(vector_store: VectorStoreDep) -> VectorsResponse:
    return VectorsResponse(points=vector_store.points(), count=vector_store.count)


@router.get("/events", response_model=EventsResponse, summary="Event log, newest first")
async def get_events(event_log: EventLogDep) -> EventsResponse:
    events = event_log.list()
    return EventsResponse(events=events, count=len(events))


@router.get("/stats", response_model=StatsResponse, summary="Store sizes and busy flag")
async def get_stats(
    knowledge_store: KnowledgeStoreDep,
    vector_store: VectorStoreDep,
    event_log: EventLogDep,
    orchestrator: OrchestratorDep,
) -> StatsResponse:
    return StatsResponse(
        nodes=knowledge_store.node_count,
        edges=knowledge_store.edge_count,
        vectors=vector_store.count,
        events=len(event_log),
        busy=orchestrator.is_busy,
    )


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(
    llm: LLMDep, simulator: HealthDep, verify: bool = False
) -> HealthResponse:
    """Report service status and the current simulated telemetry.

    ``status`` is ``"unconfigured"`` when no LLM credential is set: the
    service still runs, but every extraction fails closed.  With
    ``?verify=true`` a configured provider is also asked to confirm its
    credentials, which costs one round trip; ``status`` becomes
    ``"degraded"`` if it refuses.
    """
    configured = llm.is_available()
    verified: bool | None = None
    if verify and configured:
        verified = await llm.validate_credentials()
        _logger.info("llm_credentials_checked", provider=llm.get_provider_name(), valid=verified)

    if not configured:
        status = "unconfigured"
    elif verified is False:
        status = "degraded"
    else:
        status = "ok"
    return HealthResponse(
        status=status,
        version=__version__,
        provider=llm.get_provider_name(),
        llm_configured=configured,
        llm_verified=verified,
        metrics=simulator.snapshot,
    )


# ---------------------------------------------------------------------------
# Context agent
# ---------------------------------------------------------------------------


@router.post(
    "/agent/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Ask the context agent a question",
)
async def ask_agent(body: AskRequest, agent: AgentDep) -> AskResponse:
    reply = await agent.handle_query(body.message)
    if reply is None:
        raise HTTPException(status_code=400, detail="Message must not be blank")
    return AskResponse(reply=reply)


@router.get("/agent/history", response_model=HistoryResponse, summary="Agent transcript")
async def agent_history(agent: AgentDep) -> HistoryResponse:
    return HistoryResponse(messages=agent.history())
