"""Shared pytest fixtures for the ShadowSync test suite."""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.pipeline.orchestrator import IngestionOrchestrator
from shadowsync.services.context_extractor import ContextExtractor
from shadowsync.services.health_simulator import HealthSimulator
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def extraction_payload() -> dict[str, Any]:
    """A well-formed extraction reply for "Meeting with Bob about launch"."""
    return {
        "entities": [{"name": "Bob", "type": "Person"}],
        "relationships": [{"source": "Bob", "target": "Launch", "relation": "discusses"}],
        "vectorCoordinates": {"x": 40, "y": -20, "category": "Work"},
        "summary": "A meeting with Bob about the launch.",
    }


@pytest.fixture
def mock_llm_provider(extraction_payload: dict[str, Any]) -> MagicMock:
    """A configured LLM provider whose completions return *extraction_payload*."""
    provider = MagicMock(spec=ILLMProvider)
    provider.complete = AsyncMock(return_value=json.dumps(extraction_payload))
    provider.get_provider_name.return_value = "mock-llm"
    provider.is_available.return_value = True
    provider.validate_credentials = AsyncMock(return_value=True)
    return provider


@pytest.fixture
def unconfigured_llm_provider() -> MagicMock:
    """An LLM provider without credentials."""
    provider = MagicMock(spec=ILLMProvider)
    provider.complete = AsyncMock(side_effect=AssertionError("must not be called"))
    provider.get_provider_name.return_value = "openai"
    provider.is_available.return_value = False
    return provider


@pytest.fixture
def knowledge_store() -> KnowledgeStore:
    return KnowledgeStore()


@pytest.fixture
def vector_store() -> VectorStore:
    return VectorStore()


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def health_simulator(knowledge_store: KnowledgeStore, vector_store: VectorStore) -> HealthSimulator:
    return HealthSimulator(knowledge_store, vector_store, tick_interval=0.01, rng=random.Random(42))


@pytest.fixture
def orchestrator(
    mock_llm_provider: MagicMock,
    knowledge_store: KnowledgeStore,
    vector_store: VectorStore,
    event_log: EventLog,
    health_simulator: HealthSimulator,
) -> IngestionOrchestrator:
    """An orchestrator wired to the mock LLM with all delays set to zero."""
    return IngestionOrchestrator(
        extractor=ContextExtractor(mock_llm_provider),
        knowledge_store=knowledge_store,
        vector_store=vector_store,
        event_log=event_log,
        health=health_simulator,
        normalize_delay=0,
        sync_delay=0,
        mesh_delay=0,
    )
