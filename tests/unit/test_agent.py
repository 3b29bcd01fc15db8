"""Unit tests for AgentQueryService and ContextAgent."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from shadowsync.interfaces.cache_provider import ICacheProvider
from shadowsync.models.chat import ChatRole
from shadowsync.models.events import EventType
from shadowsync.models.memory import MemoryNode, VectorPoint
from shadowsync.providers.cache.memory_cache import MemoryCacheProvider
from shadowsync.services.agent_query import (
    EMPTY_REPLY,
    MISSING_KEY_REPLY,
    QUERY_ERROR_REPLY,
    AgentQueryService,
)
from shadowsync.services.context_agent import GREETING, ContextAgent
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.errors import LLMError


# ======================================================================
# AgentQueryService
# ======================================================================


class TestAgentQueryService:
    @pytest.mark.asyncio
    async def test_returns_llm_answer(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(return_value="  Bob is a person.  ")
        service = AgentQueryService(llm=mock_llm_provider)

        answer = await service.ask("Who is Bob?", "Entities: Bob\nRecent Memories: ")

        assert answer == "Bob is a person."
        prompt = mock_llm_provider.complete.call_args.kwargs["user_prompt"]
        assert "CONTEXT LOG:\nEntities: Bob" in prompt
        assert prompt.endswith("USER QUERY:\nWho is Bob?")

    @pytest.mark.asyncio
    async def test_missing_key(self, unconfigured_llm_provider: MagicMock) -> None:
        service = AgentQueryService(llm=unconfigured_llm_provider)
        assert await service.ask("q", "ctx") == MISSING_KEY_REPLY
        unconfigured_llm_provider.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_error(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(side_effect=LLMError("rate limited"))
        service = AgentQueryService(llm=mock_llm_provider)
        assert await service.ask("q", "ctx") == QUERY_ERROR_REPLY

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(side_effect=RuntimeError("socket closed"))
        service = AgentQueryService(llm=mock_llm_provider)
        assert await service.ask("q", "ctx") == QUERY_ERROR_REPLY

    @pytest.mark.asyncio
    async def test_empty_reply(self, mock_llm_provider: MagicMock) -> None:
        mock_llm_provider.complete = AsyncMock(return_value="   ")
        service = AgentQueryService(llm=mock_llm_provider)
        assert await service.ask("q", "ctx") == EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_answers_are_cached_per_query_and_context(
        self, mock_llm_provider: MagicMock
    ) -> None:
        mock_llm_provider.complete = AsyncMock(return_value="answer")
        service = AgentQueryService(llm=mock_llm_provider, cache=MemoryCacheProvider())

        await service.ask("q", "ctx")
        await service.ask("q", "ctx")
        assert mock_llm_provider.complete.await_count == 1

        await service.ask("q", "new ctx")
        assert mock_llm_provider.complete.await_count == 2

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, mock_llm_provider: MagicMock) -> None:
        cache = MagicMock(spec=ICacheProvider)
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock()
        mock_llm_provider.complete = AsyncMock(side_effect=LLMError("down"))
        service = AgentQueryService(llm=mock_llm_provider, cache=cache)

        await service.ask("q", "ctx")

        cache.set.assert_not_called()


# ======================================================================
# ContextAgent
# ======================================================================


class TestContextAgent:
    @pytest.fixture()
    def query_service(self) -> MagicMock:
        service = MagicMock(spec=AgentQueryService)
        service.ask = AsyncMock(return_value="The launch is next week.")
        return service

    @pytest.fixture()
    def agent(
        self,
        query_service: MagicMock,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
        event_log: EventLog,
    ) -> ContextAgent:
        return ContextAgent(query_service, knowledge_store, vector_store, event_log)

    def test_transcript_seeded_with_greeting(self, agent: ContextAgent) -> None:
        history = agent.history()
        assert len(history) == 1
        assert history[0].role == ChatRole.SYSTEM
        assert history[0].content == GREETING

    def test_context_summary_format(
        self,
        agent: ContextAgent,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
    ) -> None:
        knowledge_store.upsert_nodes(
            [MemoryNode.from_label("Bob"), MemoryNode.from_label("Launch")]
        )
        for i in range(7):
            vector_store.append(VectorPoint(content=f"memory {i}"))

        assert agent.build_context_summary() == (
            "Entities: Bob, Launch\n"
            "Recent Memories: memory 2 | memory 3 | memory 4 | memory 5 | memory 6"
        )

    def test_context_summary_when_empty(self, agent: ContextAgent) -> None:
        assert agent.build_context_summary() == "Entities: \nRecent Memories: "

    @pytest.mark.asyncio
    async def test_handle_query_round_trip(
        self,
        agent: ContextAgent,
        query_service: MagicMock,
        knowledge_store: KnowledgeStore,
        event_log: EventLog,
    ) -> None:
        knowledge_store.upsert_nodes([MemoryNode.from_label("Launch")])

        reply = await agent.handle_query("  When is the launch?  ")

        assert reply is not None
        assert reply.role == ChatRole.AGENT
        assert reply.content == "The launch is next week."
        query_service.ask.assert_awaited_once_with(
            "When is the launch?", "Entities: Launch\nRecent Memories: "
        )

        roles = [m.role for m in agent.history()]
        assert roles == [ChatRole.SYSTEM, ChatRole.USER, ChatRole.AGENT]

        events = event_log.list()
        assert [(e.type, e.message) for e in events] == [
            (EventType.RETRIEVE, "Agent response delivered."),
            (EventType.RETRIEVE, "Agent requesting memory access..."),
        ]

    @pytest.mark.asyncio
    async def test_blank_query_ignored(
        self, agent: ContextAgent, query_service: MagicMock, event_log: EventLog
    ) -> None:
        assert await agent.handle_query("   ") is None
        query_service.ask.assert_not_called()
        assert len(agent.history()) == 1
        assert len(event_log) == 0

    @pytest.mark.asyncio
    async def test_agent_does_not_write_stores(
        self,
        agent: ContextAgent,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
    ) -> None:
        await agent.handle_query("anything")
        assert knowledge_store.node_count == 0
        assert vector_store.count == 0
