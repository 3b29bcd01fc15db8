"""Chat façade over the memory stores.

The agent is a read-only consumer of the knowledge and vector stores.  Its
only writes are two RETRIEVE events per query and its own transcript.
"""

from __future__ import annotations

import structlog

from shadowsync.models.chat import ChatMessage, ChatRole
from shadowsync.models.events import EventType
from shadowsync.services.agent_query import AgentQueryService
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.logging import get_logger

GREETING = "ShadowSync Agent v2.5 Online. Waiting for query..."
RECENT_MEMORY_LIMIT = 5


class ContextAgent:
    """Builds a context summary from the stores and relays questions to the LLM."""

    def __init__(
        self,
        query_service: AgentQueryService,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
        event_log: EventLog,
    ) -> None:
        self._query_service = query_service
        self._knowledge_store = knowledge_store
        self._vector_store = vector_store
        self._event_log = event_log
        self._transcript: list[ChatMessage] = [
            ChatMessage(role=ChatRole.SYSTEM, content=GREETING)
        ]
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def build_context_summary(self) -> str:
        """Render the stores as the two-line context handed to the LLM.

        ``Entities:`` lists every node label; ``Recent Memories:`` lists the
        text of the last five vector points, oldest first.
        """
        entities = ", ".join(self._knowledge_store.labels())
        memories = " | ".join(
            point.content for point in self._vector_store.recent(RECENT_MEMORY_LIMIT)
        )
        return f"Entities: {entities}\nRecent Memories: {memories}"

    async def handle_query(self, message: str) -> ChatMessage | None:
        """Answer *message* and append both sides to the transcript.

        Blank messages are ignored and return ``None``.
        """
        query = message.strip()
        if not query:
            return None

        self._transcript.append(ChatMessage(role=ChatRole.USER, content=query))
        self._event_log.record(EventType.RETRIEVE, "Agent requesting memory access...")

        context_summary = self.build_context_summary()
        self._logger.info(
            "agent_query_start",
            query_length=len(query),
            nodes=self._knowledge_store.node_count,
            vectors=self._vector_store.count,
        )
        answer = await self._query_service.ask(query, context_summary)

        reply = ChatMessage(role=ChatRole.AGENT, content=answer)
        self._transcript.append(reply)
        self._event_log.record(EventType.RETRIEVE, "Agent response delivered.")
        return reply

    def history(self) -> list[ChatMessage]:
        return list(self._transcript)
