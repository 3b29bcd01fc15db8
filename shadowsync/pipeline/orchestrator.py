"""Ingestion orchestrator: raw text in, knowledge-graph and vector facts out.

One call to :meth:`IngestionOrchestrator.ingest` runs the whole pipeline:

    1. reject blank input (no event, no state change)
    2. mark busy and spike the health buffer
    3. CAPTURE event
    4. staged PROCESS "normalizing" event, ``normalize_delay`` seconds later
    5. extraction through the LLM gateway
    6. success: map to nodes/links/point, write the stores, STORE + EMBED
       events, refresh storage health, SYNC event ``sync_delay`` later
       failure: one PROCESS failure event, nothing written
    7. mark not-busy (always)

The staged PROCESS event runs concurrently with the gateway call, but the
outcome events are recorded only after it has landed, so the log always
reads CAPTURE -> normalizing -> outcome.

Writes are all-or-nothing: the result is fully mapped before the first
store is touched, and the store writes themselves cannot fail.

Deferred events (the post-store SYNC and the boot-time mesh announcement)
are tracked tasks.  :meth:`drain` waits for them; :meth:`shutdown` cancels
them, so the application never leaves a timer behind.
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum

import structlog

from shadowsync.models.events import EventType
from shadowsync.models.extraction import ProcessingResult
from shadowsync.models.memory import MemoryLink, MemoryNode, NodeType, VectorPoint
from shadowsync.services.context_extractor import ContextExtractor
from shadowsync.services.health_simulator import HealthSimulator
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.logging import get_logger

DEFAULT_PREVIEW_CHARS = 30
DEFAULT_NORMALIZE_DELAY = 0.4
DEFAULT_SYNC_DELAY = 0.8
DEFAULT_MESH_DELAY = 1.2

NORMALIZING_MESSAGE = "Normalizing input data structure..."
SUCCESS_MESSAGE = "Context extracted successfully."
FAILURE_MESSAGE = "Failed to extract structure. Check API Key."
SYNC_MESSAGE = "Replicating state to connected agents..."


class IngestStatus(str, Enum):  # noqa: UP042
    """What happened to one ingest call."""

    REJECTED = "rejected"
    FAILED = "failed"
    STORED = "stored"


class IngestionOrchestrator:
    """Coordinates extraction, store writes, events and health for each ingest.

    Parameters
    ----------
    extractor:
        Gateway that turns text into a :class:`ProcessingResult`.
    knowledge_store, vector_store, event_log:
        The three stores the pipeline writes to.
    health:
        Receives the busy signal, the buffer spike and storage refreshes.
    preview_chars:
        How much of the input the CAPTURE message quotes.
    normalize_delay, sync_delay, mesh_delay:
        Seconds before the staged PROCESS event, the SYNC event and the
        boot mesh event.  Tests pass ``0``.
    """

    def __init__(
        self,
        extractor: ContextExtractor,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
        event_log: EventLog,
        health: HealthSimulator,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
        normalize_delay: float = DEFAULT_NORMALIZE_DELAY,
        sync_delay: float = DEFAULT_SYNC_DELAY,
        mesh_delay: float = DEFAULT_MESH_DELAY,
    ) -> None:
        self._extractor = extractor
        self._knowledge_store = knowledge_store
        self._vector_store = vector_store
        self._event_log = event_log
        self._health = health
        self._preview_chars = preview_chars
        self._normalize_delay = normalize_delay
        self._sync_delay = sync_delay
        self._mesh_delay = mesh_delay

        self._in_flight = 0
        self._reserved = 0
        self._scheduled: set[asyncio.Task[None]] = set()
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        """True while an :meth:`ingest` call is in flight or reserved."""
        return self._in_flight > 0 or self._reserved > 0

    @property
    def pending_events(self) -> int:
        """Number of deferred events not yet recorded."""
        return len(self._scheduled)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(self, raw_text: str) -> IngestStatus:
        """Run one piece of text through the pipeline.

        Never raises.  The returned status is informational; the event log
        is the authoritative record of what happened.
        """
        if not raw_text or not raw_text.strip():
            self._logger.debug("ingest_rejected_blank")
            return IngestStatus.REJECTED

        self._enter()
        try:
            self._event_log.record(
                EventType.CAPTURE,
                f'Received context: "{raw_text[: self._preview_chars]}..."',
            )
            self._logger.info("ingest_start", text_length=len(raw_text))

            staged = self._schedule_event(
                EventType.PROCESS, NORMALIZING_MESSAGE, self._normalize_delay
            )
            try:
                result = await self._extractor.extract(raw_text)
            except Exception as exc:
                self._logger.error(
                    "extraction_raised",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                result = None
            # wait() does not re-raise if shutdown() cancelled the staged event.
            await asyncio.wait({staged})

            if result is None:
                self._event_log.record(EventType.PROCESS, FAILURE_MESSAGE)
                self._logger.warning("ingest_failed")
                return IngestStatus.FAILED

            self._event_log.record(EventType.PROCESS, SUCCESS_MESSAGE)
            self._store(raw_text, result)
            self._schedule_event(EventType.SYNC, SYNC_MESSAGE, self._sync_delay)
            return IngestStatus.STORED
        finally:
            self._exit()

    def reserve(self) -> bool:
        """Claim the pipeline for a later :meth:`ingest_reserved` call.

        Lets a caller that defers the work (a background task) report busy
        state synchronously.  Returns False if the pipeline is already busy.
        """
        if self.is_busy:
            return False
        self._reserved += 1
        return True

    async def ingest_reserved(self, raw_text: str) -> IngestStatus:
        """Run :meth:`ingest`, then release the claim taken by :meth:`reserve`."""
        try:
            return await self.ingest(raw_text)
        finally:
            self._reserved -= 1

    def announce_boot(self) -> None:
        """Record the start-up events and schedule the mesh announcement."""
        self._event_log.record(EventType.SYSTEM, "ShadowSync Core initialized.")
        self._event_log.record(EventType.SYNC, "Establishing P2P mesh connection...")
        self._schedule_event(
            EventType.SYNC, "Mesh active. 3 nodes connected.", self._mesh_delay
        )

    async def drain(self) -> None:
        """Wait until every deferred event has been recorded."""
        while self._scheduled:
            await asyncio.wait(set(self._scheduled))

    async def shutdown(self) -> None:
        """Cancel every deferred event that has not fired yet."""
        tasks = list(self._scheduled)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._scheduled.clear()
        if tasks:
            self._logger.info("scheduled_events_cancelled", count=len(tasks))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enter(self) -> None:
        self._in_flight += 1
        self._health.set_busy(True)
        self._health.spike_buffer()

    def _exit(self) -> None:
        self._in_flight -= 1
        self._health.set_busy(self.is_busy)
        self._logger.debug("ingest_end", in_flight=self._in_flight)

    def _store(self, raw_text: str, result: ProcessingResult) -> None:
        # Map everything first so the writes below are all-or-nothing.
        nodes = [
            MemoryNode.from_label(entity.name, NodeType.classify(entity.type))
            for entity in result.entities
        ]
        links = [
            MemoryLink(source=rel.source, target=rel.target, relation=rel.relation)
            for rel in result.relationships
        ]
        point = VectorPoint(
            x=result.vector.x,
            y=result.vector.y,
            content=raw_text,
            category=result.vector.category,
        )

        added = self._knowledge_store.upsert_nodes(nodes)
        self._knowledge_store.append_edges(links)
        self._event_log.record(EventType.STORE, f"Updated Knowledge Graph: +{added} nodes.")

        self._vector_store.append(point)
        self._event_log.record(EventType.EMBED, f"Generated Vector [{point.x:.1f}, {point.y:.1f}]")

        self._health.sync_storage()
        self._logger.info(
            "ingest_stored",
            nodes_added=added,
            links_added=len(links),
            category=point.category,
            summary=result.summary,
        )

    def _schedule_event(
        self, event_type: EventType, message: str, delay: float
    ) -> asyncio.Task[None]:
        """Record an event after *delay* seconds on a tracked task."""

        async def _fire() -> None:
            if delay > 0:
                await asyncio.sleep(delay)
            self._event_log.record(event_type, message)

        task = asyncio.get_running_loop().create_task(_fire())
        self._scheduled.add(task)
        task.add_done_callback(self._scheduled.discard)
        return task
