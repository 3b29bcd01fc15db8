"""Synthetic system-health telemetry.

The dashboard shows consistency, latency, replication, storage and an I/O
buffer gauge.  None of it is measured: the numbers are derived from two
inputs only,

    - whether an ingestion is in flight (pushed in by the orchestrator), and
    - the knowledge-store node count and vector-store point count,

and nothing in the pipeline ever reads them back.

Three triggers update the snapshot:

    periodic tick        latency, buffer and consistency get fresh jitter
    store-size change    storage_mb recomputed from the two counts
    ingestion start      buffer spikes by a fixed amount right away

The tick runs as an asyncio task owned by the application lifespan.
:meth:`HealthSimulator.stop` cancels and awaits it, so shutdown leaves no
timer behind.
"""

from __future__ import annotations

import asyncio
import contextlib
import math
import random

import structlog

from shadowsync.models.health import HealthSnapshot
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.logging import get_logger

DEFAULT_TICK_INTERVAL = 0.8  # seconds

# Latency model: base + integer jitter in [JITTER_MIN, JITTER_MAX].
_IDLE_LATENCY_MS = 24
_BUSY_LATENCY_MS = 65
_JITTER_MIN = -5
_JITTER_MAX = 9

# Buffer gauge, in percent.
_BUFFER_FLOOR = 8
_BUFFER_TICK_CEILING = 98
_BUFFER_CAP = 100
_BUFFER_SPIKE = 25
_BUFFER_FILL_STEP = 15.0
_BUFFER_DRAIN_STEP = 5.0

# Consistency hovers in (99.995, 100].
_CONSISTENCY_SPREAD = 0.005

# Storage estimate.
_BASE_STORAGE_MB = 1.24
_NODE_MB = 0.015
_VECTOR_MB = 0.005


def estimate_storage_mb(node_count: int, vector_count: int) -> float:
    """Return the storage estimate for the given store sizes.

    Non-decreasing in both counts and a pure function of them.
    """
    size = _BASE_STORAGE_MB + node_count * _NODE_MB + vector_count * _VECTOR_MB
    return round(size, 3)


class HealthSimulator:
    """Owns and updates the current :class:`HealthSnapshot`.

    Parameters
    ----------
    knowledge_store, vector_store:
        Read for their sizes only.
    tick_interval:
        Seconds between periodic ticks once :meth:`start` has been called.
    rng:
        Source of jitter.  Inject a seeded ``random.Random`` for
        reproducible tests.
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        vector_store: VectorStore,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        rng: random.Random | None = None,
    ) -> None:
        self._knowledge_store = knowledge_store
        self._vector_store = vector_store
        self._tick_interval = tick_interval
        self._rng = rng or random.Random()
        self._snapshot = HealthSnapshot()
        self._busy = False
        self._sizes: tuple[int, int] | None = None
        self._task: asyncio.Task[None] | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)
        self.sync_storage()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> HealthSnapshot:
        return self._snapshot

    @property
    def busy(self) -> bool:
        return self._busy

    def set_busy(self, busy: bool) -> None:
        """Record whether an ingestion is currently in flight."""
        self._busy = busy

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def tick(self) -> HealthSnapshot:
        """Advance the simulation by one step and return the new snapshot."""
        base = _BUSY_LATENCY_MS if self._busy else _IDLE_LATENCY_MS
        latency = base + self._rng.randint(_JITTER_MIN, _JITTER_MAX)

        buffer = float(self._snapshot.buffer_percent)
        if self._busy:
            buffer = min(_BUFFER_TICK_CEILING, buffer + self._rng.random() * _BUFFER_FILL_STEP)
        else:
            buffer = max(_BUFFER_FLOOR, buffer - self._rng.random() * _BUFFER_DRAIN_STEP)

        consistency = round(100 - self._rng.random() * _CONSISTENCY_SPREAD, 4)

        self._snapshot = self._snapshot.model_copy(
            update={
                "latency_ms": latency,
                "buffer_percent": self._clamp_buffer(math.floor(buffer)),
                "consistency": consistency,
            }
        )
        self.sync_storage()
        return self._snapshot

    def spike_buffer(self) -> HealthSnapshot:
        """Model the immediate load spike of a new ingestion."""
        spiked = min(_BUFFER_CAP, self._snapshot.buffer_percent + _BUFFER_SPIKE)
        self._snapshot = self._snapshot.model_copy(
            update={"buffer_percent": self._clamp_buffer(spiked)}
        )
        return self._snapshot

    def sync_storage(self) -> HealthSnapshot:
        """Recompute ``storage_mb`` if either store size changed."""
        sizes = (self._knowledge_store.node_count, self._vector_store.count)
        if sizes != self._sizes:
            self._sizes = sizes
            self._snapshot = self._snapshot.model_copy(
                update={"storage_mb": estimate_storage_mb(*sizes)}
            )
            self._logger.debug(
                "storage_recomputed",
                nodes=sizes[0],
                vectors=sizes[1],
                storage_mb=self._snapshot.storage_mb,
            )
        return self._snapshot

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the periodic tick on the running event loop (idempotent)."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._logger.info("health_simulator_started", interval=self._tick_interval)

    async def stop(self) -> None:
        """Cancel the periodic tick and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._logger.info("health_simulator_stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            try:
                snapshot = self.tick()
            except Exception as exc:
                # Telemetry is cosmetic; a bad tick must not kill the loop.
                self._logger.warning("health_tick_failed", error=str(exc))
                continue
            self._logger.debug(
                "health_tick",
                busy=self._busy,
                latency_ms=snapshot.latency_ms,
                buffer_percent=snapshot.buffer_percent,
            )

    @staticmethod
    def _clamp_buffer(value: int) -> int:
        return max(_BUFFER_FLOOR, min(_BUFFER_CAP, int(value)))
