"""Synthetic system-health snapshot."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HealthSnapshot(BaseModel):
    """Derived operational metrics shown on the dashboard.

    Nothing in the pipeline reads these values back; they are produced by
    :class:`shadowsync.services.health_simulator.HealthSimulator` from the
    store sizes and the "ingestion in flight" signal.  Frozen -- the
    simulator swaps in a new snapshot via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    consistency: float = 99.999        # percent, always just under 100
    latency_ms: int = 24
    replication_factor: int = 3        # illustrative, fixed
    storage_mb: float = 1.24
    buffer_percent: int = Field(default=12, ge=0, le=100)
