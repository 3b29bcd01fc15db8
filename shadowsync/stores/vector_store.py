"""Vector-space store: one point per successful ingestion, never merged."""

from __future__ import annotations

import structlog

from shadowsync.models.memory import VectorPoint
from shadowsync.utils.logging import get_logger


class VectorStore:
    """Append-only list of :class:`VectorPoint` records.

    Two ingestions of the same text give two points; nothing is deduplicated
    or evicted.
    """

    def __init__(self) -> None:
        self._points: list[VectorPoint] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def append(self, point: VectorPoint) -> None:
        self._points.append(point)
        self._logger.debug(
            "vector_appended",
            point_id=point.id,
            category=point.category,
            total=len(self._points),
        )

    @property
    def count(self) -> int:
        return len(self._points)

    def points(self) -> list[VectorPoint]:
        return list(self._points)

    def recent(self, limit: int) -> list[VectorPoint]:
        """Return the *limit* most recently appended points, oldest first."""
        if limit <= 0:
            return []
        return self._points[-limit:]
