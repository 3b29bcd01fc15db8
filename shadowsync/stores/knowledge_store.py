"""Knowledge-graph store: nodes keyed by label, links appended as asserted.

Nodes and links follow deliberately different rules:

- **Nodes replace.**  The label is the identity key.  Upserting a node whose
  label is already present swaps in the new record (type, timestamp, ...)
  but keeps the label's original position, so iteration order is "order in
  which each label was first seen".
- **Links accumulate.**  Every appended link is kept, duplicates included,
  and endpoints are not checked against the node set.  A link may name an
  entity that has not been seen yet, or never will be.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from shadowsync.models.memory import MemoryLink, MemoryNode
from shadowsync.utils.logging import get_logger


class KnowledgeStore:
    """Holds deduplicated :class:`MemoryNode` records and all :class:`MemoryLink` records."""

    def __init__(self) -> None:
        # dict preserves insertion order; reassigning an existing key keeps
        # its slot, which is exactly the replace-in-place rule.
        self._nodes: dict[str, MemoryNode] = {}
        self._links: list[MemoryLink] = []
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_nodes(self, nodes: Iterable[MemoryNode]) -> int:
        """Merge *nodes* into the store by label.

        Returns
        -------
        int
            How many labels were not present before this call.  A label
            repeated within *nodes* counts once; the last occurrence wins.
        """
        added = 0
        replaced = 0
        for node in nodes:
            if node.label in self._nodes:
                replaced += 1
            else:
                added += 1
            self._nodes[node.label] = node

        self._logger.debug(
            "nodes_upserted",
            added=added,
            replaced=replaced,
            total=len(self._nodes),
        )
        return added

    def append_edges(self, edges: Iterable[MemoryLink]) -> None:
        """Append every link in *edges*, without dedup or endpoint checks."""
        before = len(self._links)
        self._links.extend(edges)
        self._logger.debug(
            "edges_appended",
            appended=len(self._links) - before,
            total=len(self._links),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._links)

    def get(self, label: str) -> MemoryNode | None:
        return self._nodes.get(label)

    def labels(self) -> list[str]:
        return list(self._nodes)

    def nodes(self) -> list[MemoryNode]:
        return list(self._nodes.values())

    def edges(self) -> list[MemoryLink]:
        return list(self._links)

    def dangling_edges(self) -> list[MemoryLink]:
        """Links whose source or target label has no node (yet)."""
        return [
            link
            for link in self._links
            if link.source not in self._nodes or link.target not in self._nodes
        ]
