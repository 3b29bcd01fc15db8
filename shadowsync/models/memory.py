"""Knowledge-graph and vector-space records.

These are the three kinds of fact the ingestion pipeline produces:

    MemoryNode  -- a graph vertex, identified by its label
    MemoryLink  -- a directed, labelled relationship between two labels
    VectorPoint -- a 2D semantic coordinate plus the text it came from

All three are frozen Pydantic models.  The stores in ``shadowsync.stores``
decide how they accumulate (nodes replace by label, links and points append).
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Coarse classification of a knowledge-graph node.

    The extraction step only ever produces PERSON, EVENT or CONCEPT;
    ENTITY is kept for nodes created by other producers.
    """

    PERSON = "person"
    EVENT = "event"
    CONCEPT = "concept"
    ENTITY = "entity"

    @classmethod
    def classify(cls, type_label: str) -> NodeType:
        """Map a free-text type label from the LLM onto a node type.

        Case-insensitive substring match: anything mentioning "person" is a
        person, anything mentioning "event" is an event, everything else
        (locations, organisations, ideas) is a concept.
        """
        lowered = (type_label or "").lower()
        if "person" in lowered:
            return cls.PERSON
        if "event" in lowered:
            return cls.EVENT
        return cls.CONCEPT


class MemoryNode(BaseModel):
    """A vertex in the knowledge graph.

    ``label`` is the identity key (exact, case-sensitive).  ``id`` mirrors
    the label so consumers can key on either.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    type: NodeType = NodeType.CONCEPT
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    @classmethod
    def from_label(cls, label: str, node_type: NodeType = NodeType.CONCEPT) -> MemoryNode:
        return cls(id=label, label=label, type=node_type)


class MemoryLink(BaseModel):
    """A directed relationship between two node labels.

    The endpoints are labels, not node references, and need not exist in
    the store (yet, or ever).
    """

    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    relation: str = ""


class VectorPoint(BaseModel):
    """A 2D pseudo-embedding of one ingested text.

    Coordinates are nominally within [-100, 100]; the extractor clamps
    them, the store does not check.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    x: float = 0.0
    y: float = 0.0
    content: str
    category: str = "General"
