"""In-memory stores fed by the ingestion pipeline.

    KnowledgeStore -- nodes deduplicated by label, links accumulated
    VectorStore    -- vector points accumulated
    EventLog       -- bounded, newest-first activity log

Writes come from the ingestion orchestrator (and RETRIEVE events from the
context agent); reads are unrestricted.  Nothing here persists past the
process.
"""

from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore

__all__ = ["EventLog", "KnowledgeStore", "VectorStore"]
