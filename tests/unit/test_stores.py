"""Unit tests for KnowledgeStore, VectorStore and EventLog."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from shadowsync.models.events import EventStatus, EventType, SystemEvent
from shadowsync.models.memory import MemoryLink, MemoryNode, NodeType, VectorPoint
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore


# ======================================================================
# KnowledgeStore
# ======================================================================


class TestKnowledgeStore:
    def test_upsert_same_label_keeps_one_node_with_latest_type(
        self, knowledge_store: KnowledgeStore
    ) -> None:
        knowledge_store.upsert_nodes([MemoryNode.from_label("Alice", NodeType.PERSON)])
        knowledge_store.upsert_nodes([MemoryNode.from_label("Alice", NodeType.CONCEPT)])

        assert knowledge_store.node_count == 1
        assert knowledge_store.get("Alice").type == NodeType.CONCEPT

    def test_upsert_returns_only_new_labels(self, knowledge_store: KnowledgeStore) -> None:
        assert knowledge_store.upsert_nodes([MemoryNode.from_label("Alice")]) == 1
        added = knowledge_store.upsert_nodes(
            [MemoryNode.from_label("Alice"), MemoryNode.from_label("Bob")]
        )
        assert added == 1

    def test_duplicate_label_within_batch_counts_once_last_wins(
        self, knowledge_store: KnowledgeStore
    ) -> None:
        added = knowledge_store.upsert_nodes(
            [
                MemoryNode.from_label("Alice", NodeType.PERSON),
                MemoryNode.from_label("Alice", NodeType.EVENT),
            ]
        )
        assert added == 1
        assert knowledge_store.get("Alice").type == NodeType.EVENT

    def test_replaced_node_keeps_original_position(self, knowledge_store: KnowledgeStore) -> None:
        knowledge_store.upsert_nodes(
            [MemoryNode.from_label("A"), MemoryNode.from_label("B"), MemoryNode.from_label("C")]
        )
        knowledge_store.upsert_nodes([MemoryNode.from_label("A", NodeType.PERSON)])

        assert knowledge_store.labels() == ["A", "B", "C"]

    def test_labels_are_case_sensitive(self, knowledge_store: KnowledgeStore) -> None:
        knowledge_store.upsert_nodes([MemoryNode.from_label("bob"), MemoryNode.from_label("Bob")])
        assert knowledge_store.node_count == 2

    def test_identical_edges_accumulate(self, knowledge_store: KnowledgeStore) -> None:
        link = MemoryLink(source="A", target="B", relation="knows")
        knowledge_store.append_edges([link])
        knowledge_store.append_edges([link])

        assert knowledge_store.edge_count == 2

    def test_dangling_edges_are_accepted(self, knowledge_store: KnowledgeStore) -> None:
        knowledge_store.upsert_nodes([MemoryNode.from_label("A")])
        knowledge_store.append_edges([MemoryLink(source="A", target="Nowhere", relation="x")])

        assert knowledge_store.edge_count == 1
        assert len(knowledge_store.dangling_edges()) == 1

    def test_reads_return_copies(self, knowledge_store: KnowledgeStore) -> None:
        knowledge_store.upsert_nodes([MemoryNode.from_label("A")])
        knowledge_store.nodes().clear()
        knowledge_store.edges().append(MemoryLink(source="A", target="B"))

        assert knowledge_store.node_count == 1
        assert knowledge_store.edge_count == 0


# ======================================================================
# VectorStore
# ======================================================================


class TestVectorStore:
    def test_points_accumulate_without_dedup(self, vector_store: VectorStore) -> None:
        vector_store.append(VectorPoint(x=1, y=1, content="same"))
        vector_store.append(VectorPoint(x=1, y=1, content="same"))

        assert vector_store.count == 2
        ids = {p.id for p in vector_store.points()}
        assert len(ids) == 2

    def test_recent_returns_last_n_oldest_first(self, vector_store: VectorStore) -> None:
        for i in range(7):
            vector_store.append(VectorPoint(x=i, y=0, content=f"m{i}"))

        recent = vector_store.recent(5)
        assert [p.content for p in recent] == ["m2", "m3", "m4", "m5", "m6"]

    def test_recent_with_fewer_points(self, vector_store: VectorStore) -> None:
        vector_store.append(VectorPoint(x=0, y=0, content="only"))
        assert [p.content for p in vector_store.recent(5)] == ["only"]

    def test_recent_with_non_positive_limit(self, vector_store: VectorStore) -> None:
        vector_store.append(VectorPoint(x=0, y=0, content="only"))
        assert vector_store.recent(0) == []


# ======================================================================
# EventLog
# ======================================================================


class TestEventLog:
    def test_record_sets_success_status(self, event_log: EventLog) -> None:
        event = event_log.record(EventType.CAPTURE, "hello")
        assert event.status == EventStatus.SUCCESS
        assert event.type == EventType.CAPTURE
        assert event.message == "hello"
        assert event.timestamp.tzinfo is not None

    def test_newest_first(self, event_log: EventLog) -> None:
        event_log.record(EventType.CAPTURE, "first")
        event_log.record(EventType.PROCESS, "second")

        assert [e.message for e in event_log.list()] == ["second", "first"]

    def test_capped_at_fifty_keeping_most_recent(self, event_log: EventLog) -> None:
        for i in range(60):
            event_log.record(EventType.SYSTEM, f"e{i}")

        events = event_log.list()
        assert len(events) == 50
        assert events[0].message == "e59"
        assert events[-1].message == "e10"

    def test_ids_are_unique(self, event_log: EventLog) -> None:
        ids = {event_log.record(EventType.SYSTEM, "x").id for _ in range(20)}
        assert len(ids) == 20

    def test_custom_capacity(self) -> None:
        log = EventLog(max_events=3)
        for i in range(5):
            log.record(EventType.SYSTEM, str(i))
        assert [e.message for e in log.list()] == ["4", "3", "2"]
        assert log.max_events == 3

    def test_invalid_capacity_rejected(self) -> None:
        with pytest.raises(ValueError):
            EventLog(max_events=0)

    def test_listener_receives_events(self, event_log: EventLog) -> None:
        received: list[SystemEvent] = []
        event_log.register_listener(received.append)

        event = event_log.record(EventType.STORE, "stored")

        assert received == [event]

    def test_unregistered_listener_stops_receiving(self, event_log: EventLog) -> None:
        received: list[SystemEvent] = []
        event_log.register_listener(received.append)
        event_log.unregister_listener(received.append)

        event_log.record(EventType.STORE, "stored")

        assert received == []

    def test_failing_listener_does_not_break_record(self, event_log: EventLog) -> None:
        broken = MagicMock(side_effect=RuntimeError("boom"))
        received: list[SystemEvent] = []
        event_log.register_listener(broken)
        event_log.register_listener(received.append)

        event = event_log.record(EventType.SYNC, "still works")

        assert event_log.list() == [event]
        assert received == [event]
        broken.assert_called_once_with(event)
