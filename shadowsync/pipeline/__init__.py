"""Ingestion pipeline."""

from shadowsync.pipeline.orchestrator import IngestionOrchestrator, IngestStatus

__all__ = ["IngestionOrchestrator", "IngestStatus"]
