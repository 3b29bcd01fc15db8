"""Concrete provider adapters (LLM backends, caches)."""
