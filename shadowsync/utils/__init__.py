"""Utility modules for ShadowSync.

- **errors** -- Domain-specific exception hierarchy rooted at ShadowSyncError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from shadowsync.utils.errors import (
    ConfigurationError,
    ExtractionError,
    LLMError,
    ShadowSyncError,
)
from shadowsync.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ExtractionError",
    "LLMError",
    "ShadowSyncError",
    "configure_logging",
    "get_logger",
]
