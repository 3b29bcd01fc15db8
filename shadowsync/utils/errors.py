"""Exception hierarchy for ShadowSync.

    ShadowSyncError       (base -- catch-all for any ShadowSync error)
    +-- ConfigurationError (startup / missing or invalid config)
    +-- LLMError           (any LLM API call failure)
    +-- ExtractionError    (LLM reply could not be turned into a result)

Every error carries a human-readable ``message`` and an optional
``provider_name`` naming the external service involved, e.g. "openai".
None of these ever reach the caller of ``IngestionOrchestrator.ingest``:
the orchestrator turns failures into event-log entries.
"""


class ShadowSyncError(Exception):
    """Base exception for all ShadowSync errors."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(ShadowSyncError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(ShadowSyncError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionError(ShadowSyncError):
    """Raised when an LLM reply cannot be parsed into a processing result."""

    def __init__(
        self,
        message: str = "Context extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)

