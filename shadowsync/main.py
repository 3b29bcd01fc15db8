"""ShadowSync FastAPI application entry point.

Wires stores, services, the orchestrator and the LLM provider together,
loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging and mounts the API routes and the event WebSocket.

Run with ``python -m shadowsync.main`` or ``uvicorn shadowsync.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from shadowsync import __version__
from shadowsync.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from shadowsync.api.routes import router as api_router
from shadowsync.api.websocket import websocket_events
from shadowsync.config.loader import load_config
from shadowsync.config.settings import Settings
from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.pipeline.orchestrator import IngestionOrchestrator
from shadowsync.providers.cache.memory_cache import MemoryCacheProvider
from shadowsync.providers.llm.anthropic_provider import AnthropicLLMProvider
from shadowsync.providers.llm.ollama_provider import OllamaLLMProvider
from shadowsync.providers.llm.openai_provider import OpenAILLMProvider
from shadowsync.services.agent_query import AgentQueryService
from shadowsync.services.context_agent import ContextAgent
from shadowsync.services.context_extractor import ContextExtractor
from shadowsync.services.health_simulator import HealthSimulator
from shadowsync.stores.event_log import EventLog
from shadowsync.stores.knowledge_store import KnowledgeStore
from shadowsync.stores.vector_store import VectorStore
from shadowsync.utils.errors import ConfigurationError
from shadowsync.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=config["logging"]["level"],
    json_output=(config["app"]["env"] == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# LLM provider selection
# ---------------------------------------------------------------------------

_PROVIDERS: dict[str, type[ILLMProvider]] = {
    "anthropic": AnthropicLLMProvider,
    "openai": OpenAILLMProvider,
    "ollama": OllamaLLMProvider,
}


def build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the LLM provider.

    ``LLM_PROVIDER`` names one explicitly.  With the default ``"auto"`` the
    first configured one wins: Anthropic -> OpenAI -> Ollama.  When nothing
    is configured an OpenAI provider without a key is returned; it reports
    itself unavailable and both gateways fail closed.

    Raises
    ------
    ConfigurationError
        If ``LLM_PROVIDER`` is neither ``"auto"`` nor a known provider.
    """
    choice = app_settings.llm_provider.strip().lower()
    if choice != "auto":
        provider_cls = _PROVIDERS.get(choice)
        if provider_cls is None:
            raise ConfigurationError(
                f"Unknown LLM_PROVIDER {app_settings.llm_provider!r}; "
                f"expected 'auto' or one of {sorted(_PROVIDERS)}"
            )
        return provider_cls(settings=app_settings)

    available = app_settings.get_available_llm_providers()
    provider_cls = _PROVIDERS[available[0]] if available else OpenAILLMProvider
    return provider_cls(settings=app_settings)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(
    app_settings: Settings,
    app_config: dict[str, Any],
    llm: ILLMProvider | None = None,
) -> dict[str, Any]:
    """Construct every store, service and provider for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    *llm* overrides provider selection (tests pass a mock).
    """
    pipeline_cfg = app_config.get("pipeline", {})
    agent_cfg = app_config.get("agent", {})

    # -- LLM --
    llm = llm or build_llm_provider(app_settings)
    if not llm.is_available():
        _logger.warning(
            "llm_credentials_missing",
            provider=llm.get_provider_name(),
            hint="Set ANTHROPIC_API_KEY, OPENAI_API_KEY or OLLAMA_BASE_URL",
        )

    # -- Stores --
    knowledge_store = KnowledgeStore()
    vector_store = VectorStore()
    event_log = EventLog(max_events=app_config.get("event_log", {}).get("max_events", 50))

    # -- Health --
    health_simulator = HealthSimulator(
        knowledge_store,
        vector_store,
        tick_interval=app_config.get("health", {}).get("tick_interval", 0.8),
    )

    # -- Pipeline --
    orchestrator = IngestionOrchestrator(
        extractor=ContextExtractor(llm),
        knowledge_store=knowledge_store,
        vector_store=vector_store,
        event_log=event_log,
        health=health_simulator,
        preview_chars=pipeline_cfg.get("capture_preview_chars", 30),
        normalize_delay=pipeline_cfg.get("normalize_delay", 0.4),
        sync_delay=pipeline_cfg.get("sync_delay", 0.8),
        mesh_delay=app_config.get("boot", {}).get("mesh_delay", 1.2),
    )

    # -- Agent --
    cache = MemoryCacheProvider(
        max_size=agent_cfg.get("cache_size", 256),
        ttl=agent_cfg.get("cache_ttl", 300),
    )
    context_agent = ContextAgent(
        query_service=AgentQueryService(llm=llm, cache=cache),
        knowledge_store=knowledge_store,
        vector_store=vector_store,
        event_log=event_log,
    )

    return {
        "llm": llm,
        "knowledge_store": knowledge_store,
        "vector_store": vector_store,
        "event_log": event_log,
        "health_simulator": health_simulator,
        "orchestrator": orchestrator,
        "context_agent": context_agent,
        "cache": cache,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(components: dict[str, Any] | None, llm: ILLMProvider | None):  # noqa: ANN202
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Build components, start the health tick and announce boot."""
        built = components or _build_all(settings, config, llm=llm)
        for key, value in built.items():
            setattr(application.state, key, value)

        orchestrator: IngestionOrchestrator = built["orchestrator"]
        health_simulator: HealthSimulator = built["health_simulator"]

        health_simulator.start()
        orchestrator.announce_boot()

        _logger.info(
            "app_startup",
            version=__version__,
            environment=settings.app_env,
            llm_provider=built["llm"].get_provider_name(),
            llm_configured=built["llm"].is_available(),
        )

        yield

        await orchestrator.shutdown()
        await health_simulator.stop()
        _logger.info("app_shutdown")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    components: dict[str, Any] | None = None,
    llm: ILLMProvider | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Pre-built component dict (as returned by ``_build_all``).  Built
        at startup from settings and config when omitted.
    llm:
        LLM provider to use when building components at startup.
    """
    application = FastAPI(
        title="ShadowSync API",
        version=__version__,
        description=(
            "Ingest free-form context, extract entities and relationships with "
            "an LLM, and explore the resulting knowledge graph, vector space and "
            "event stream."
        ),
        lifespan=_make_lifespan(components, llm),
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    # -- API routes --
    application.include_router(api_router)

    # -- WebSocket --
    @application.websocket("/ws/events")
    async def ws_events(websocket: WebSocket) -> None:
        await websocket_events(websocket)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "shadowsync.main:app",
        host=config["app"]["host"],
        port=config["app"]["port"],
        reload=(settings.app_env == "development"),
    )
