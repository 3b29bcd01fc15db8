"""Services: LLM gateways, the context agent and the health simulator."""

from shadowsync.services.agent_query import AgentQueryService
from shadowsync.services.context_agent import ContextAgent
from shadowsync.services.context_extractor import ContextExtractor
from shadowsync.services.health_simulator import HealthSimulator, estimate_storage_mb

__all__ = [
    "AgentQueryService",
    "ContextAgent",
    "ContextExtractor",
    "HealthSimulator",
    "estimate_storage_mb",
]
