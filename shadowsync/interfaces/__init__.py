"""Provider interfaces (adapter pattern) for ShadowSync."""

from shadowsync.interfaces.cache_provider import ICacheProvider
from shadowsync.interfaces.llm_provider import ILLMProvider

__all__ = ["ICacheProvider", "ILLMProvider"]
