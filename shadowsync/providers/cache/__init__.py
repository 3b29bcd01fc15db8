"""Cache provider adapters."""

from shadowsync.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
