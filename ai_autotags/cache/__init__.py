"""Result caching for generation calls."""

from .base import ResultCache, make_cache_key
from .memory_cache import CacheEntry, MemoryCache
from .redis_cache import CacheConfig, RedisCache

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "MemoryCache",
    "RedisCache",
    "ResultCache",
    "make_cache_key",
]
