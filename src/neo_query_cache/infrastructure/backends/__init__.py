"""Cache backend implementations."""

from .memory_cache_backend import MemoryCacheBackend
from .redis_cache_backend import RedisCacheBackend

__all__ = [
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
