"""Query cache infrastructure: backends, serializers, executors and relation providers."""

from .backends import MemoryCacheBackend, RedisCacheBackend
from .serializers import PickleValueSerializer
from .executors import AsyncpgQueryExecutor
from .relations import StaticRelationProvider

__all__ = [
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "PickleValueSerializer",
    "AsyncpgQueryExecutor",
    "StaticRelationProvider",
]
