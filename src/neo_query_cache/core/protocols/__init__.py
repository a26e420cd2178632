"""Query cache protocols."""

from .cache_backend import CacheBackend, Compute
from .collection_naming import CollectionNamingStrategy
from .relation_provider import RelationProvider
from .query_executor import QueryExecutor

__all__ = [
    "CacheBackend",
    "Compute",
    "CollectionNamingStrategy",
    "RelationProvider",
    "QueryExecutor",
]
