"""Query cache application services."""

from .cache_policy import CachePolicy
from .cache_key_builder import CacheKeyBuilder
from .version_counter import VersionCounter, VERSION_KEY_NAMESPACE
from .tagged_invalidator import TaggedInvalidator
from .relation_cascade_invalidator import RelationCascadeInvalidator
from .query_execution_interceptor import QueryExecutionInterceptor, DUPLICATE_QUERY_TTL_SECONDS
from .query_cache_service import QueryCacheService, create_query_cache_service

__all__ = [
    "CachePolicy",
    "CacheKeyBuilder",
    "VersionCounter",
    "VERSION_KEY_NAMESPACE",
    "TaggedInvalidator",
    "RelationCascadeInvalidator",
    "QueryExecutionInterceptor",
    "DUPLICATE_QUERY_TTL_SECONDS",
    "QueryCacheService",
    "create_query_cache_service",
]
