"""Neo-Query-Cache - query-result caching and invalidation layer.

Decides per read query whether to cache its result, derives a stable cache
key for it, and invalidates cached results when the underlying data (or
data related to it) changes. Two independently configurable policies are
supported: cache all queries forever, and cache duplicate queries once.

Logging is not configured on import; call ``setup_logging()`` at startup.
"""

from .__version__ import __version__

from .config import QueryCacheSettings, get_settings, setup_logging, get_logger

from .core.entities import CacheableQuery, CollectionDescriptor, RelationEdge
from .core.value_objects import CacheKey, CachePolicyKind, QueryState
from .core.exceptions import (
    QueryCacheError,
    SerializationError,
    BackendUnavailable,
    CacheValueSerializationError,
    ConfigurationMissing,
    RelationMetadataError,
)
from .core.protocols import (
    CacheBackend,
    CollectionNamingStrategy,
    RelationProvider,
    QueryExecutor,
)

from .application.services import (
    CachePolicy,
    CacheKeyBuilder,
    VersionCounter,
    TaggedInvalidator,
    RelationCascadeInvalidator,
    QueryExecutionInterceptor,
    QueryCacheService,
    create_query_cache_service,
    DUPLICATE_QUERY_TTL_SECONDS,
)

from .infrastructure import (
    MemoryCacheBackend,
    RedisCacheBackend,
    PickleValueSerializer,
    AsyncpgQueryExecutor,
    StaticRelationProvider,
)

__all__ = [
    "__version__",

    # Configuration
    "QueryCacheSettings",
    "get_settings",
    "setup_logging",
    "get_logger",

    # Entities and value objects
    "CacheableQuery",
    "CollectionDescriptor",
    "RelationEdge",
    "CacheKey",
    "CachePolicyKind",
    "QueryState",

    # Exceptions
    "QueryCacheError",
    "SerializationError",
    "BackendUnavailable",
    "CacheValueSerializationError",
    "ConfigurationMissing",
    "RelationMetadataError",

    # Protocols
    "CacheBackend",
    "CollectionNamingStrategy",
    "RelationProvider",
    "QueryExecutor",

    # Services
    "CachePolicy",
    "CacheKeyBuilder",
    "VersionCounter",
    "TaggedInvalidator",
    "RelationCascadeInvalidator",
    "QueryExecutionInterceptor",
    "QueryCacheService",
    "create_query_cache_service",
    "DUPLICATE_QUERY_TTL_SECONDS",

    # Infrastructure
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "PickleValueSerializer",
    "AsyncpgQueryExecutor",
    "StaticRelationProvider",
]
