"""Query cache service.

Wires policy, key builder, version counter, invalidators and interceptor
into one entry point for a data-access layer.
"""

import logging
from typing import Any, Optional

from ...config.settings import QueryCacheSettings, get_settings
from ...core.entities.cacheable_query import CacheableQuery
from ...core.exceptions import BackendUnavailable
from ...core.protocols.cache_backend import CacheBackend
from ...core.protocols.collection_naming import CollectionNamingStrategy
from ...core.protocols.query_executor import QueryExecutor
from ...core.protocols.relation_provider import RelationProvider
from ...core.value_objects.cache_policy_kind import CachePolicyKind
from .cache_key_builder import CacheKeyBuilder
from .cache_policy import CachePolicy
from .query_execution_interceptor import QueryExecutionInterceptor
from .relation_cascade_invalidator import RelationCascadeInvalidator
from .tagged_invalidator import TaggedInvalidator
from .version_counter import VersionCounter

logger = logging.getLogger(__name__)


class QueryCacheService:
    """Query cache facade.

    One instance per request or session scopes the enable/disable toggle
    to that request or session.
    """

    def __init__(self,
                 backend: CacheBackend,
                 executor: QueryExecutor,
                 settings: Optional[QueryCacheSettings] = None,
                 relation_provider: Optional[RelationProvider] = None,
                 caching_enabled: bool = True):
        self.backend = backend
        self.policy = CachePolicy(settings or get_settings(), caching_enabled=caching_enabled)
        self.key_builder = CacheKeyBuilder()
        self.version_counter = VersionCounter(backend)
        self.invalidator = TaggedInvalidator(backend)
        self.cascade = RelationCascadeInvalidator(self.policy, self.invalidator)
        self.relation_provider = relation_provider
        self.interceptor = QueryExecutionInterceptor(
            executor=executor,
            backend=backend,
            policy=self.policy,
            key_builder=self.key_builder,
            version_counter=self.version_counter,
            cascade=self.cascade,
            relation_provider=relation_provider,
        )

    # Cache types

    @staticmethod
    def cache_all_queries_forever_type() -> CachePolicyKind:
        return CachePolicyKind.CACHE_ALL_FOREVER

    @staticmethod
    def cache_only_duplicate_queries_once_type() -> CachePolicyKind:
        return CachePolicyKind.CACHE_DUPLICATES_ONCE

    # Toggle

    def enable_caching(self) -> None:
        """Enable query caching for this service's scope."""
        self.policy.enable_caching()

    def disable_caching(self) -> None:
        """Disable query caching for this service's scope."""
        self.policy.disable_caching()

    def can_cache_queries(self) -> bool:
        return self.policy.can_cache_anything()

    # Query execution

    async def select(self, query: CacheableQuery) -> Any:
        return await self.interceptor.select(query)

    async def insert(self, query: CacheableQuery) -> Any:
        return await self.interceptor.insert(query)

    async def update(self, query: CacheableQuery) -> Any:
        return await self.interceptor.update(query)

    async def delete(self, query: CacheableQuery) -> Any:
        return await self.interceptor.delete(query)

    async def truncate(self, query: CacheableQuery) -> Any:
        return await self.interceptor.truncate(query)

    # Invalidation

    async def clear_query_cache(self, collection: CollectionNamingStrategy) -> None:
        """Clear cached reads of collection and its cache-enabled relations.

        Falls back to flushing every enabled store if targeted
        invalidation fails, so nothing is left out of sync.
        """
        await self.interceptor.invalidate(collection)

    async def flush_query_cache(self) -> None:
        """Flush every enabled query cache store, for all caching types."""
        if not self.policy.can_cache_anything():
            return

        try:
            await self.cascade.flush_everything()
        except BackendUnavailable as e:
            logger.error(f"Query cache flush failed: {e}")


def create_query_cache_service(
    executor: QueryExecutor,
    backend: Optional[CacheBackend] = None,
    settings: Optional[QueryCacheSettings] = None,
    relation_provider: Optional[RelationProvider] = None
) -> QueryCacheService:
    """Create a query cache service.

    Defaults to the in-process memory backend when none is given.
    """
    if backend is None:
        from ...infrastructure.backends.memory_cache_backend import MemoryCacheBackend
        backend = MemoryCacheBackend()

    return QueryCacheService(
        backend=backend,
        executor=executor,
        settings=settings,
        relation_provider=relation_provider,
    )
