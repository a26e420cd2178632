"""Query execution interceptor.

ONLY execution wrapping - consults or populates the cache on reads and
invalidates before mutation on writes, around the underlying executor.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from typing import Any, Optional

from ...core.entities.cacheable_query import CacheableQuery
from ...core.exceptions import BackendUnavailable, ConfigurationMissing, SerializationError
from ...core.protocols.cache_backend import CacheBackend
from ...core.protocols.collection_naming import CollectionNamingStrategy
from ...core.protocols.query_executor import QueryExecutor
from ...core.protocols.relation_provider import RelationProvider
from ...core.value_objects.cache_key import CacheKey
from ...core.value_objects.cache_policy_kind import CachePolicyKind
from ...core.value_objects.query_state import QueryState
from .cache_key_builder import CacheKeyBuilder
from .cache_policy import CachePolicy
from .relation_cascade_invalidator import RelationCascadeInvalidator
from .tagged_invalidator import TaggedInvalidator
from .version_counter import VersionCounter

logger = logging.getLogger(__name__)

# Lifetime of cache-duplicates-once entries, in seconds
DUPLICATE_QUERY_TTL_SECONDS = 1


class QueryExecutionInterceptor:
    """Caching wrapper around a query executor.

    Cache failures never prevent a query from executing: reads fall back to
    direct execution and writes proceed after a failed invalidation.
    Errors raised by the executor itself propagate unchanged.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        backend: CacheBackend,
        policy: CachePolicy,
        key_builder: Optional[CacheKeyBuilder] = None,
        version_counter: Optional[VersionCounter] = None,
        cascade: Optional[RelationCascadeInvalidator] = None,
        relation_provider: Optional[RelationProvider] = None
    ):
        self._executor = executor
        self._backend = backend
        self._policy = policy
        self._key_builder = key_builder or CacheKeyBuilder()
        self._version_counter = version_counter or VersionCounter(backend)
        self._cascade = cascade or RelationCascadeInvalidator(policy, TaggedInvalidator(backend))
        self._relation_provider = relation_provider

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    def enable_caching(self) -> None:
        self._policy.enable_caching()

    def disable_caching(self) -> None:
        self._policy.disable_caching()

    # Read path

    async def select(self, query: CacheableQuery) -> Any:
        """Run a read query under its own caching policy."""
        query.mark(QueryState.PENDING)
        kind = query.policy

        if not kind.is_cached or not self._policy.is_enabled(kind):
            return await self._run_uncached(query)

        fetched = []

        async def compute() -> Any:
            fetched.append(await self._executor.fetch(query.sql, query.bindings))
            return fetched[0]

        try:
            store = self._policy.store_for(kind)
            tag = self._policy.tag_for(kind, query.collection)
            key = await self._resolve_key(query, kind, store)
            if kind is CachePolicyKind.CACHE_ALL_FOREVER:
                result = await self._backend.remember_forever(store, str(key), tag, compute)
            else:
                result = await self._backend.remember_for(
                    store, str(key), tag, DUPLICATE_QUERY_TTL_SECONDS, compute
                )
        except (SerializationError, BackendUnavailable, ConfigurationMissing) as e:
            if fetched:
                # Executed but not stored; never run the query twice
                query.mark(QueryState.CACHE_MISS)
                logger.warning(f"Could not store query result for '{query.collection.name}': {e}")
                return self._deliver(query, fetched[0])
            logger.warning(f"Query cache lookup for '{query.collection.name}' failed ({e.error_code}); running uncached")
            return await self._run_uncached(query)

        query.mark(QueryState.CACHE_MISS if fetched else QueryState.CACHE_HIT)
        logger.debug(f"Cache {'miss' if fetched else 'hit'} for {key} in store '{store}'")
        return self._deliver(query, result)

    async def _resolve_key(self, query: CacheableQuery, kind: CachePolicyKind, store: str) -> CacheKey:
        if kind is CachePolicyKind.CACHE_ALL_FOREVER:
            # Read fresh on every lookup, never cached with the result
            version = await self._version_counter.current_version(
                store, self._policy.prefix_for(kind), query.collection.name
            )
            return self._key_builder.build_versioned_key(query.sql, query.bindings, version)
        return self._key_builder.build_key(query.sql, query.bindings)

    async def _run_uncached(self, query: CacheableQuery) -> Any:
        result = await self._executor.fetch(query.sql, query.bindings)
        query.mark(QueryState.UNCACHED)
        return self._deliver(query, result)

    @staticmethod
    def _deliver(query: CacheableQuery, result: Any) -> Any:
        query.mark(QueryState.DELIVERED)
        return result

    # Write path

    async def insert(self, query: CacheableQuery) -> Any:
        return await self._run_write(query)

    async def update(self, query: CacheableQuery) -> Any:
        return await self._run_write(query)

    async def delete(self, query: CacheableQuery) -> Any:
        return await self._run_write(query)

    async def truncate(self, query: CacheableQuery) -> Any:
        return await self._run_write(query)

    async def _run_write(self, query: CacheableQuery) -> Any:
        await self.invalidate(query.collection)
        return await self._executor.execute(query.sql, query.bindings)

    async def invalidate(self, collection: CollectionNamingStrategy) -> None:
        """Invalidate every cached read of collection and its relations.

        Flushes tags (cascading one level) and bumps the collection's
        forever-policy version. Failures are logged, never raised.
        """
        if not self._policy.can_cache_anything():
            return

        try:
            await self._cascade.invalidate(collection, self._relation_provider)
        except BackendUnavailable as e:
            logger.error(f"Query cache invalidation of '{collection.name}' failed: {e}")

        if not self._policy.is_forever_caching_enabled():
            return

        kind = CachePolicyKind.CACHE_ALL_FOREVER
        try:
            await self._version_counter.bump(
                self._policy.store_for(kind), self._policy.prefix_for(kind), collection.name
            )
        except BackendUnavailable as e:
            logger.error(f"Query cache version bump of '{collection.name}' failed: {e}")
