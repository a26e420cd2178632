"""Relation cascade invalidator.

ONLY cascading invalidation - flushes a collection's tags and the tags of
its directly related, cache-enabled collections, escalating to a full
flush of every enabled store when targeted invalidation fails.

Following maximum separation architecture - one file = one purpose.
"""

import inspect
import logging
from collections.abc import Iterable
from typing import Any, List, Optional, Set, Tuple

from ...core.entities.relation_edge import RelationEdge
from ...core.exceptions import BackendUnavailable, RelationMetadataError
from ...core.protocols.collection_naming import CollectionNamingStrategy
from ...core.protocols.relation_provider import RelationProvider
from .cache_policy import CachePolicy
from .tagged_invalidator import TaggedInvalidator

logger = logging.getLogger(__name__)


class RelationCascadeInvalidator:
    """Cascading invalidation over one level of relations.

    Partial invalidation is worse than an expensive full flush: when a
    backend call or the relation metadata fails, every enabled store is
    flushed instead. Programming errors propagate untouched.
    """

    def __init__(self, policy: CachePolicy, invalidator: TaggedInvalidator):
        self._policy = policy
        self._invalidator = invalidator

    async def invalidate(
        self,
        root: CollectionNamingStrategy,
        relation_provider: Optional[RelationProvider] = None
    ) -> None:
        """Invalidate root and its cache-enabled related collections.

        Raises:
            BackendUnavailable: if the escalation to a full flush fails too
        """
        if not self._policy.can_cache_anything():
            return

        try:
            await self.flush_collection(root)

            if relation_provider is None:
                return

            seen: Set[Tuple[str, str, str]] = {_identity(root)}
            for related in await self._related_collections(root, relation_provider):
                identity = _identity(related)
                if identity in seen:
                    continue
                seen.add(identity)
                await self.flush_collection(related)

        except (BackendUnavailable, RelationMetadataError) as e:
            logger.error(
                f"Targeted invalidation of '{root.name}' failed ({e.error_code}: {e}); "
                f"flushing all enabled query cache stores"
            )
            await self.flush_everything()

    async def flush_collection(self, collection: CollectionNamingStrategy) -> None:
        """Flush the tag of every enabled policy for collection."""
        for kind in self._policy.enabled_kinds():
            await self._invalidator.flush_tag(
                self._policy.store_for(kind),
                self._policy.tag_for(kind, collection)
            )

    async def flush_everything(self) -> None:
        """Flush every enabled store once.

        Every store is attempted even if an earlier one fails.

        Raises:
            BackendUnavailable: naming the stores that could not be flushed
        """
        failed: List[str] = []

        for store in self._policy.enabled_stores():
            try:
                await self._invalidator.flush_all(store)
            except BackendUnavailable as e:
                logger.error(f"Full flush of store '{store}' failed: {e}")
                failed.append(store)

        if failed:
            raise BackendUnavailable(
                f"Could not flush query cache stores: {', '.join(failed)}",
                store=",".join(failed),
                operation="flush_store",
            )

    async def _related_collections(
        self,
        root: CollectionNamingStrategy,
        relation_provider: RelationProvider
    ) -> List[CollectionNamingStrategy]:
        edges = relation_provider.relations_of(root)
        if inspect.isawaitable(edges):
            edges = await edges

        if edges is None:
            return []
        if not isinstance(edges, Iterable):
            raise RelationMetadataError(
                f"Relations of '{root.name}' must be a sequence, got {type(edges).__name__}",
                collection=root.name,
            )

        related = []
        for edge in edges:
            collection, cache_enabled = _unpack_edge(root, edge)
            if cache_enabled:
                related.append(collection)
        return related


def _unpack_edge(root: CollectionNamingStrategy, edge: Any) -> Tuple[CollectionNamingStrategy, bool]:
    if isinstance(edge, RelationEdge):
        collection, cache_enabled = edge.related, edge.cache_enabled
    elif isinstance(edge, tuple) and len(edge) == 2:
        # Plain (related collection, is cache enabled) pairs
        collection, cache_enabled = edge
    else:
        collection, cache_enabled = None, None

    if isinstance(collection, CollectionNamingStrategy) and isinstance(cache_enabled, bool):
        return collection, cache_enabled

    raise RelationMetadataError(
        f"Malformed relation of '{root.name}': {edge!r}",
        collection=root.name,
    )


def _identity(collection: CollectionNamingStrategy) -> Tuple[str, str, str]:
    return (
        collection.name,
        collection.query_cache_tag_name(),
        collection.duplicate_query_cache_tag_name(),
    )
