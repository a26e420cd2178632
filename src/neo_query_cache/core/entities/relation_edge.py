"""Relation edge entity."""

from dataclasses import dataclass

from .collection_descriptor import CollectionDescriptor


@dataclass(frozen=True)
class RelationEdge:
    """Directed relation from a source collection to a related collection.

    The related collection takes part in cascading invalidation only when
    it opts in to caching (``cache_enabled``).
    """

    source: CollectionDescriptor
    related: CollectionDescriptor
    cache_enabled: bool = True
