"""Query cache entities."""

from .collection_descriptor import CollectionDescriptor
from .relation_edge import RelationEdge
from .cacheable_query import CacheableQuery

__all__ = [
    "CollectionDescriptor",
    "RelationEdge",
    "CacheableQuery",
]
