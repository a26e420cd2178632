"""Relation provider protocol.

ONLY relation metadata contract - enumerates the collections directly
related to a collection through foreign associations.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Awaitable, Protocol, Sequence, Union, runtime_checkable

from ..entities.relation_edge import RelationEdge
from .collection_naming import CollectionNamingStrategy


@runtime_checkable
class RelationProvider(Protocol):
    """Relation metadata provider.

    May be implemented synchronously or asynchronously. Implementations
    signal missing or malformed metadata with RelationMetadataError.
    """

    def relations_of(
        self, collection: CollectionNamingStrategy
    ) -> Union[Sequence[RelationEdge], Awaitable[Sequence[RelationEdge]]]:
        """Get edges from collection to its related collections."""
        ...
