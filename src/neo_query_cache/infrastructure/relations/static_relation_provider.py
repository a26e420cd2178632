"""Static relation provider.

ONLY mapping-backed relation metadata - serves relations declared up front,
for wiring without an ORM introspection layer and for tests.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ...core.entities.collection_descriptor import CollectionDescriptor
from ...core.entities.relation_edge import RelationEdge
from ...core.protocols.collection_naming import CollectionNamingStrategy

RelatedSpec = Union[CollectionDescriptor, Tuple[CollectionDescriptor, bool]]


class StaticRelationProvider:
    """Relation provider over a name -> related collections mapping.

    Related collections may be given bare (cache enabled) or as
    ``(collection, cache_enabled)`` pairs.
    """

    def __init__(self, relations: Optional[Mapping[str, Iterable[RelatedSpec]]] = None):
        self._relations: Dict[str, List[Tuple[CollectionDescriptor, bool]]] = {}
        for name, related in (relations or {}).items():
            for entry in related:
                if isinstance(entry, tuple):
                    self.add(name, entry[0], cache_enabled=entry[1])
                else:
                    self.add(name, entry)

    def add(self, source: str, related: CollectionDescriptor, cache_enabled: bool = True) -> None:
        self._relations.setdefault(source, []).append((related, cache_enabled))

    def relations_of(self, collection: CollectionNamingStrategy) -> List[RelationEdge]:
        source = collection if isinstance(collection, CollectionDescriptor) else CollectionDescriptor(collection.name)
        return [
            RelationEdge(source=source, related=related, cache_enabled=cache_enabled)
            for related, cache_enabled in self._relations.get(collection.name, [])
        ]
