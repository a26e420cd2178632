"""Collection descriptor entity.

ONLY collection identity - default CollectionNamingStrategy implementation
describing a table or entity whose rows are cached as a unit.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CollectionDescriptor:
    """Cacheable collection.

    Tag names fall back in order: an explicit duplicate tag name, then the
    explicit tag name, then the collection name.
    """

    name: str
    cache_tag_name: Optional[str] = None
    duplicate_cache_tag_name: Optional[str] = None

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Collection name cannot be empty")

    def query_cache_tag_name(self) -> str:
        return self.cache_tag_name or self.name

    def duplicate_query_cache_tag_name(self) -> str:
        return self.duplicate_cache_tag_name or self.query_cache_tag_name()

    def __str__(self) -> str:
        return self.name
