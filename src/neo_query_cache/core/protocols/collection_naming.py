"""Collection naming strategy protocol.

ONLY naming contract - every collection taking part in query caching
declares the names its cache tags are derived from.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CollectionNamingStrategy(Protocol):
    """Naming capability of a cacheable collection.

    CollectionDescriptor is the default implementation and falls back to
    the collection (table) name when no explicit tag name is declared.
    """

    @property
    def name(self) -> str:
        """Collection (table) name, used for version records."""
        ...

    def query_cache_tag_name(self) -> str:
        """Tag name used under the cache-all-forever policy."""
        ...

    def duplicate_query_cache_tag_name(self) -> str:
        """Tag name used under the cache-duplicates-once policy."""
        ...
