"""Cache policy kinds."""

from enum import Enum


class CachePolicyKind(Enum):
    """Caching policy a query is constructed with.

    The numeric values match the historic TYPE_CACHE_* constants so that
    policies can be persisted or passed around as plain integers.
    """

    NONE = 0
    CACHE_ALL_FOREVER = 1
    CACHE_DUPLICATES_ONCE = 2

    @property
    def is_cached(self) -> bool:
        return self is not CachePolicyKind.NONE
