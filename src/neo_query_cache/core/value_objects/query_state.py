"""Query lifecycle states."""

from enum import Enum


class QueryState(str, Enum):
    """Lifecycle of a query passing through the interceptor.

    PENDING -> {UNCACHED, CACHE_MISS, CACHE_HIT} -> DELIVERED
    """

    PENDING = "pending"
    UNCACHED = "uncached"
    CACHE_MISS = "cache_miss"
    CACHE_HIT = "cache_hit"
    DELIVERED = "delivered"
