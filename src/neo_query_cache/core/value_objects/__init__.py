"""Query cache value objects."""

from .cache_key import CacheKey
from .cache_policy_kind import CachePolicyKind
from .query_state import QueryState

__all__ = [
    "CacheKey",
    "CachePolicyKind",
    "QueryState",
]
