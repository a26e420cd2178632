"""Cacheable query entity.

ONLY query description - SQL text, bindings, target collection and the
caching policy chosen by whoever constructed the query.

Following maximum separation architecture - one file = one purpose.
"""

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..protocols.collection_naming import CollectionNamingStrategy
from ..value_objects.cache_policy_kind import CachePolicyKind
from ..value_objects.query_state import QueryState


@dataclass
class CacheableQuery:
    """Read or write query with an explicit caching policy.

    The interceptor never infers a policy; it applies ``policy`` as given
    and records the lifecycle in ``state``.
    """

    sql: str
    bindings: Sequence[Any]
    collection: CollectionNamingStrategy
    policy: CachePolicyKind = CachePolicyKind.NONE
    state: QueryState = field(default=QueryState.PENDING, compare=False)

    def __post_init__(self):
        if not isinstance(self.policy, CachePolicyKind):
            self.policy = CachePolicyKind(self.policy)
        self.bindings = tuple(self.bindings)

    def mark(self, state: QueryState) -> None:
        self.state = state
