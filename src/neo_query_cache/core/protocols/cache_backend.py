"""Cache backend protocol.

ONLY cache storage contract - the primitives the query cache layer needs
from a pluggable store: get, put, remember, atomic increment and
tag-scoped flush, each addressed by a named store.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, runtime_checkable


Compute = Callable[[], Awaitable[Any]]


@runtime_checkable
class CacheBackend(Protocol):
    """Cache backend protocol.

    Implementations raise BackendUnavailable for any storage failure and
    must provide atomic increment and atomic tag flush; the query cache
    layer performs no locking of its own.
    """

    async def get(self, store: str, key: str) -> Optional[Any]:
        """Get value by key. Returns None if absent or expired."""
        ...

    async def put(
        self,
        store: str,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Iterable[str] = ()
    ) -> None:
        """Store value. A ttl of None stores the value forever."""
        ...

    async def remember_forever(self, store: str, key: str, tag: str, compute: Compute) -> Any:
        """Return cached value or compute, store forever under tag and return it."""
        ...

    async def remember_for(
        self,
        store: str,
        key: str,
        tag: str,
        ttl: float,
        compute: Compute
    ) -> Any:
        """Return cached value or compute, store for ttl seconds under tag and return it."""
        ...

    async def increment(self, store: str, key: str, amount: int = 1) -> int:
        """Atomically increment an integer value, treating absent as 0."""
        ...

    async def flush_tag(self, store: str, tag: str) -> None:
        """Remove every entry registered under tag. Idempotent."""
        ...

    async def flush_store(self, store: str) -> None:
        """Remove every entry in the store."""
        ...
