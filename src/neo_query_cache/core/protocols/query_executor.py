"""Query executor protocol.

ONLY execution contract - the underlying data-access path the interceptor
wraps.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class QueryExecutor(Protocol):
    """Underlying query execution path."""

    async def fetch(self, sql: str, bindings: Sequence[Any]) -> Any:
        """Run a select statement and return its result set."""
        ...

    async def execute(self, sql: str, bindings: Sequence[Any]) -> Any:
        """Run an insert, update, delete or truncate statement."""
        ...
