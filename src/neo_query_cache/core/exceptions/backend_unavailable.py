"""Backend unavailable exception.

ONLY backend failures - raised by cache backends when a get, put,
increment or flush primitive cannot be completed.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Optional

from .base import QueryCacheError


class BackendUnavailable(QueryCacheError):
    """Cache backend operation failed.

    Triggers the increment fallback and the full-flush escalation; never
    fatal to the caller's query.
    """

    def __init__(
        self,
        message: str,
        store: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message,
            error_code="QUERY_CACHE_BACKEND_UNAVAILABLE",
            details={"store": store, "operation": operation},
        )
        self.store = store
        self.operation = operation


class CacheValueSerializationError(BackendUnavailable):
    """Raised when a query result cannot be encoded for a remote store."""

    def __init__(self, message: str, store: Optional[str] = None):
        super().__init__(message, store=store, operation="serialize")
        self.error_code = "QUERY_CACHE_VALUE_SERIALIZATION_ERROR"
