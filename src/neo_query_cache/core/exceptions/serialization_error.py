"""Serialization error exception.

ONLY key serialization errors - raised when a cache key cannot be derived
deterministically from a query's SQL text and bindings.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Any, Dict, Optional

from .base import QueryCacheError


class SerializationError(QueryCacheError):
    """Cache key serialization error.

    Raised when a binding value has no total, typed encoding. The affected
    query falls back to direct, uncached execution.
    """

    def __init__(
        self,
        message: str,
        value: Any = None,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize serialization error.

        Args:
            message: Error description
            value: Value that failed to serialize
            path: Location of the value inside the bindings (e.g. "[2].name")
            original_error: Original underlying exception
        """
        super().__init__(message, error_code="QUERY_CACHE_SERIALIZATION_ERROR")
        self.value = value
        self.path = path
        self.original_error = original_error
        self.details = self.get_error_details()

    def get_error_details(self) -> Dict[str, Any]:
        """Get detailed error information."""
        details: Dict[str, Any] = {"path": self.path}

        if self.value is not None:
            details["value_type"] = type(self.value).__name__
            # Truncate for safety
            details["value_repr"] = repr(self.value)[:100]

        if self.original_error:
            details["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error),
            }

        return details
