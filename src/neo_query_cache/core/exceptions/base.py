"""Base exception for neo-query-cache.

All exceptions raised by the cache layer inherit from QueryCacheError and
carry an error code plus structured details, mirroring the neo-commons
exception hierarchy.
"""

from typing import Any, Dict, Optional


class QueryCacheError(Exception):
    """Base exception for all query cache errors.

    Cache-layer failures are contained within the cache layer; callers of the
    interceptor never see these for their read or write operations.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_details(exception: QueryCacheError) -> Dict[str, Any]:
    """Create a standardized error payload for logging.

    Args:
        exception: The query cache exception

    Returns:
        Error dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
