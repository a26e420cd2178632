"""Configuration missing exception.

ONLY missing configuration - a caching policy lacks a usable store or
prefix. Treated as "caching disabled" for that policy.

Following maximum separation architecture - one file = one purpose.
"""

from .base import QueryCacheError


class ConfigurationMissing(QueryCacheError):
    """Required policy configuration is absent or blank."""

    def __init__(self, option: str):
        super().__init__(
            f"Query cache option '{option}' is not configured",
            error_code="QUERY_CACHE_CONFIGURATION_MISSING",
            details={"option": option},
        )
        self.option = option
