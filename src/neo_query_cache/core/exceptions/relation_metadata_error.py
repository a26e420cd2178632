"""Relation metadata exception.

ONLY relation metadata failures - raised by relation providers that cannot
enumerate a collection's related collections.

Following maximum separation architecture - one file = one purpose.
"""

from typing import Optional

from .base import QueryCacheError


class RelationMetadataError(QueryCacheError):
    """Relation metadata is missing or malformed."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(
            message,
            error_code="QUERY_CACHE_RELATION_METADATA_ERROR",
            details={"collection": collection},
        )
        self.collection = collection
