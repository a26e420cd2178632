"""Query cache exceptions.

One exception per file following maximum separation architecture.
"""

from .base import QueryCacheError, create_error_details
from .serialization_error import SerializationError
from .backend_unavailable import BackendUnavailable, CacheValueSerializationError
from .configuration_missing import ConfigurationMissing
from .relation_metadata_error import RelationMetadataError

__all__ = [
    "QueryCacheError",
    "create_error_details",
    "SerializationError",
    "BackendUnavailable",
    "CacheValueSerializationError",
    "ConfigurationMissing",
    "RelationMetadataError",
]
