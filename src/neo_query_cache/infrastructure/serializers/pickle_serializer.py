"""Pickle value serializer.

ONLY value serialization - encodes query results for remote cache stores
with optional gzip compression. Integers are stored as plain ASCII digits
so that backend-side increments keep working on version records.

Following maximum separation architecture - one file = one purpose.
"""

import gzip
import pickle
from dataclasses import dataclass
from typing import Any

from ...core.exceptions import CacheValueSerializationError

_GZIP_MAGIC = b"\x1f\x8b"
_PICKLE_MARKER = b"\x80"


@dataclass
class PickleSerializerStats:
    """Pickle serializer statistics."""

    serialization_count: int = 0
    deserialization_count: int = 0
    compressed_count: int = 0
    error_count: int = 0


class PickleValueSerializer:
    """Pickle serializer with compression for large values.

    Only use with trusted stores: unpickling runs arbitrary code.
    """

    def __init__(
        self,
        protocol: int = pickle.HIGHEST_PROTOCOL,
        use_compression: bool = False,
        compression_level: int = 6,
        compression_threshold: int = 1024  # Compress if > 1KB
    ):
        # Protocol 2+ always starts with the PROTO opcode
        if protocol < 2 or protocol > pickle.HIGHEST_PROTOCOL:
            protocol = pickle.HIGHEST_PROTOCOL

        self._protocol = protocol
        self._use_compression = use_compression
        self._compression_level = max(1, min(9, compression_level))
        self._compression_threshold = max(0, compression_threshold)
        self.stats = PickleSerializerStats()

    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes."""
        self.stats.serialization_count += 1

        if isinstance(value, int) and not isinstance(value, bool):
            return str(value).encode("ascii")

        try:
            data = pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            self.stats.error_count += 1
            raise CacheValueSerializationError(
                f"Cannot pickle value of type {type(value).__name__}: {e}"
            ) from e

        if self._use_compression and len(data) > self._compression_threshold:
            self.stats.compressed_count += 1
            return gzip.compress(data, compresslevel=self._compression_level)
        return data

    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes produced by serialize()."""
        self.stats.deserialization_count += 1

        try:
            if data.startswith(_GZIP_MAGIC):
                return pickle.loads(gzip.decompress(data))
            if data.startswith(_PICKLE_MARKER):
                return pickle.loads(data)
            return int(data)
        except (pickle.UnpicklingError, EOFError, ValueError, OSError, AttributeError, ImportError) as e:
            self.stats.error_count += 1
            raise CacheValueSerializationError(f"Cannot deserialize cached value: {e}") from e
