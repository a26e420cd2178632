"""Cache key value object.

ONLY key representation - immutable cache key identifying one
(sql, bindings, version) triple.

Following maximum separation architecture - one file = one purpose.
"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CacheKey:
    """Cache key value object.

    Keys are produced by CacheKeyBuilder and are opaque to everything else:
    ``query:<sha256>`` or ``query:v<version>:<sha256>``.
    """

    value: str

    MAX_LENGTH = 250

    VALID_PATTERN = re.compile(r'^[a-zA-Z0-9._:/-]+$')

    def __post_init__(self):
        """Validate cache key on creation."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"Cache key too long, maximum {self.MAX_LENGTH} characters")

        if not self.VALID_PATTERN.match(self.value):
            raise ValueError(
                "Cache key contains invalid characters. "
                "Only alphanumeric, dot, underscore, colon, slash, and hyphen allowed"
            )

    @property
    def version(self) -> Optional[int]:
        """Version folded into the key, or None for unversioned keys."""
        parts = self.value.split(":")
        if len(parts) == 3 and parts[1].startswith("v"):
            return int(parts[1][1:])
        return None

    def __str__(self) -> str:
        return self.value
