"""Version counter.

ONLY version tracking - per-collection, per-prefix integers folded into
cache keys so a write invalidates every key without enumerating them.

Following maximum separation architecture - one file = one purpose.
"""

import logging
import time
from typing import Any, Callable, Optional

from ...core.exceptions import BackendUnavailable
from ...core.protocols.cache_backend import CacheBackend

logger = logging.getLogger(__name__)

VERSION_KEY_NAMESPACE = "query_cache_version"
INITIAL_VERSION = 1


class VersionCounter:
    """Version counter stored in the cache backend itself.

    Records live under ``query_cache_version:<prefix>:<collection>`` in the
    same store as the entries they version.
    """

    def __init__(self, backend: CacheBackend, clock: Callable[[], float] = time.time):
        self._backend = backend
        self._clock = clock

    @staticmethod
    def version_key(prefix: str, collection: str) -> str:
        return f"{VERSION_KEY_NAMESPACE}:{prefix}:{collection}"

    async def current_version(self, store: str, prefix: str, collection: str) -> int:
        """Current version, 1 when no record exists."""
        raw = await self._backend.get(store, self.version_key(prefix, collection))
        version = _as_version(raw)
        return version if version is not None else INITIAL_VERSION

    async def bump(self, store: str, prefix: str, collection: str) -> int:
        """Move the collection to a strictly greater version.

        Uses the backend's atomic increment. If it is unavailable or the
        record holds a non-numeric legacy value, writes a wall-clock based
        version instead, still never equal to or below the previous one.

        Raises:
            BackendUnavailable: if the fallback write fails as well
        """
        key = self.version_key(prefix, collection)
        previous: Optional[int] = None

        try:
            raw = await self._backend.get(store, key)
            previous = _as_version(raw)
            # An absent record reads as 1, so the first bump must land on 2
            amount = 2 if raw is None else 1
            version = await self._backend.increment(store, key, amount)
            if _as_version(version) is not None and version > (previous or INITIAL_VERSION):
                logger.debug(f"Bumped {key} in store '{store}' to {version}")
                return version
            logger.warning(f"Increment of {key} in store '{store}' returned {version!r}; using fallback")
        except BackendUnavailable as e:
            logger.warning(f"Increment of {key} in store '{store}' failed: {e}; using fallback")

        return await self._fallback(store, key, previous)

    async def _fallback(self, store: str, key: str, previous: Optional[int]) -> int:
        if previous is None:
            try:
                previous = _as_version(await self._backend.get(store, key))
            except BackendUnavailable:
                previous = None

        version = max(int(self._clock()), (previous or INITIAL_VERSION) + 1)
        await self._backend.put(store, key, version, ttl=None)
        logger.warning(f"Set {key} in store '{store}' to fallback version {version}")
        return version


def _as_version(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            return int(raw)
        except ValueError:
            return None
    return None
