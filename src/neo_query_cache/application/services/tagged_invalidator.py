"""Tagged invalidator.

ONLY tag-scoped flushing - removes every entry of a store registered under
a tag, or the whole store as the disaster-recovery fallback.

Following maximum separation architecture - one file = one purpose.
"""

import logging

from ...core.protocols.cache_backend import CacheBackend

logger = logging.getLogger(__name__)


class TaggedInvalidator:
    """Flushes cache entries by tag or by store.

    Backend failures surface as BackendUnavailable. Flushing a tag with no
    entries is a no-op.
    """

    def __init__(self, backend: CacheBackend):
        self._backend = backend

    async def flush_tag(self, store: str, tag: str) -> None:
        await self._backend.flush_tag(store, tag)
        logger.debug(f"Flushed tag '{tag}' in store '{store}'")

    async def flush_all(self, store: str) -> None:
        await self._backend.flush_store(store)
        logger.info(f"Flushed entire store '{store}'")
