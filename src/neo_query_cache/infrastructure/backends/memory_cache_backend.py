"""Memory cache backend.

ONLY in-memory implementation - named in-process stores (the default
"array" store among them) with TTL expiry, tag index and atomic increment.

Following maximum separation architecture - one file = one purpose.
"""

import asyncio
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Set

from ...core.exceptions import BackendUnavailable
from ...core.protocols.cache_backend import Compute

logger = logging.getLogger(__name__)


@dataclass
class MemoryEntry:
    """Stored value with expiry and tags."""

    value: Any
    expires_at: Optional[float] = None
    tags: Set[str] = field(default_factory=set)

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass
class MemoryStore:
    """One named store: entries plus tag -> keys index."""

    entries: Dict[str, MemoryEntry] = field(default_factory=dict)
    tags: Dict[str, Set[str]] = field(default_factory=lambda: defaultdict(set))

    def remove_expired(self, now: float) -> int:
        expired = [key for key, entry in self.entries.items() if entry.is_expired(now)]
        for key in expired:
            self.remove(key)
        return len(expired)

    def remove(self, key: str) -> None:
        entry = self.entries.pop(key, None)
        if entry is None:
            return
        for tag in entry.tags:
            members = self.tags.get(tag)
            if members is not None:
                members.discard(key)
                if not members:
                    del self.tags[tag]


class MemoryCacheBackend:
    """Non-persistent cache backend for single-process deployments and tests.

    Features:
    - Independent named stores
    - TTL expiration against an injectable clock
    - Tag index for tag-scoped flush
    - Atomic increment under an asyncio lock
    - Periodic sweep of expired entries on write
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, cleanup_interval: float = 60.0):
        """Initialize memory cache backend.

        Args:
            clock: Time source for expiry, in seconds
            cleanup_interval: Minimum seconds between expired-entry sweeps
        """
        self._clock = clock
        self._cleanup_interval = cleanup_interval
        self._next_cleanup = clock() + cleanup_interval
        self._stores: Dict[str, MemoryStore] = defaultdict(MemoryStore)
        self._lock = asyncio.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "increments": 0,
            "tag_flushes": 0,
            "store_flushes": 0,
            "expired_removed": 0,
        }

    async def get(self, store: str, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._live_entry(store, key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return entry.value

    async def put(
        self,
        store: str,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Iterable[str] = ()
    ) -> None:
        async with self._lock:
            self._put(store, key, value, ttl, tags)

    async def remember_forever(self, store: str, key: str, tag: str, compute: Compute) -> Any:
        return await self._remember(store, key, tag, None, compute)

    async def remember_for(self, store: str, key: str, tag: str, ttl: float, compute: Compute) -> Any:
        return await self._remember(store, key, tag, ttl, compute)

    async def increment(self, store: str, key: str, amount: int = 1) -> int:
        async with self._lock:
            entry = self._live_entry(store, key)
            if entry is None:
                entry = MemoryEntry(value=0)
                self._stores[store].entries[key] = entry
            elif isinstance(entry.value, bool) or not isinstance(entry.value, int):
                raise BackendUnavailable(
                    f"Cannot increment non-numeric value at '{key}'",
                    store=store,
                    operation="increment",
                )

            entry.value += amount
            self._stats["increments"] += 1
            return entry.value

    async def flush_tag(self, store: str, tag: str) -> None:
        async with self._lock:
            memory_store = self._stores.get(store)
            if memory_store is None:
                return
            for key in list(memory_store.tags.get(tag, ())):
                memory_store.remove(key)
            memory_store.tags.pop(tag, None)
            self._stats["tag_flushes"] += 1

    async def flush_store(self, store: str) -> None:
        async with self._lock:
            self._stores.pop(store, None)
            self._stats["store_flushes"] += 1

    async def get_stats(self) -> Dict[str, Any]:
        """Get backend statistics."""
        async with self._lock:
            self._cleanup_expired()
            return {
                **self._stats,
                "stores": {name: len(s.entries) for name, s in self._stores.items()},
            }

    async def _remember(
        self,
        store: str,
        key: str,
        tag: str,
        ttl: Optional[float],
        compute: Compute
    ) -> Any:
        value = await self.get(store, key)
        if value is not None:
            return value

        # Compute outside the lock; concurrent misses may both compute
        value = await compute()
        await self.put(store, key, value, ttl=ttl, tags=(tag,))
        return value

    def _put(self, store: str, key: str, value: Any, ttl: Optional[float], tags: Iterable[str]) -> None:
        if self._clock() >= self._next_cleanup:
            self._cleanup_expired()

        memory_store = self._stores[store]
        memory_store.remove(key)

        # Non-positive TTL forgets the key
        if ttl is not None and ttl <= 0:
            return

        expires_at = self._clock() + ttl if ttl is not None else None
        entry = MemoryEntry(value=value, expires_at=expires_at, tags=set(tags))
        memory_store.entries[key] = entry
        for tag in entry.tags:
            memory_store.tags[tag].add(key)
        self._stats["sets"] += 1

    def _cleanup_expired(self) -> int:
        now = self._clock()
        removed = sum(s.remove_expired(now) for s in self._stores.values())
        self._next_cleanup = now + self._cleanup_interval
        self._stats["expired_removed"] += removed
        if removed:
            logger.debug(f"Removed {removed} expired query cache entries")
        return removed

    def _live_entry(self, store: str, key: str) -> Optional[MemoryEntry]:
        memory_store = self._stores.get(store)
        if memory_store is None:
            return None

        entry = memory_store.entries.get(key)
        if entry is None:
            return None

        if entry.is_expired(self._clock()):
            memory_store.remove(key)
            return None

        return entry
