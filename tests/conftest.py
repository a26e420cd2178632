"""Pytest configuration and fixtures for neo-query-cache tests."""

from typing import Any, List, Optional, Set, Tuple
from unittest.mock import AsyncMock

import pytest

from neo_query_cache.config.settings import QueryCacheSettings
from neo_query_cache.core.entities import CollectionDescriptor
from neo_query_cache.core.exceptions import BackendUnavailable
from neo_query_cache.infrastructure.backends.memory_cache_backend import MemoryCacheBackend
from neo_query_cache.infrastructure.relations.static_relation_provider import StaticRelationProvider


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingBackend(MemoryCacheBackend):
    """Memory backend recording flushes and increments, with injectable failures."""

    def __init__(self, clock=None):
        super().__init__(clock=clock or FakeClock())
        self.calls: List[Tuple[str, ...]] = []
        self.failing: Set[str] = set()
        self.failing_tags: Set[str] = set()

    def _check(self, operation: str, store: str) -> None:
        if operation in self.failing:
            raise BackendUnavailable(f"{operation} unavailable", store=store, operation=operation)

    async def get(self, store: str, key: str) -> Optional[Any]:
        self._check("get", store)
        return await super().get(store, key)

    async def put(self, store, key, value, ttl=None, tags=()):
        self._check("put", store)
        self.calls.append(("put", store, key))
        await super().put(store, key, value, ttl=ttl, tags=tags)

    async def increment(self, store: str, key: str, amount: int = 1) -> int:
        self.calls.append(("increment", store, key))
        self._check("increment", store)
        return await super().increment(store, key, amount)

    async def flush_tag(self, store: str, tag: str) -> None:
        self.calls.append(("flush_tag", store, tag))
        self._check("flush_tag", store)
        if tag in self.failing_tags:
            raise BackendUnavailable(f"flush of {tag} unavailable", store=store, operation="flush_tag")
        await super().flush_tag(store, tag)

    async def flush_store(self, store: str) -> None:
        self.calls.append(("flush_store", store))
        self._check("flush_store", store)
        await super().flush_store(store)

    def calls_of(self, operation: str) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[0] == operation]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend(clock):
    return RecordingBackend(clock=clock)


@pytest.fixture
def forever_settings():
    return QueryCacheSettings(forever_enabled=True, forever_store="forever")


@pytest.fixture
def both_settings():
    return QueryCacheSettings(
        forever_enabled=True,
        forever_store="forever",
        duplicates_enabled=True,
        duplicates_store="duplicates",
    )


@pytest.fixture
def users():
    return CollectionDescriptor("users")


@pytest.fixture
def posts():
    return CollectionDescriptor("posts")


@pytest.fixture
def comments():
    return CollectionDescriptor("comments")


@pytest.fixture
def audits():
    return CollectionDescriptor("audits")


@pytest.fixture
def relations(users, posts, comments, audits):
    """users -> posts (cached), users -> audits (not cached); comments unrelated."""
    return StaticRelationProvider({
        "users": [posts, (audits, False)],
    })


@pytest.fixture
def executor():
    """Mock query executor counting fetches."""
    mock = AsyncMock()
    mock.fetch = AsyncMock(side_effect=lambda sql, bindings: [{"sql": sql, "bindings": list(bindings)}])
    mock.execute = AsyncMock(return_value="UPDATE 1")
    return mock
