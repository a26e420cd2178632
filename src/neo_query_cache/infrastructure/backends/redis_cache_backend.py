"""Redis cache backend.

ONLY Redis implementation - named stores over redis.asyncio clients with
tag sets, INCRBY-based versions and pickled values.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...config.settings import QueryCacheSettings
from ...core.exceptions import BackendUnavailable
from ...core.protocols.cache_backend import Compute
from ..serializers.pickle_serializer import PickleValueSerializer

logger = logging.getLogger(__name__)

# Deletes every member of a tag set and the set itself atomically
_FLUSH_TAG_SCRIPT = """
local members = redis.call("smembers", KEYS[1])
for i = 1, #members, 500 do
    redis.call("del", unpack(members, i, math.min(i + 499, #members)))
end
redis.call("del", KEYS[1])
return #members
"""


class RedisCacheBackend:
    """Redis cache backend.

    Each store name maps to a client; stores without a dedicated client
    share the default client and are separated by key prefix:
    ``<key_prefix><store>:<key>`` for entries and
    ``<key_prefix><store>:tag:<tag>`` for tag sets.
    """

    def __init__(
        self,
        redis_client: Optional[Redis] = None,
        clients: Optional[Mapping[str, Redis]] = None,
        key_prefix: str = "query_cache:",
        serializer: Optional[PickleValueSerializer] = None,
        scan_batch_size: int = 500
    ):
        """Initialize Redis cache backend.

        Args:
            redis_client: Default client for stores without a dedicated one
            clients: Dedicated clients per store name
            key_prefix: Prefix for every Redis key
            serializer: Value serializer, pickle by default
            scan_batch_size: SCAN count hint used by flush_store
        """
        self._default_client = redis_client
        self._clients: Dict[str, Redis] = dict(clients or {})
        self._key_prefix = key_prefix
        self._serializer = serializer or PickleValueSerializer()
        self._scan_batch_size = scan_batch_size

    @classmethod
    def from_settings(cls, settings: QueryCacheSettings) -> "RedisCacheBackend":
        """Create backend with a client built from settings.redis_url."""
        if not settings.redis_url:
            raise BackendUnavailable("redis_url is not configured", operation="connect")
        client = redis.from_url(settings.redis_url)
        return cls(redis_client=client, key_prefix=settings.redis_key_prefix)

    async def close(self) -> None:
        """Close every client owned by this backend."""
        clients = {id(c): c for c in [self._default_client, *self._clients.values()] if c is not None}
        for client in clients.values():
            await client.aclose()

    async def get(self, store: str, key: str) -> Optional[Any]:
        with self._translate_errors(store, "get"):
            raw = await self._client(store).get(self._key(store, key))
        if raw is None:
            return None
        return self._serializer.deserialize(raw)

    async def put(
        self,
        store: str,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Iterable[str] = ()
    ) -> None:
        full_key = self._key(store, key)
        client = self._client(store)

        if ttl is not None and ttl <= 0:
            with self._translate_errors(store, "put"):
                await client.delete(full_key)
            return

        data = self._serializer.serialize(value)
        with self._translate_errors(store, "put"):
            async with client.pipeline(transaction=True) as pipe:
                pipe.set(full_key, data, px=int(ttl * 1000) if ttl is not None else None)
                for tag in tags:
                    pipe.sadd(self._tag_key(store, tag), full_key)
                await pipe.execute()

    async def remember_forever(self, store: str, key: str, tag: str, compute: Compute) -> Any:
        return await self._remember(store, key, tag, None, compute)

    async def remember_for(self, store: str, key: str, tag: str, ttl: float, compute: Compute) -> Any:
        return await self._remember(store, key, tag, ttl, compute)

    async def increment(self, store: str, key: str, amount: int = 1) -> int:
        with self._translate_errors(store, "increment"):
            return int(await self._client(store).incrby(self._key(store, key), amount))

    async def flush_tag(self, store: str, tag: str) -> None:
        with self._translate_errors(store, "flush_tag"):
            flushed = await self._client(store).eval(_FLUSH_TAG_SCRIPT, 1, self._tag_key(store, tag))
        logger.debug(f"Flushed {flushed} redis keys under tag '{tag}' in store '{store}'")

    async def flush_store(self, store: str) -> None:
        client = self._client(store)
        pattern = f"{self._key_prefix}{store}:*"

        with self._translate_errors(store, "flush_store"):
            batch = []
            async for redis_key in client.scan_iter(match=pattern, count=self._scan_batch_size):
                batch.append(redis_key)
                if len(batch) >= self._scan_batch_size:
                    await client.delete(*batch)
                    batch = []
            if batch:
                await client.delete(*batch)

    async def ping(self) -> bool:
        """Check every client is reachable."""
        try:
            for client in {id(c): c for c in [self._default_client, *self._clients.values()] if c}.values():
                await client.ping()
            return True
        except RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

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
        value = await compute()
        await self.put(store, key, value, ttl=ttl, tags=(tag,))
        return value

    def _client(self, store: str) -> Redis:
        client = self._clients.get(store, self._default_client)
        if client is None:
            raise BackendUnavailable(f"No redis client configured for store '{store}'", store=store)
        return client

    def _key(self, store: str, key: str) -> str:
        return f"{self._key_prefix}{store}:{key}"

    def _tag_key(self, store: str, tag: str) -> str:
        return f"{self._key_prefix}{store}:tag:{tag}"

    @contextmanager
    def _translate_errors(self, store: str, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            raise BackendUnavailable(
                f"Redis {operation} failed for store '{store}': {e}",
                store=store,
                operation=operation,
            ) from e
