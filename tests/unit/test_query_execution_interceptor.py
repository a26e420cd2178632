"""Tests for the read/write interception lifecycle."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from neo_query_cache.application.services.cache_policy import CachePolicy
from neo_query_cache.application.services.query_execution_interceptor import (
    DUPLICATE_QUERY_TTL_SECONDS,
    QueryExecutionInterceptor,
)
from neo_query_cache.config.settings import QueryCacheSettings
from neo_query_cache.core.entities import CacheableQuery, RelationEdge
from neo_query_cache.core.exceptions import BackendUnavailable
from neo_query_cache.core.value_objects import CachePolicyKind, QueryState

FOREVER = CachePolicyKind.CACHE_ALL_FOREVER
DUPLICATES = CachePolicyKind.CACHE_DUPLICATES_ONCE

SELECT_USERS = "select * from users where id = ?"
SELECT_POSTS = "select * from posts where user_id = ?"


def read(collection, policy, sql=SELECT_USERS, bindings=(1,)):
    return CacheableQuery(sql, list(bindings), collection, policy)


def write(collection, sql="update users set name = ? where id = ?", bindings=("x", 1)):
    return CacheableQuery(sql, list(bindings), collection)


class TestReadPath:
    """Test select under each policy."""

    @pytest.fixture
    def interceptor(self, executor, backend, both_settings, relations):
        return QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings), relation_provider=relations)

    @pytest.mark.asyncio
    async def test_uncached_query_runs_directly(self, interceptor, executor, backend, users):
        query = read(users, CachePolicyKind.NONE)

        result = await interceptor.select(query)

        assert result == [{"sql": SELECT_USERS, "bindings": [1]}]
        assert query.state is QueryState.DELIVERED
        assert executor.fetch.await_count == 1
        assert backend.calls_of("put") == []

    @pytest.mark.asyncio
    async def test_forever_miss_then_hit(self, interceptor, executor, users):
        first = read(users, FOREVER)
        second = read(users, FOREVER)
        states = []
        first.mark = lambda state: states.append(state)

        assert await interceptor.select(first) == await interceptor.select(second)
        assert executor.fetch.await_count == 1
        assert states == [QueryState.PENDING, QueryState.CACHE_MISS, QueryState.DELIVERED]

    @pytest.mark.asyncio
    async def test_hit_records_cache_hit_state(self, interceptor, users):
        await interceptor.select(read(users, FOREVER))
        query = read(users, FOREVER)
        states = []
        query.mark = lambda state: states.append(state)

        await interceptor.select(query)

        assert states == [QueryState.PENDING, QueryState.CACHE_HIT, QueryState.DELIVERED]

    @pytest.mark.asyncio
    async def test_forever_entries_never_expire(self, interceptor, executor, clock, users):
        await interceptor.select(read(users, FOREVER))
        clock.advance(86_400)
        await interceptor.select(read(users, FOREVER))

        assert executor.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_different_bindings_are_cached_separately(self, interceptor, executor, users):
        await interceptor.select(read(users, FOREVER, bindings=(1,)))
        await interceptor.select(read(users, FOREVER, bindings=(2,)))

        assert executor.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_entries_are_stored_in_policy_store_with_tag(self, interceptor, backend, users):
        await interceptor.select(read(users, FOREVER))
        await interceptor.select(read(users, DUPLICATES))

        stores = [call[1] for call in backend.calls_of("put")]
        assert stores == ["forever", "duplicates"]

        await backend.flush_tag("forever", "cache.all_query.users")
        await backend.flush_tag("duplicates", "cache.duplicate_query.users")
        assert (await backend.get_stats())["stores"] == {"forever": 0, "duplicates": 0}

    @pytest.mark.asyncio
    async def test_duplicate_window(self, interceptor, executor, clock, users):
        assert await interceptor.select(read(users, DUPLICATES)) is not None
        second = read(users, DUPLICATES)
        await interceptor.select(second)

        assert executor.fetch.await_count == 1

        clock.advance(DUPLICATE_QUERY_TTL_SECONDS)
        await interceptor.select(read(users, DUPLICATES))

        assert executor.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_disabled_kind_runs_directly(self, executor, backend, users):
        interceptor = QueryExecutionInterceptor(
            executor, backend, CachePolicy(QueryCacheSettings(duplicates_enabled=True))
        )

        await interceptor.select(read(users, FOREVER))
        await interceptor.select(read(users, FOREVER))

        assert executor.fetch.await_count == 2
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_unserializable_binding_runs_uncached(self, interceptor, executor, backend, users):
        query = read(users, FOREVER, bindings=(object(),))

        await interceptor.select(query)
        await interceptor.select(read(users, FOREVER, bindings=(object(),)))

        assert executor.fetch.await_count == 2
        assert backend.calls_of("put") == []
        assert query.state is QueryState.DELIVERED

    @pytest.mark.asyncio
    async def test_backend_lookup_failure_runs_uncached(self, interceptor, executor, backend, users):
        backend.failing.add("get")

        result = await interceptor.select(read(users, FOREVER))

        assert result == [{"sql": SELECT_USERS, "bindings": [1]}]
        assert executor.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_backend_store_failure_returns_fresh_result(self, interceptor, executor, backend, users):
        backend.failing.add("put")

        result = await interceptor.select(read(users, FOREVER))

        assert result == [{"sql": SELECT_USERS, "bindings": [1]}]
        assert executor.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_executor_errors_propagate(self, interceptor, executor, users):
        executor.fetch.side_effect = RuntimeError("database down")

        with pytest.raises(RuntimeError):
            await interceptor.select(read(users, FOREVER))

        assert executor.fetch.await_count == 1


class TestWritePath:
    """Test invalidation before mutation."""

    @pytest.fixture
    def interceptor(self, executor, backend, both_settings, relations):
        return QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings), relation_provider=relations)

    @pytest.mark.asyncio
    async def test_write_then_read_misses(self, interceptor, executor, users):
        await interceptor.select(read(users, FOREVER))
        executor.fetch.side_effect = lambda sql, bindings: ["fresh"]

        assert await interceptor.update(write(users)) == "UPDATE 1"

        query = read(users, FOREVER)
        assert await interceptor.select(query) == ["fresh"]
        assert executor.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_write_invalidates_before_mutation(self, executor, backend, both_settings, users):
        order = []
        executor.execute.side_effect = lambda sql, bindings: order.append("execute")
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings))
        original_flush = backend.flush_tag

        async def flush_tag(store, tag):
            order.append("flush")
            await original_flush(store, tag)

        backend.flush_tag = flush_tag

        await interceptor.delete(write(users, "delete from users where id = ?", (1,)))

        assert order == ["flush", "flush", "execute"]

    @pytest.mark.asyncio
    async def test_write_bumps_forever_version_only(self, interceptor, backend, users):
        await interceptor.insert(write(users, "insert into users values (?)", (1,)))

        assert backend.calls_of("increment") == [
            ("increment", "forever", "query_cache_version:cache.all_query:users")
        ]

    @pytest.mark.asyncio
    async def test_write_invalidates_related_collection(self, interceptor, executor, users, posts):
        await interceptor.select(read(posts, FOREVER, sql=SELECT_POSTS))

        await interceptor.update(write(users))
        await interceptor.select(read(posts, FOREVER, sql=SELECT_POSTS))

        assert executor.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_write_leaves_unrelated_collection_cached(self, interceptor, executor, users, comments):
        await interceptor.select(read(comments, FOREVER, sql="select * from comments"))

        await interceptor.update(write(users))
        await interceptor.select(read(comments, FOREVER, sql="select * from comments"))

        assert executor.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_version_bump_orphans_entry_when_tag_flush_is_lost(self, executor, backend,
                                                                    forever_settings, users):
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(forever_settings))
        await interceptor.select(read(users, FOREVER))

        # Flush appears to succeed but removes nothing
        backend.flush_tag = AsyncMock()
        await interceptor.truncate(write(users, "truncate users", ()))
        await interceptor.select(read(users, FOREVER))

        assert executor.fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidation_failure_does_not_block_write(self, interceptor, executor, backend, users):
        backend.failing.update({"flush_tag", "flush_store", "increment", "put"})

        result = await interceptor.update(write(users))

        assert result == "UPDATE 1"
        executor.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_relation_edge_still_runs_write(self, executor, backend, both_settings, users):
        provider = MagicMock()
        provider.relations_of.return_value = [RelationEdge(source=users, related="posts")]
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings),
                                                relation_provider=provider)

        result = await interceptor.update(write(users))

        assert result == "UPDATE 1"
        executor.execute.assert_awaited_once()
        assert sorted(backend.calls_of("flush_store")) == [
            ("flush_store", "duplicates"),
            ("flush_store", "forever"),
        ]

    @pytest.mark.asyncio
    async def test_executor_write_errors_propagate(self, interceptor, executor, users):
        executor.execute.side_effect = RuntimeError("constraint violated")

        with pytest.raises(RuntimeError):
            await interceptor.insert(write(users))


class TestToggle:
    """Test runtime disable/enable."""

    @pytest.mark.asyncio
    async def test_disabled_caching_skips_cache_entirely(self, executor, backend, both_settings,
                                                        users, relations):
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings),
                                                relation_provider=relations)
        interceptor.disable_caching()

        await interceptor.update(write(users))
        await interceptor.select(read(users, FOREVER))
        await interceptor.select(read(users, FOREVER))

        assert backend.calls == []
        assert executor.fetch.await_count == 2
        executor.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reenabled_caching_resumes(self, executor, backend, both_settings, users):
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings))
        interceptor.disable_caching()
        interceptor.enable_caching()

        await interceptor.select(read(users, FOREVER))
        await interceptor.select(read(users, FOREVER))

        assert executor.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_backend_failure_is_not_raised_on_read(self, executor, both_settings, users):
        backend = AsyncMock()
        backend.remember_for.side_effect = BackendUnavailable("down")

        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings))

        assert await interceptor.select(read(users, DUPLICATES)) == [{"sql": SELECT_USERS, "bindings": [1]}]

    @pytest.mark.asyncio
    async def test_read_path_remembers_through_backend(self, executor, both_settings, users):
        backend = AsyncMock()
        backend.get.return_value = None
        backend.remember_forever.return_value = ["cached"]
        backend.remember_for.return_value = ["recent"]
        interceptor = QueryExecutionInterceptor(executor, backend, CachePolicy(both_settings))

        assert await interceptor.select(read(users, FOREVER)) == ["cached"]
        assert await interceptor.select(read(users, DUPLICATES)) == ["recent"]

        store, _, tag, _ = backend.remember_forever.await_args.args
        assert (store, tag) == ("forever", "cache.all_query.users")
        store, _, tag, ttl, _ = backend.remember_for.await_args.args
        assert (store, tag, ttl) == ("duplicates", "cache.duplicate_query.users", DUPLICATE_QUERY_TTL_SECONDS)
        executor.fetch.assert_not_awaited()
