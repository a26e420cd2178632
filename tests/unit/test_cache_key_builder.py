"""Tests for cache key derivation."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

import pytest

from neo_query_cache.application.services.cache_key_builder import CacheKeyBuilder
from neo_query_cache.core.exceptions import SerializationError


class Status(Enum):
    ACTIVE = "active"


SQL = "select * from users where id = ? and status = ?"


class TestCacheKeyBuilder:
    """Test key determinism and sensitivity."""

    @pytest.fixture
    def builder(self):
        return CacheKeyBuilder()

    def test_same_inputs_same_key(self, builder):
        bindings = [1, "active", None, 2.5, Decimal("1.10"), date(2024, 1, 1)]

        assert builder.build_key(SQL, bindings) == builder.build_key(SQL, list(bindings))
        assert CacheKeyBuilder().build_key(SQL, bindings) == builder.build_key(SQL, bindings)

    def test_binding_order_changes_key(self, builder):
        assert builder.build_key(SQL, [1, "active"]) != builder.build_key(SQL, ["active", 1])

    def test_single_value_changes_key(self, builder):
        assert builder.build_key(SQL, [1, "active"]) != builder.build_key(SQL, [2, "active"])

    def test_sql_text_changes_key(self, builder):
        assert builder.build_key(SQL, [1]) != builder.build_key(SQL + " limit 1", [1])

    def test_values_are_typed(self, builder):
        assert builder.build_key(SQL, [True]) != builder.build_key(SQL, [1])
        assert builder.build_key(SQL, [1]) != builder.build_key(SQL, ["1"])
        assert builder.build_key(SQL, [None]) != builder.build_key(SQL, ["None"])
        assert builder.build_key(SQL, [b"a"]) != builder.build_key(SQL, ["a"])

    def test_boundaries_do_not_collide(self, builder):
        assert builder.build_key(SQL, ["ab", "c"]) != builder.build_key(SQL, ["a", "bc"])
        assert builder.build_key(SQL, [[1, 2], 3]) != builder.build_key(SQL, [[1], 2, 3])

    def test_sets_and_dicts_are_order_independent(self, builder):
        assert builder.build_key(SQL, [{3, 1, 2}]) == builder.build_key(SQL, [{1, 2, 3}])
        assert builder.build_key(SQL, [{"a": 1, "b": 2}]) == builder.build_key(SQL, [{"b": 2, "a": 1}])

    def test_supported_scalar_types(self, builder):
        key = builder.build_key(SQL, [
            uuid.UUID(int=5),
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            Status.ACTIVE,
            bytearray(b"x"),
            (1, 2),
        ])

        assert str(key).startswith("query:")
        assert key.version is None

    def test_unsupported_binding_raises(self, builder):
        with pytest.raises(SerializationError) as exc_info:
            builder.build_key(SQL, [1, object()])

        assert exc_info.value.path == "bindings[1]"
        assert exc_info.value.details["value_type"] == "object"

    def test_unsupported_nested_binding_raises(self, builder):
        with pytest.raises(SerializationError):
            builder.build_key(SQL, [{"user": object()}])

    def test_non_string_sql_raises(self, builder):
        with pytest.raises(SerializationError):
            builder.build_key(None, [])

    def test_self_referencing_binding_raises(self, builder):
        loop = []
        loop.append(loop)

        with pytest.raises(SerializationError):
            builder.build_key(SQL, [loop])


class TestVersionedKeys:
    """Test version folding."""

    @pytest.fixture
    def builder(self):
        return CacheKeyBuilder()

    def test_version_changes_key(self, builder):
        old = builder.build_versioned_key(SQL, [1], 1)
        new = builder.build_versioned_key(SQL, [1], 2)

        assert old != new
        assert old.version == 1
        assert new.version == 2

    def test_versioned_key_differs_from_plain_key(self, builder):
        assert builder.build_versioned_key(SQL, [1], 1) != builder.build_key(SQL, [1])

    def test_versioned_key_is_deterministic(self, builder):
        assert builder.build_versioned_key(SQL, [1], 7) == builder.build_versioned_key(SQL, [1], 7)

    @pytest.mark.parametrize("version", [True, "2", -1, 1.5])
    def test_invalid_version_raises(self, builder, version):
        with pytest.raises(SerializationError):
            builder.build_versioned_key(SQL, [1], version)
