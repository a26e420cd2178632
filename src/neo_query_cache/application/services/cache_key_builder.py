"""Cache key builder.

ONLY key derivation - deterministic, collision-resistant cache keys from
SQL text, ordered bindings and an optional version.

Every value is encoded as a one-byte type tag, an 8-byte big-endian
payload length and the payload itself, so no two distinct inputs share an
encoding. The encoding is hashed with SHA-256 to bound the key length.

Following maximum separation architecture - one file = one purpose.
"""

import hashlib
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence

from ...core.exceptions import SerializationError
from ...core.value_objects.cache_key import CacheKey

KEY_PREFIX = "query"
_FORMAT_MARKER = b"QC1"


class CacheKeyBuilder:
    """Builds cache keys for read queries."""

    def build_key(self, sql: str, bindings: Sequence[Any]) -> CacheKey:
        """Build the key identifying (sql, bindings).

        Raises:
            SerializationError: if a binding value has no typed encoding
        """
        digest = self._digest(sql, bindings, None)
        return CacheKey(f"{KEY_PREFIX}:{digest}")

    def build_versioned_key(self, sql: str, bindings: Sequence[Any], version: int) -> CacheKey:
        """Build the key identifying (sql, bindings, version).

        Bumping the version makes every key issued for the previous version
        unreachable without enumerating or deleting it.
        """
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise SerializationError(f"Invalid cache version: {version!r}", value=version, path="version")

        digest = self._digest(sql, bindings, version)
        return CacheKey(f"{KEY_PREFIX}:v{version}:{digest}")

    def serialize(self, sql: str, bindings: Sequence[Any], version: Optional[int] = None) -> bytes:
        """Encode the key inputs; exposed for diagnostics."""
        if not isinstance(sql, str):
            raise SerializationError("SQL text must be a string", value=sql, path="sql")
        if isinstance(bindings, (str, bytes)) or not isinstance(bindings, Sequence):
            raise SerializationError("Bindings must be an ordered sequence", value=bindings, path="bindings")

        out = bytearray(_FORMAT_MARKER)
        try:
            out += _encode(sql, "sql")
            out += _encode(list(bindings), "bindings")
            if version is not None:
                out += _encode(version, "version")
        except RecursionError as e:
            raise SerializationError(
                "Bindings are nested too deeply or self-referencing",
                path="bindings",
                original_error=e,
            ) from e
        return bytes(out)

    def _digest(self, sql: str, bindings: Sequence[Any], version: Optional[int]) -> str:
        return hashlib.sha256(self.serialize(sql, bindings, version)).hexdigest()


def _frame(tag: bytes, payload: bytes) -> bytes:
    return tag + len(payload).to_bytes(8, "big") + payload


def _text(tag: bytes, text: str) -> bytes:
    return _frame(tag, text.encode("utf-8"))


def _encode(value: Any, path: str) -> bytes:
    # Order matters: bool before int, Enum before its mixin types,
    # datetime before date.
    if value is None:
        return _frame(b"N", b"")
    if isinstance(value, bool):
        return _frame(b"B", b"\x01" if value else b"\x00")
    if isinstance(value, Enum):
        cls = type(value)
        payload = _text(b"s", f"{cls.__module__}.{cls.__qualname__}") + _encode(value.value, f"{path}.value")
        return _frame(b"E", payload)
    if isinstance(value, int):
        return _text(b"i", str(int(value)))
    if isinstance(value, float):
        return _text(b"f", float(value).hex())
    if isinstance(value, Decimal):
        return _text(b"d", str(value))
    if isinstance(value, str):
        return _text(b"s", str(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _frame(b"y", bytes(value))
    if isinstance(value, datetime):
        return _text(b"D", value.isoformat())
    if isinstance(value, date):
        return _text(b"a", value.isoformat())
    if isinstance(value, time):
        return _text(b"t", value.isoformat())
    if isinstance(value, timedelta):
        return _text(b"e", f"{value.days}:{value.seconds}:{value.microseconds}")
    if isinstance(value, uuid.UUID):
        return _text(b"u", value.hex)
    if isinstance(value, list):
        return _frame(b"l", b"".join(_encode(item, f"{path}[{i}]") for i, item in enumerate(value)))
    if isinstance(value, tuple):
        return _frame(b"p", b"".join(_encode(item, f"{path}[{i}]") for i, item in enumerate(value)))
    if isinstance(value, (set, frozenset)):
        items = sorted(_encode(item, f"{path}{{}}") for item in value)
        return _frame(b"S", b"".join(items))
    if isinstance(value, dict):
        pairs = sorted(
            (_encode(k, f"{path}.<key>"), _encode(v, f"{path}[{k!r}]"))
            for k, v in value.items()
        )
        return _frame(b"m", b"".join(k + v for k, v in pairs))

    raise SerializationError(
        f"Cannot build a cache key from binding of type {type(value).__name__}",
        value=value,
        path=path,
    )
