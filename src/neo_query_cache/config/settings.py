"""Query cache settings.

Static configuration for both caching policies. Values come from the
environment (``QUERY_CACHE_*``) or from a mapping using the dotted option
names ``forever.enabled``, ``duplicates.store`` and so on.
"""

from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORE = "array"
DEFAULT_FOREVER_PREFIX = "cache.all_query"
DEFAULT_DUPLICATES_PREFIX = "cache.duplicate_query"


class QueryCacheSettings(BaseSettings):
    """Query cache settings.

    Absent values leave caching disabled, on the in-process ``array`` store.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUERY_CACHE_",
        case_sensitive=False,
        extra="ignore"
    )

    # Cache all queries forever
    forever_enabled: bool = Field(default=False, description="Cache every distinct query until invalidated")
    forever_store: str = Field(default=DEFAULT_STORE, description="Backend store for forever caching")
    forever_prefix: str = Field(default=DEFAULT_FOREVER_PREFIX, description="Tag and version prefix for forever caching")

    # Cache only duplicate queries once
    duplicates_enabled: bool = Field(default=False, description="Cache queries for one short window only")
    duplicates_store: str = Field(default=DEFAULT_STORE, description="Backend store for duplicate caching")
    duplicates_prefix: str = Field(default=DEFAULT_DUPLICATES_PREFIX, description="Tag prefix for duplicate caching")

    # Redis backend
    redis_url: Optional[str] = Field(default=None, description="Redis URL for the redis backend")
    redis_key_prefix: str = Field(default="query_cache:", description="Prefix for every redis key")

    @field_validator(
        "forever_store", "forever_prefix", "duplicates_store", "duplicates_prefix",
        mode="before"
    )
    @classmethod
    def strip_names(cls, v):
        """Strip whitespace around store names and prefixes."""
        if isinstance(v, str):
            return v.strip()
        return v

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "QueryCacheSettings":
        """Build settings from dotted option names.

        Accepts ``{"forever.enabled": True}`` as well as nested
        ``{"forever": {"enabled": True}}``. Unknown options are ignored.
        """
        return cls(**_flatten(mapping))


def _flatten(mapping: Mapping[str, Any], parent: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in mapping.items():
        name = f"{parent}_{key}" if parent else str(key)
        name = name.replace(".", "_").replace("-", "_").lower()
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat


@lru_cache()
def get_settings() -> QueryCacheSettings:
    """Get cached settings loaded from the environment."""
    return QueryCacheSettings()
