"""Cache policy resolution.

ONLY policy decisions - resolves, per policy kind, whether caching is
active and which store, prefix and tag to use.

Following maximum separation architecture - one file = one purpose.
"""

import logging
from typing import List, Optional, Set

from ...config.settings import QueryCacheSettings
from ...core.exceptions import ConfigurationMissing
from ...core.protocols.collection_naming import CollectionNamingStrategy
from ...core.value_objects.cache_policy_kind import CachePolicyKind

logger = logging.getLogger(__name__)

_SECTIONS = {
    CachePolicyKind.CACHE_ALL_FOREVER: "forever",
    CachePolicyKind.CACHE_DUPLICATES_ONCE: "duplicates",
}


class CachePolicy:
    """Cache policy resolver.

    A kind is enabled when both the runtime toggle of this instance and the
    static settings flag are on. The toggle is per instance: give each
    request or session its own policy to scope ``disable_caching()``.
    """

    def __init__(self, settings: Optional[QueryCacheSettings] = None, caching_enabled: bool = True):
        self._settings = settings or QueryCacheSettings()
        self._caching_enabled = caching_enabled
        self._reported_missing: Set[str] = set()

    @property
    def settings(self) -> QueryCacheSettings:
        return self._settings

    @property
    def caching_enabled(self) -> bool:
        """Runtime toggle state."""
        return self._caching_enabled

    def enable_caching(self) -> None:
        """Enable query caching for the owner of this policy."""
        self._caching_enabled = True

    def disable_caching(self) -> None:
        """Disable query caching for the owner of this policy.

        Useful while the underlying data is in a transient state, such as
        a migration being rolled back.
        """
        self._caching_enabled = False

    def is_forever_caching_enabled(self) -> bool:
        return self.is_enabled(CachePolicyKind.CACHE_ALL_FOREVER)

    def is_duplicate_caching_enabled(self) -> bool:
        return self.is_enabled(CachePolicyKind.CACHE_DUPLICATES_ONCE)

    def can_cache_anything(self) -> bool:
        return self.is_forever_caching_enabled() or self.is_duplicate_caching_enabled()

    def is_enabled(self, kind: CachePolicyKind) -> bool:
        if kind not in _SECTIONS or not self._caching_enabled:
            return False
        if getattr(self._settings, f"{_SECTIONS[kind]}_enabled") is not True:
            return False
        return self._is_configured(kind)

    def enabled_kinds(self) -> List[CachePolicyKind]:
        return [kind for kind in _SECTIONS if self.is_enabled(kind)]

    def enabled_stores(self) -> List[str]:
        """Distinct stores used by the enabled kinds, in policy order."""
        stores: List[str] = []
        for kind in self.enabled_kinds():
            store = self.store_for(kind)
            if store not in stores:
                stores.append(store)
        return stores

    def store_for(self, kind: CachePolicyKind) -> str:
        return self._option(kind, "store")

    def prefix_for(self, kind: CachePolicyKind) -> str:
        return self._option(kind, "prefix")

    def tag_for(self, kind: CachePolicyKind, collection: CollectionNamingStrategy) -> str:
        """Cache tag grouping every entry of collection under kind."""
        if kind is CachePolicyKind.CACHE_DUPLICATES_ONCE:
            name = collection.duplicate_query_cache_tag_name()
        else:
            name = collection.query_cache_tag_name()
        return f"{self.prefix_for(kind)}.{name}"

    def _option(self, kind: CachePolicyKind, option: str) -> str:
        if kind not in _SECTIONS:
            raise ValueError(f"Policy {kind.name} has no cache configuration")

        name = f"{_SECTIONS[kind]}.{option}"
        value = getattr(self._settings, f"{_SECTIONS[kind]}_{option}", None)
        if not value:
            raise ConfigurationMissing(name)
        return value

    def _is_configured(self, kind: CachePolicyKind) -> bool:
        try:
            self.store_for(kind)
            self.prefix_for(kind)
        except ConfigurationMissing as e:
            if e.option not in self._reported_missing:
                self._reported_missing.add(e.option)
                logger.warning(f"{e.message}; {kind.name} caching disabled")
            return False
        return True
