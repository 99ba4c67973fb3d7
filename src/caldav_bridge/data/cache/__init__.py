from __future__ import annotations

from .discovery_cache import CacheEntry, DiscoveryCache, cache_key

__all__ = ["CacheEntry", "DiscoveryCache", "cache_key"]
