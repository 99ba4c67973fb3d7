"""Data access layer."""

from __future__ import annotations

from .cache import CacheEntry, DiscoveryCache, cache_key

__all__ = ["CacheEntry", "DiscoveryCache", "cache_key"]
