from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ...domain import DiscoveryResult


def cache_key(server_url: str, username: Optional[str]) -> str:
    return f"{server_url}:{username or 'anonymous'}"


@dataclass(frozen=True)
class CacheEntry:
    result: DiscoveryResult
    stored_at: float


@dataclass
class DiscoveryCache:
    """Discovery results per (server, user), stale after ``ttl_seconds``.

    Entries are replaced wholesale; concurrent refreshes of one key may both run.
    """

    ttl_seconds: float = 300.0
    clock: Callable[[], float] = time.monotonic
    entries: Dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> Optional[DiscoveryResult]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= self.ttl_seconds:
            return None
        return entry.result

    def put(self, key: str, result: DiscoveryResult) -> None:
        self.entries[key] = CacheEntry(result=result, stored_at=self.clock())

    def clear(self) -> None:
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)
