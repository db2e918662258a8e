"""In-process TTL cache for match results.

Entries expire lazily: a read at or past an entry's expiry deletes it.
The cache lives in one process only; running several API instances needs a
shared store (e.g. Redis) behind the same interface.
"""

import functools
import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from pydantic import TypeAdapter

from exitmatch.config import settings

logger = logging.getLogger(__name__)

_json_adapter = TypeAdapter(Any)

# Event name -> key substrings to clear
INVALIDATION_MAP: dict[str, list[str]] = {
    "buyer_preference_update": ["recommendations:", "matches:"],
    "business_update": ["business:", "matches:"],
    "new_business_listed": ["recommendations:"],
    "business_removed": ["recommendations:", "matches:"],
}


@dataclass
class CacheEntry:
    """A cached value with its absolute expiry (epoch seconds)."""

    key: str
    data: Any
    expires_at: float


class MatchCache:
    """Thread-safe TTL key-value store with pattern and event invalidation."""

    def __init__(
        self,
        default_ttl: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl if default_ttl is not None else settings.cache_default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        """Get cached data, or None if missing or expired."""
        with self._lock:
            entry = self._live_entry(key)
            return entry.data if entry is not None else None

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        """Cache data for ``ttl`` seconds (default TTL when not given).

        A ttl of 0 stores an entry that is already expired.
        """
        expires_at = self._clock() + (ttl if ttl is not None else self.default_ttl)
        with self._lock:
            self._entries[key] = CacheEntry(key=key, data=data, expires_at=expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self, pattern: Optional[str] = None) -> int:
        """Remove keys containing ``pattern``, or everything. Returns the count."""
        with self._lock:
            if not pattern:
                removed = len(self._entries)
                self._entries.clear()
                return removed

            keys = [key for key in self._entries if pattern in key]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def invalidate_by_event(self, event: str) -> int:
        """Clear the key patterns tied to a domain event."""
        patterns = INVALIDATION_MAP.get(event)
        if patterns is None:
            logger.warning(f"Unknown cache invalidation event: {event}")
            return 0

        removed = sum(self.clear(pattern) for pattern in patterns)
        logger.info(f"Event {event} invalidated {removed} cache entries")
        return removed

    def get_stats(self) -> dict:
        """Size, keys and a rough memory estimate (2 bytes per character)."""
        with self._lock:
            keys = list(self._entries)
            memory_usage = sum(
                len(key) * 2 + len(_json_adapter.dump_json(entry.data)) * 2
                for key, entry in self._entries.items()
            )
        return {
            "size": len(keys),
            "keys": keys,
            "memory_usage": memory_usage,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None


class CacheKeys:
    """Key builders shared by every cache user."""

    @staticmethod
    def recommendations(
        buyer_id: str,
        page: int = 1,
        limit: int = 10,
        fingerprint: Optional[str] = None,
    ) -> str:
        key = f"recommendations:{buyer_id}:{page}:{limit}"
        return f"{key}:{fingerprint}" if fingerprint else key

    @staticmethod
    def fingerprint(payload: Any) -> str:
        """Short stable digest of a JSON-serialisable payload."""
        raw = _json_adapter.dump_json(payload)
        return hashlib.md5(raw).hexdigest()[:16]

    @staticmethod
    def match(buyer_id: str, business_id: str) -> str:
        return f"match:{buyer_id}:{business_id}"

    @staticmethod
    def business_matches(business_id: str) -> str:
        return f"business:{business_id}:matches"

    @staticmethod
    def buyer_matches(buyer_id: str) -> str:
        return f"buyer:{buyer_id}:matches"

    @staticmethod
    def preferences(buyer_id: str) -> str:
        return f"preferences:{buyer_id}"


cache_keys = CacheKeys()


def cached(cache: MatchCache, key_func: Callable[..., str], ttl: Optional[int] = None):
    """Read-through caching of a function's result under ``key_func(*args)``.

    None results are not distinguishable from a miss and are recomputed.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            key = key_func(*args, **kwargs)
            hit = cache.get(key)
            if hit is not None:
                return hit
            result = func(*args, **kwargs)
            cache.set(key, result, ttl)
            return result
        return wrapper
    return decorator


class BatchCache:
    """Queue cache operations and run them together."""

    def __init__(self, cache: MatchCache):
        self.cache = cache
        self._operations: list[tuple[str, str, Any, Optional[int]]] = []

    def get(self, key: str) -> "BatchCache":
        self._operations.append(("get", key, None, None))
        return self

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> "BatchCache":
        self._operations.append(("set", key, data, ttl))
        return self

    def delete(self, key: str) -> "BatchCache":
        self._operations.append(("delete", key, None, None))
        return self

    def execute(self) -> dict[str, Any]:
        """Run queued operations in order; results are keyed by cache key."""
        results: dict[str, Any] = {}
        for op, key, data, ttl in self._operations:
            if op == "get":
                results[key] = self.cache.get(key)
            elif op == "set":
                self.cache.set(key, data, ttl)
                results[key] = True
            else:
                results[key] = self.cache.delete(key)
        self._operations = []
        return results


def warm_cache(
    cache: MatchCache,
    buyer_ids: Iterable[str],
    fetch_recommendations: Callable[[str], Any],
    ttl: Optional[int] = None,
) -> int:
    """Pre-compute first-page recommendations for each buyer."""
    if ttl is None:
        ttl = settings.warm_cache_ttl
    warmed = 0
    for buyer_id in buyer_ids:
        cache.set(cache_keys.recommendations(buyer_id), fetch_recommendations(buyer_id), ttl)
        warmed += 1
    logger.info(f"Warmed recommendations cache for {warmed} buyers")
    return warmed
