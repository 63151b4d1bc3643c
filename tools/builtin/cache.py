"""
Cache Tools
-----------
cache and memoize: key/value storage with per-entry TTL, shared by every
call that goes through the same registry.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import threading
import time

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool
from ..result import Result
from ..schema import bool_param, enum_param, number_param, object_schema, string_param

CACHE_ACTIONS = ["get", "set", "delete", "clear", "keys", "has", "stats"]


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0


class TTLCache:
    """
    Thread-safe in-memory cache.

    Expired entries are dropped on access; set() and keys() purge them all.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, CacheEntry] = {}
        self._stats = CacheStats()
        self._lock = threading.Lock()

    def get(self, key: str) -> Tuple[Any, bool]:
        """Returns (value, found)."""
        with self._lock:
            entry = self._data.get(key)
            if entry is not None and entry.is_expired(self._clock()):
                del self._data[key]
                self._stats.evictions += 1
                entry = None

            if entry is None:
                self._stats.misses += 1
                return None, False

            self._stats.hits += 1
            return entry.value, True

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value; ttl in seconds, None or <= 0 never expires."""
        now = self._clock()
        expires_at = now + ttl if ttl and ttl > 0 else None
        with self._lock:
            self._purge_expired(now)
            self._data[key] = CacheEntry(value=value, created_at=now, expires_at=expires_at)
            self._stats.sets += 1

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def has(self, key: str) -> bool:
        return self.get(key)[1]

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def keys(self) -> List[str]:
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            return sorted(self._data)

    def _purge_expired(self, now: float) -> None:
        # caller holds the lock
        expired = [k for k, e in self._data.items() if e.is_expired(now)]
        for key in expired:
            del self._data[key]
        self._stats.evictions += len(expired)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "hits": self._stats.hits,
                "misses": self._stats.misses,
                "sets": self._stats.sets,
                "evictions": self._stats.evictions,
                "size": len(self._data),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def make_cache_executor(cache: TTLCache):
    def execute(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        action = args.get_choice("action", CACHE_ACTIONS)

        if action == "clear":
            cache.clear()
            return Result.ok("cache cleared")
        if action == "keys":
            keys = cache.keys()
            return Result.ok_with_meta(keys, {"count": len(keys)})
        if action == "stats":
            return Result.ok(cache.stats())

        key = args.get_str("key")

        if action == "get":
            value, found = cache.get(key)
            return Result.ok_with_meta(value, {"key": key, "found": found})
        if action == "set":
            ttl = args.get_float("ttl", 0.0)
            cache.set(key, args.get_str("value", allow_empty=True), ttl)
            return Result.ok_with_meta("cached", {"key": key, "ttl": ttl})
        if action == "delete":
            deleted = cache.delete(key)
            return Result.ok_with_meta(deleted, {"key": key, "deleted": deleted})
        return Result.ok(cache.has(key))

    return execute


def make_memoize_executor(cache: TTLCache):
    def execute(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        key = args.get_str("key")

        if not args.get_bool("force", False):
            value, found = cache.get(key)
            if found:
                return Result.ok_with_meta(value, {"key": key, "cached": True})

        value = args.get_str("value", "", allow_empty=True)
        cache.set(key, value, args.get_float("ttl", 0.0))
        return Result.ok_with_meta(value, {"key": key, "cached": False})

    return execute


def build_tools(settings: ToolSettings, cache: Optional[TTLCache] = None) -> List[Tool]:
    cache = cache if cache is not None else TTLCache()

    return [
        Tool(
            name="cache",
            description="In-memory key-value cache with TTL support",
            category=Category.CACHE,
            parameters=object_schema({
                "action": enum_param("Action to perform", CACHE_ACTIONS),
                "key": string_param("Cache key"),
                "value": string_param("Value to cache (for set action)"),
                "ttl": number_param("Time-to-live in seconds (for set action)", minimum=0),
            }, required=["action"]),
            executor=make_cache_executor(cache),
        ),
        Tool(
            name="memoize",
            description="Cache results of expensive operations by key",
            category=Category.CACHE,
            parameters=object_schema({
                "key": string_param("Unique key for the memoized result"),
                "value": string_param("Value to memoize (if not already cached)"),
                "ttl": number_param("Time-to-live in seconds", minimum=0),
                "force": bool_param("Force update even if cached"),
            }, required=["key"]),
            executor=make_memoize_executor(cache),
        ),
    ]
