"""
Time-expiring query cache mirrored to durable storage.
"""
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Union

from .core import CacheEntry, CacheKey
from .storage import KeyValueStorage, MemoryStorage, StorageError

logger = logging.getLogger("cache.query_cache")

DEFAULT_STORAGE_KEY = "query_cache"
DEFAULT_CACHE_TIME = 10 * 60  # seconds

KeyLike = Union[CacheKey, str, list, tuple]


class QueryCache:
    """
    Shared store of recently fetched results.

    - Entries expire ``cache_time`` seconds after they are set
    - The whole map is re-serialised to storage on every mutation
    - Storage failures are logged and ignored; the in-memory map keeps working

    One instance is created per process by the application and handed to
    every query that needs it.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache and hydrate it from storage.

        Args:
            storage: Durable storage (defaults to process memory)
            storage_key: The single key the serialised map lives under
            clock: Returns the current time in epoch seconds
        """
        self._storage = storage if storage is not None else MemoryStorage()
        self._storage_key = storage_key
        self._clock = clock
        self._cache: Dict[CacheKey, CacheEntry] = {}
        self._lock = threading.RLock()

        self._stats = {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "invalidations": 0,
            "storage_errors": 0,
        }

        self._load()

    def _load(self) -> None:
        """Hydrate from storage, dropping entries that already expired."""
        try:
            raw = self._storage.get_item(self._storage_key)
        except StorageError as e:
            logger.warning(f"Failed to load cache from storage: {e}")
            self._stats["storage_errors"] += 1
            return
        if not raw:
            return

        try:
            stored = json.loads(raw)
            now = self._clock()
            for rendered_key, raw_entry in stored.items():
                entry = CacheEntry.from_dict(raw_entry)
                if entry.is_expired(now):
                    continue
                self._cache[CacheKey.parse(rendered_key)] = entry
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring corrupt cache snapshot: {e}")
            self._cache.clear()
            return

        logger.info(f"Loaded {len(self._cache)} cache entries from storage")

    def _save(self) -> None:
        """Write the full map back to storage. Never raises."""
        payload = {str(key): entry.to_dict() for key, entry in self._cache.items()}
        try:
            if payload:
                self._storage.set_item(self._storage_key, json.dumps(payload, default=str))
            else:
                self._storage.remove_item(self._storage_key)
        except (StorageError, TypeError, ValueError) as e:
            self._stats["storage_errors"] += 1
            logger.warning(f"Failed to persist cache, continuing in memory: {e}")

    def now(self) -> float:
        """Current time on the cache clock (epoch seconds)."""
        return self._clock()

    def get_entry(self, key: KeyLike) -> Optional[CacheEntry]:
        """
        Get the raw entry for a key if it has not expired.

        Expired entries are evicted on access.
        """
        cache_key = CacheKey.from_parts(key)
        with self._lock:
            entry = self._cache.get(cache_key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if entry.is_expired(self._clock()):
                del self._cache[cache_key]
                self._stats["evictions"] += 1
                self._stats["misses"] += 1
                logger.debug(f"CACHE EXPIRED: {cache_key}")
                self._save()
                return None

            self._stats["hits"] += 1
            return entry

    def get(self, key: KeyLike, default: Any = None) -> Any:
        """Get a cached value, or ``default`` on a miss."""
        entry = self.get_entry(key)
        if entry is None:
            return default
        return entry.data

    def set(self, key: KeyLike, data: Any, cache_time: float = DEFAULT_CACHE_TIME) -> None:
        """
        Store a value that expires ``cache_time`` seconds from now.

        Args:
            key: Cache key (string, list of strings, or CacheKey)
            data: JSON-serialisable value
            cache_time: Retention in seconds
        """
        cache_key = CacheKey.from_parts(key)
        now = self._clock()
        with self._lock:
            self._cache[cache_key] = CacheEntry(
                data=data,
                timestamp=now,
                expires_at=now + cache_time,
            )
            self._save()

    def invalidate(self, pattern: Optional[Union[CacheKey, str]] = None) -> int:
        """
        Remove cached entries so the next read refetches.

        Args:
            pattern: None clears everything; a table name drops every key of
                that table; a CacheKey drops keys it is a prefix of

        Returns:
            Number of entries removed
        """
        with self._lock:
            if pattern is None:
                count = len(self._cache)
                self._cache.clear()
                self._stats["invalidations"] += count
                self._save()
                logger.info(f"Cleared {count} cache entries")
                return count

            to_delete = [k for k in self._cache if k.matches(pattern)]
            for key in to_delete:
                del self._cache[key]
            if to_delete:
                self._stats["invalidations"] += len(to_delete)
                self._save()
                logger.info(f"Invalidated {len(to_delete)} entries matching '{pattern}'")
            return len(to_delete)

    def keys(self) -> list:
        """Rendered keys currently held (expired entries included until read)."""
        with self._lock:
            return [str(k) for k in self._cache]

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            lookups = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / lookups * 100) if lookups > 0 else 0
            return {
                "entries": len(self._cache),
                **self._stats,
                "hit_rate_percent": round(hit_rate, 1),
            }
