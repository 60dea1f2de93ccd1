"""
Query cache with time-based expiry and durable persistence.
"""
from .core import CacheEntry, CacheKey
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage, StorageError
from .query_cache import DEFAULT_CACHE_TIME, DEFAULT_STORAGE_KEY, QueryCache

__all__ = [
    # Core types
    "CacheEntry",
    "CacheKey",
    # Storage
    "KeyValueStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "StorageError",
    # Cache
    "QueryCache",
    "DEFAULT_CACHE_TIME",
    "DEFAULT_STORAGE_KEY",
]
