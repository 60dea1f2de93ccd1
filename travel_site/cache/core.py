"""
Core cache data structures.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union


KEY_SEPARATOR = "|"


def _escape(part: str) -> str:
    """Percent-encode the separator so rendering and parsing stay inverses."""
    return part.replace("%", "%25").replace(KEY_SEPARATOR, "%7C")


@dataclass(frozen=True)
class CacheKey:
    """
    Structured cache key: the backend table plus ordered filter parts.

    ``CacheKey.from_parts(["packages", "asia"])`` renders as ``packages|asia``.
    Invalidation matches on the table tag or on a key prefix, never on
    substrings of the rendered form.
    """
    table: str
    parts: Tuple[str, ...] = ()

    @classmethod
    def from_parts(cls, key: Union["CacheKey", str, Iterable[Optional[str]]]) -> "CacheKey":
        """Build a key from a string, an ordered list of strings, or a key."""
        if isinstance(key, CacheKey):
            return key
        if isinstance(key, str):
            # Rendered form, e.g. "packages|asia"
            values = [part for part in key.split(KEY_SEPARATOR) if part]
        else:
            # Falsy parts are dropped, e.g. ["packages", None] -> packages
            values = [_escape(str(part)) for part in key if part]
        if not values:
            raise ValueError("Cache key needs at least a table name")
        return cls(table=values[0], parts=tuple(values[1:]))

    @classmethod
    def parse(cls, rendered: str) -> "CacheKey":
        """Inverse of ``str(key)``, used when hydrating from storage."""
        table, *parts = rendered.split(KEY_SEPARATOR)
        return cls(table=table, parts=tuple(parts))

    @property
    def segments(self) -> Tuple[str, ...]:
        return (self.table,) + self.parts

    def matches(self, pattern: Union["CacheKey", str]) -> bool:
        """
        Check whether this key falls under an invalidation pattern.

        Args:
            pattern: A table name (exact table match), or a CacheKey or
                rendered key whose segments must be a prefix of this key's

        Returns:
            True if the entry should be invalidated
        """
        if isinstance(pattern, str):
            if KEY_SEPARATOR not in pattern:
                return self.table == pattern
            pattern = CacheKey.from_parts(pattern)
        prefix = pattern.segments
        return self.segments[:len(prefix)] == prefix

    def __str__(self) -> str:
        return KEY_SEPARATOR.join(self.segments)


@dataclass
class CacheEntry:
    """
    A cached value with its fetch time and hard expiry (epoch seconds).
    """
    data: Any
    timestamp: float
    expires_at: float

    def age_seconds(self, now: float) -> float:
        """Seconds since the value was stored."""
        return now - self.timestamp

    def is_expired(self, now: float) -> bool:
        """Entries are trusted while ``now <= expires_at``."""
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with millisecond timestamps for durable storage."""
        return {
            "data": self.data,
            "timestamp": int(self.timestamp * 1000),
            "expiresAt": int(self.expires_at * 1000),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CacheEntry":
        return cls(
            data=raw["data"],
            timestamp=raw["timestamp"] / 1000,
            expires_at=raw["expiresAt"] / 1000,
        )
