"""
Unit tests for the query cache: keys, expiry, invalidation and persistence.
"""
import json

import pytest

from travel_site.cache import CacheEntry, CacheKey, JsonFileStorage, MemoryStorage, QueryCache


# =============================================================================
# Keys
# =============================================================================

def test_key_renders_parts_joined():
    key = CacheKey.from_parts(["packages", "Asia"])
    assert str(key) == "packages|Asia"
    assert key.table == "packages"


def test_key_drops_empty_parts():
    """A None region means "all regions"."""
    assert CacheKey.from_parts(["packages", None]) == CacheKey.from_parts("packages")


def test_key_requires_table():
    with pytest.raises(ValueError):
        CacheKey.from_parts([None])


def test_key_parse_inverts_str():
    key = CacheKey.from_parts(["packages", "id", "abc"])
    assert CacheKey.parse(str(key)) == key


def test_table_pattern_does_not_match_substrings():
    """A table name matches whole table tags only."""
    assert CacheKey.from_parts(["packages", "Asia"]).matches("packages")
    assert not CacheKey.from_parts(["group_packages"]).matches("packages")
    assert not CacheKey.from_parts(["countries", "packages"]).matches("packages")


def test_prefix_pattern():
    pattern = CacheKey.from_parts(["packages", "id"])
    assert CacheKey.from_parts(["packages", "id", "x"]).matches(pattern)
    assert not CacheKey.from_parts(["packages", "Asia"]).matches(pattern)


def test_string_key_is_split_into_parts():
    assert CacheKey.from_parts("packages|asia") == CacheKey.from_parts(["packages", "asia"])
    assert CacheKey.from_parts("packages|asia").table == "packages"


def test_separator_inside_part_survives_parse():
    """A page URL containing the separator stays one part."""
    key = CacheKey.from_parts(["seo_settings", "/search?q=a|b"])
    assert key.parts == ("/search?q=a%7Cb",)
    assert CacheKey.parse(str(key)) == key


def test_rendered_pattern_matches_as_prefix():
    assert CacheKey.from_parts(["packages", "id", "x"]).matches("packages|id")
    assert not CacheKey.from_parts(["packages", "region", "Asia"]).matches("packages|id")


def test_entry_serialises_milliseconds():
    entry = CacheEntry(data=[1], timestamp=10.5, expires_at=70.5)
    raw = entry.to_dict()
    assert raw == {"data": [1], "timestamp": 10500, "expiresAt": 70500}
    assert CacheEntry.from_dict(raw) == entry


# =============================================================================
# Get / set / expiry
# =============================================================================

def test_set_then_get(cache):
    cache.set(["packages", "Asia"], [{"id": "a"}], cache_time=600)
    assert cache.get(["packages", "Asia"]) == [{"id": "a"}]
    assert cache.get("packages|Asia") == [{"id": "a"}]


def test_miss_returns_default(cache):
    assert cache.get("countries") is None
    assert cache.get("countries", default=[]) == []


def test_entry_valid_until_expiry(cache, clock):
    cache.set("content", ["x"], cache_time=60)
    clock.advance(60)
    assert cache.get("content") == ["x"]
    clock.advance(0.001)
    assert cache.get("content") is None


def test_expired_entry_is_evicted(cache, clock, storage):
    cache.set("content", ["x"], cache_time=60)
    clock.advance(120)
    assert cache.get("content") is None
    assert len(cache) == 0
    assert cache.get_stats()["evictions"] == 1
    # Last entry gone: storage key removed
    assert storage.get_item("query_cache") is None


def test_stats_track_hits_and_misses(cache):
    cache.set("packages", [])
    cache.get("packages")
    cache.get("countries")
    stats = cache.get_stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate_percent"] == 50.0


# =============================================================================
# Invalidation
# =============================================================================

def test_invalidate_all(cache):
    cache.set(["packages", "Asia"], [])
    cache.set(["countries", "Asia"], [])
    assert cache.invalidate() == 2
    assert len(cache) == 0


def test_invalidate_table_keeps_other_tables(cache):
    cache.set(["packages", "Asia"], [1])
    cache.set(["packages", "id", "abc"], {"id": "abc"})
    cache.set(["countries", "Asia"], [2])

    assert cache.invalidate("packages") == 2
    assert cache.keys() == ["countries|Asia"]
    assert cache.get(["countries", "Asia"]) == [2]


def test_invalidate_table_with_string_keys(cache):
    cache.set("packages|asia", [1])
    cache.set("countries|asia", [2])

    assert cache.invalidate("packages") == 1
    assert cache.keys() == ["countries|asia"]


def test_invalidate_unknown_table_is_noop(cache):
    cache.set("packages", [])
    assert cache.invalidate("blog_posts") == 0
    assert len(cache) == 1


# =============================================================================
# Persistence
# =============================================================================

def test_cache_survives_restart(storage, clock):
    QueryCache(storage, clock=clock).set(["packages", "Asia"], [{"id": "a"}], cache_time=600)

    clock.advance(30)
    restarted = QueryCache(storage, clock=clock)
    assert restarted.get(["packages", "Asia"]) == [{"id": "a"}]


def test_string_key_survives_restart(storage, clock):
    QueryCache(storage, clock=clock).set("packages|asia", [1])

    restarted = QueryCache(storage, clock=clock)
    assert restarted.get("packages|asia") == [1]
    assert restarted.get(["packages", "asia"]) == [1]


def test_restart_drops_expired_entries(storage, clock):
    first = QueryCache(storage, clock=clock)
    first.set("packages", [1], cache_time=10)
    first.set("countries", [2], cache_time=1000)

    clock.advance(60)
    restarted = QueryCache(storage, clock=clock)
    assert restarted.keys() == ["countries"]


def test_stored_snapshot_format(cache, storage, clock):
    cache.set(["packages", "Asia"], ["x"], cache_time=60)
    stored = json.loads(storage.get_item("query_cache"))
    assert stored == {
        "packages|Asia": {
            "data": ["x"],
            "timestamp": int(clock.now * 1000),
            "expiresAt": int((clock.now + 60) * 1000),
        }
    }


def test_corrupt_snapshot_is_ignored(storage, clock):
    storage.set_item("query_cache", "{not json")
    cache = QueryCache(storage, clock=clock)
    assert len(cache) == 0
    cache.set("packages", [1])
    assert cache.get("packages") == [1]


def test_storage_failure_keeps_memory_cache(clock):
    storage = MemoryStorage(fail_writes=True)
    cache = QueryCache(storage, clock=clock)

    cache.set("packages", [1])
    assert cache.get("packages") == [1]
    assert cache.get_stats()["storage_errors"] == 1


def test_json_file_storage_roundtrip(tmp_path, clock):
    path = tmp_path / "cache" / "query_cache.json"
    QueryCache(JsonFileStorage(path), clock=clock).set("packages", [1])

    assert path.exists()
    assert QueryCache(JsonFileStorage(path), clock=clock).get("packages") == [1]
