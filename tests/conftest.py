"""
Shared fixtures: a controllable clock, isolated caches and an in-memory
SQL backend wired to a change feed.
"""
import pytest

from travel_site.backend import SqlBackend
from travel_site.cache import MemoryStorage, QueryCache
from travel_site.query import QueryClient
from travel_site.realtime import ChangeFeed


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return QueryCache(storage, clock=clock)


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def client(cache, feed):
    return QueryClient(cache, feed)


@pytest.fixture
def sql_backend(feed):
    """Fresh in-memory database publishing committed changes to ``feed``."""
    return SqlBackend.from_url("sqlite://", feed=feed)
