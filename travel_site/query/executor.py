"""
Per-consumer query execution bound to the shared QueryCache.

An OptimizedQuery pairs a cache key with an async producer and tracks
data/loading/error for one consumer. Only the most recently started fetch
may commit state; older ones are cancelled and their results discarded.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Optional, TypeVar

from travel_site.cache import CacheKey, QueryCache

if TYPE_CHECKING:
    from .client import QueryClient

logger = logging.getLogger("query.executor")

T = TypeVar("T")

QueryFn = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class QueryOptions:
    """
    Fetch behaviour for one query.

    stale_time: seconds a cached value is served without touching the backend
    cache_time: seconds a fetched value is retained in the cache
    """
    enabled: bool = True
    stale_time: float = 5 * 60
    cache_time: float = 10 * 60
    refetch_on_window_focus: bool = False


@dataclass
class QueryState(Generic[T]):
    """What a consumer sees."""
    data: Optional[T] = None
    loading: bool = False
    error: Optional[str] = None


def error_message(exc: BaseException) -> str:
    """Reduce an exception to the message shown to consumers."""
    return str(exc) or exc.__class__.__name__


class OptimizedQuery(Generic[T]):
    """
    Cache-aware fetch controller for a single consumer.

    Cache policy:
    - entry younger than ``stale_time``: served, no fetch
    - entry older than ``stale_time`` but not expired: served immediately,
      a revalidating fetch runs in the background
    - no entry: fetch

    Usage:
        async with OptimizedQuery(cache, ["packages", "Asia"], fetch_asia) as query:
            print(query.state.data)
    """

    def __init__(
        self,
        cache: QueryCache,
        key: Any,
        query_fn: QueryFn,
        options: Optional[QueryOptions] = None,
        client: Optional["QueryClient"] = None,
    ):
        self.cache = cache
        self.key = CacheKey.from_parts(key)
        self.query_fn = query_fn
        self.options = options or QueryOptions()
        self.client = client
        self.state: QueryState[T] = QueryState(loading=self.options.enabled)

        self._generation = 0
        self._inflight: Optional[asyncio.Future] = None
        self._revalidation: Optional[asyncio.Future] = None
        self._closed = False

    # ----- lifecycle -----

    async def __aenter__(self) -> "OptimizedQuery[T]":
        self._closed = False
        if self.client is not None:
            self.client._mount(self)
        try:
            await self.execute()
        except BaseException:
            # Cancelled mid-mount: __aexit__ will not run
            self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Cancel outstanding work; late results are discarded."""
        self._closed = True
        self._supersede()
        if self.client is not None:
            self.client._unmount(self)

    # ----- execution -----

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _supersede(self) -> None:
        """Invalidate every fetch started so far."""
        self._generation += 1
        for future in (self._inflight, self._revalidation):
            if future is not None and not future.done():
                future.cancel()
        self._inflight = None
        self._revalidation = None

    async def execute(self, force: bool = False) -> QueryState[T]:
        """
        Run the query.

        Args:
            force: Skip the cache read and always fetch

        Returns:
            The query state after this run settles
        """
        if not self.options.enabled or self._closed:
            return self.state

        if not force:
            entry = self.cache.get_entry(self.key)
            if entry is not None:
                self.state.data = entry.data
                self.state.loading = False
                age = entry.age_seconds(self.cache.now())
                if age < self.options.stale_time:
                    logger.debug(f"CACHE HIT (fresh): {self.key} [age={age:.1f}s]")
                    return self.state

                logger.debug(f"CACHE HIT (stale, revalidating): {self.key} [age={age:.1f}s]")
                if self._revalidation is None or self._revalidation.done():
                    self._revalidation = asyncio.ensure_future(self._fetch(show_loading=False))
                return self.state

        return await self._fetch()

    async def _fetch(self, show_loading: bool = True) -> QueryState[T]:
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._generation += 1
        generation = self._generation
        key = self.key
        cache_time = self.options.cache_time

        if show_loading:
            self.state.loading = True
        self.state.error = None

        try:
            task = asyncio.ensure_future(self.query_fn())
            self._inflight = task
            result = await task
        except asyncio.CancelledError:
            if self._is_current(generation):
                raise
            logger.debug(f"Discarded superseded fetch for {key}")
            return self.state
        except Exception as e:
            if self._is_current(generation):
                self.state.error = error_message(e)
                logger.error(f"Query error for {key}: {e}")
        else:
            if self._is_current(generation):
                self.cache.set(key, result, cache_time)
                self.state.data = result
        finally:
            if self._is_current(generation):
                self.state.loading = False
                self._inflight = None

        return self.state

    async def refetch(self) -> QueryState[T]:
        """Fetch unconditionally, bypassing the cache read."""
        return await self.execute(force=True)

    async def update(
        self,
        key: Any = None,
        query_fn: Optional[QueryFn] = None,
        options: Optional[QueryOptions] = None,
    ) -> QueryState[T]:
        """
        Change the query's inputs and re-run it.

        Any fetch still running for the previous inputs is superseded.
        """
        if key is not None:
            self.key = CacheKey.from_parts(key)
        if query_fn is not None:
            self.query_fn = query_fn
        if options is not None:
            self.options = options
        self._supersede()
        self.state.loading = self.options.enabled
        return await self.execute()

    async def on_focus(self) -> QueryState[T]:
        """Window-focus revalidation: the normal, cache-respecting path."""
        if not self.options.refetch_on_window_focus:
            return self.state
        return await self.execute()

    async def settle(self) -> QueryState[T]:
        """Wait for a background revalidation, if one is running."""
        revalidation = self._revalidation
        if revalidation is not None and not revalidation.done():
            await asyncio.wait({revalidation})
        return self.state

    def __repr__(self) -> str:
        return f"<OptimizedQuery(key='{self.key}', loading={self.state.loading}, error={self.state.error!r})>"
