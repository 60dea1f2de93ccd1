"""
Resource query building blocks.

A resource query is an OptimizedQuery for one backend table that also keeps
a realtime subscription open while it is mounted: any change on the table
invalidates the table's cached entries so the next read refetches.
"""
import asyncio
import logging
from typing import Any, Callable, List, Optional, Tuple

from travel_site.backend import Backend, Filters
from travel_site.query import OptimizedQuery, QueryClient, QueryFn, QueryOptions
from travel_site.realtime import invalidate_on_change

logger = logging.getLogger("resources")

# Cache lifetimes (seconds)
LIST_OPTIONS = QueryOptions(stale_time=5 * 60, cache_time=15 * 60)
DETAIL_OPTIONS = QueryOptions(stale_time=10 * 60, cache_time=30 * 60)
CONTENT_OPTIONS = QueryOptions(stale_time=15 * 60, cache_time=30 * 60)
# Admin-edited tables: always revalidate, keep only briefly
ADMIN_OPTIONS = QueryOptions(stale_time=0, cache_time=1)


class ResourceQuery(OptimizedQuery):
    """
    OptimizedQuery plus one realtime invalidation channel for its table.

    Usage:
        async with packages_query(client, backend, region="Asia") as query:
            packages = query.state.data
    """

    def __init__(
        self,
        client: QueryClient,
        table: str,
        key: Any,
        query_fn: QueryFn,
        options: Optional[QueryOptions] = None,
        subscription_filter: Optional[Tuple[str, Any]] = None,
    ):
        super().__init__(client.cache, key, query_fn, options=options, client=client)
        self.table = table
        self._invalidator = invalidate_on_change(
            client.feed, client.cache, table, filter=subscription_filter,
        )

    @property
    def channel_name(self) -> str:
        return self._invalidator.channel_name

    async def __aenter__(self) -> "ResourceQuery":
        if self.options.enabled:
            self._invalidator.open()
        return await super().__aenter__()

    def close(self) -> None:
        super().close()
        self._invalidator.close()


def is_unconfigured(backend: Optional[Backend]) -> bool:
    """True when there is no usable backend (no credentials)."""
    return backend is None or not getattr(backend, "is_configured", False)


async def run_backend(call: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking backend call off the event loop."""
    return await asyncio.to_thread(call, *args, **kwargs)


def table_query(
    client: QueryClient,
    backend: Optional[Backend],
    table: str,
    order_by: str,
    descending: bool = False,
    filters: Optional[Filters] = None,
    key_parts: Optional[List[Optional[str]]] = None,
    options: QueryOptions = ADMIN_OPTIONS,
    transform: Optional[Callable[[dict], Any]] = None,
    fallback: Callable[[], Any] = list,
) -> ResourceQuery:
    """
    Generic ordered, filtered list read of one table.

    Args:
        client: Query client (cache + change feed)
        backend: Table backend, None when unconfigured
        table: Table name; also the cache key's table tag
        order_by: Sort column
        descending: Sort direction
        filters: Equality filters; None-valued filters are ignored
        key_parts: Extra cache key parts after the table name
        options: Cache lifetimes
        transform: Applied to each row
        fallback: Produces the result when the backend is unconfigured
    """
    active_filters = {k: v for k, v in (filters or {}).items() if v is not None}

    async def query_fn():
        if is_unconfigured(backend):
            logger.debug(f"No backend for {table}, serving fallback")
            return fallback()
        rows = await run_backend(
            backend.select, table, active_filters,
            order_by=order_by, descending=descending,
        )
        rows = rows or []
        return [transform(row) for row in rows] if transform else rows

    return ResourceQuery(
        client,
        table,
        [table, *(key_parts or [])],
        query_fn,
        options=options,
    )
