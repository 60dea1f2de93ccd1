"""
QueryClient: the shared cache, change feed and the set of mounted queries.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from travel_site.cache import CacheKey, QueryCache
from travel_site.realtime import ChangeFeed

from .executor import OptimizedQuery, QueryFn, QueryOptions

logger = logging.getLogger("query.client")


class QueryClient:
    """
    Entry point for consumers of cached queries.

    The application builds one client per process and passes it to every
    resource query; tests build their own isolated clients.
    """

    def __init__(
        self,
        cache: QueryCache,
        feed: Optional[ChangeFeed] = None,
        default_options: Optional[QueryOptions] = None,
    ):
        self.cache = cache
        self.feed = feed or ChangeFeed()
        self.default_options = default_options or QueryOptions()
        self._mounted: List[OptimizedQuery] = []

    def query(
        self,
        key: Any,
        query_fn: QueryFn,
        options: Optional[QueryOptions] = None,
    ) -> OptimizedQuery:
        """Create a query bound to this client's cache."""
        return OptimizedQuery(
            self.cache, key, query_fn, options=options or self.default_options, client=self,
        )

    def _mount(self, query: OptimizedQuery) -> None:
        if query not in self._mounted:
            self._mounted.append(query)

    def _unmount(self, query: OptimizedQuery) -> None:
        if query in self._mounted:
            self._mounted.remove(query)

    @property
    def mounted(self) -> List[OptimizedQuery]:
        return list(self._mounted)

    async def notify_focus(self) -> None:
        """The window regained focus: revalidate queries that asked for it."""
        queries = [q for q in self._mounted if q.options.refetch_on_window_focus]
        if not queries:
            return
        logger.debug(f"Focus revalidation for {len(queries)} queries")
        await asyncio.gather(*(q.on_focus() for q in queries))

    def invalidate(self, pattern: Optional[Union[CacheKey, str]] = None) -> int:
        return self.cache.invalidate(pattern)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "cache": self.cache.get_stats(),
            "mounted_queries": len(self._mounted),
            "channels": self.feed.channel_names,
        }
