"""
Country queries. No bundled fallback: unconfigured backends yield nothing.
"""
from dataclasses import replace
from typing import Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import DETAIL_OPTIONS, ResourceQuery, is_unconfigured, run_backend, table_query

TABLE = "countries"


def countries_query(
    client: QueryClient,
    backend: Optional[Backend],
    region: Optional[str] = None,
) -> ResourceQuery:
    """Countries by name, optionally limited to one region."""
    return table_query(
        client, backend, TABLE,
        order_by="name",
        filters={"region": region},
        key_parts=[region],
        options=DETAIL_OPTIONS,
    )


def country_by_slug_query(
    client: QueryClient,
    backend: Optional[Backend],
    slug: str,
) -> ResourceQuery:
    """One country page, or None."""

    async def query_fn():
        if is_unconfigured(backend):
            return None
        return await run_backend(backend.select_one, TABLE, {"slug": slug})

    options = DETAIL_OPTIONS if slug else replace(DETAIL_OPTIONS, enabled=False)
    return ResourceQuery(
        client,
        TABLE,
        [TABLE, "slug", slug],
        query_fn,
        options=options,
        subscription_filter=("slug", slug) if slug else None,
    )
