"""
Per-page SEO settings queries.
"""
from dataclasses import replace
from typing import Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import ADMIN_OPTIONS, ResourceQuery, is_unconfigured, run_backend, table_query

TABLE = "seo_settings"


def seo_settings_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    """Every page's settings, ordered by URL."""
    return table_query(client, backend, TABLE, order_by="page_url")


def seo_settings_for_page_query(
    client: QueryClient,
    backend: Optional[Backend],
    page_url: str,
) -> ResourceQuery:
    """
    Active settings row for one page URL, or None.

    The subscription is scoped to the page (channel ``seo-settings-<url>``)
    but a change still invalidates every cached seo_settings entry.
    """

    async def query_fn():
        if is_unconfigured(backend):
            return None
        return await run_backend(
            backend.select_one, TABLE, {"page_url": page_url, "is_active": True},
        )

    options = ADMIN_OPTIONS if page_url else replace(ADMIN_OPTIONS, enabled=False)
    return ResourceQuery(
        client,
        TABLE,
        [TABLE, page_url],
        query_fn,
        options=options,
        subscription_filter=("page_url", page_url) if page_url else None,
    )
