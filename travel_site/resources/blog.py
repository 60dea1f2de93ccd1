"""
Blog queries. Admin-edited, so always revalidated.
"""
from typing import Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import ResourceQuery, table_query


def blog_posts_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    """All posts, newest first."""
    return table_query(client, backend, "blog_posts", order_by="created_at", descending=True)


def blog_categories_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    return table_query(client, backend, "blog_categories", order_by="name")


def authors_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    return table_query(client, backend, "authors", order_by="name")
