"""
Lead queries for the admin panel: booking enquiries and contact submissions.
"""
from typing import Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import ResourceQuery, table_query


def enquiries_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    return table_query(client, backend, "enquiries", order_by="created_at", descending=True)


def contact_submissions_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    return table_query(client, backend, "contact_submissions", order_by="created_at", descending=True)
