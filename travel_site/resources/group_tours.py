"""
Group tour queries.
"""
from typing import Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import ResourceQuery, table_query


def group_tours_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    """Departures, latest start date first."""
    return table_query(client, backend, "group_tours", order_by="start_date", descending=True)


def group_tour_categories_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    return table_query(client, backend, "group_tour_categories", order_by="name")
