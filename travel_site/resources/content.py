"""
Editable site copy, grouped by section.
"""
from dataclasses import replace
from typing import Any, Dict, List, Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient

from .base import CONTENT_OPTIONS, ResourceQuery, is_unconfigured, run_backend, table_query

TABLE = "content"


def get_content_value(rows: Optional[List[Dict[str, Any]]], key: str, default: Any = "") -> Any:
    """Value of the row with ``key``; falsy values fall back to ``default``."""
    for row in rows or []:
        if row.get("key") == key:
            return row.get("value") or default
    return default


def content_query(
    client: QueryClient,
    backend: Optional[Backend],
    section: Optional[str] = None,
) -> ResourceQuery:
    """Content rows ordered by key, optionally for one section."""
    return table_query(
        client, backend, TABLE,
        order_by="key",
        filters={"section": section},
        key_parts=[section],
        options=CONTENT_OPTIONS,
    )


def content_value_query(
    client: QueryClient,
    backend: Optional[Backend],
    section: str,
    key: str,
    default: Any = "",
) -> ResourceQuery:
    """A single content value; ``default`` when missing or unconfigured."""

    async def query_fn():
        if is_unconfigured(backend):
            return default
        row = await run_backend(
            backend.select_one, TABLE, {"section": section, "key": key}, columns=["value"],
        )
        return (row or {}).get("value") or default

    options = CONTENT_OPTIONS if section and key else replace(CONTENT_OPTIONS, enabled=False)
    return ResourceQuery(client, TABLE, [TABLE, section, key], query_fn, options=options)
