"""
Package queries: region lists, featured packages and single packages.

Packages are the one resource with a bundled fallback: without a backend the
site still lists the packages shipped in ``data/packages.json``.
"""
from dataclasses import replace
from typing import Any, Dict, Optional

from travel_site.backend import Backend
from travel_site.query import QueryClient
from travel_site.static_data import all_static_packages, filter_static_packages, find_static_package
from travel_site.utils.helpers import parse_json_field, safe_list, safe_str

from .base import DETAIL_OPTIONS, LIST_OPTIONS, ResourceQuery, is_unconfigured, run_backend

TABLE = "packages"
FEATURED_LIMIT = 3


def transform_package(row: Dict[str, Any]) -> Dict[str, Any]:
    """Database row -> TravelPackage shape used by the site."""
    overview = None
    if row.get("overview_section_title"):
        overview = {
            "section_title": row["overview_section_title"],
            "description": safe_str(row.get("overview_description")),
            "highlights_label": row.get("overview_highlights_label") or "Package Highlights",
            "highlights_badge_variant": row.get("overview_badge_variant") or "outline",
            "highlights_badge_style": row.get("overview_badge_style") or "border-primary text-primary",
        }

    return {
        "id": row["id"],
        "title": row["title"],
        "country": row["country"],
        "country_slug": row.get("country_slug"),
        "region": row["region"],
        "duration": row["duration"],
        "price": row["price"],
        "original_price": row.get("original_price"),
        "rating": row.get("rating") or 0,
        "reviews": row.get("reviews") or 0,
        "image": safe_str(row.get("image")),
        "highlights": safe_list(row.get("highlights")),
        "inclusions": safe_list(row.get("inclusions")),
        "exclusions": safe_list(row.get("exclusions")),
        "itinerary": parse_json_field(row.get("itinerary"), []) or [],
        "category": safe_str(row.get("category")),
        "best_time": row.get("best_time"),
        "group_size": row.get("group_size"),
        "featured": bool(row.get("featured") or False),
        "overview": overview,
    }


def packages_query(
    client: QueryClient,
    backend: Optional[Backend],
    region: Optional[str] = None,
) -> ResourceQuery:
    """Packages, newest first, optionally limited to one region."""

    async def query_fn():
        if is_unconfigured(backend):
            return filter_static_packages(region)
        filters = {"region": region} if region else None
        rows = await run_backend(
            backend.select, TABLE, filters, order_by="created_at", descending=True,
        )
        return [transform_package(row) for row in rows or []]

    key = [TABLE, "region", region] if region else [TABLE]
    return ResourceQuery(client, TABLE, key, query_fn, options=LIST_OPTIONS)


def package_by_id_query(
    client: QueryClient,
    backend: Optional[Backend],
    package_id: str,
) -> ResourceQuery:
    """A single package, or None. Disabled for an empty id."""

    async def query_fn():
        if is_unconfigured(backend):
            return find_static_package(package_id)
        row = await run_backend(backend.select_one, TABLE, {"id": package_id})
        return transform_package(row) if row else None

    options = DETAIL_OPTIONS if package_id else replace(DETAIL_OPTIONS, enabled=False)
    return ResourceQuery(
        client,
        TABLE,
        [TABLE, "id", package_id],
        query_fn,
        options=options,
        subscription_filter=("id", package_id) if package_id else None,
    )


def featured_packages_query(client: QueryClient, backend: Optional[Backend]) -> ResourceQuery:
    """Top rated featured packages for the home page."""

    async def query_fn():
        if is_unconfigured(backend):
            return all_static_packages()[:FEATURED_LIMIT]
        rows = await run_backend(
            backend.select, TABLE, {"featured": True},
            order_by="rating", descending=True, limit=FEATURED_LIMIT,
        )
        return [transform_package(row) for row in rows or []]

    return ResourceQuery(client, TABLE, [TABLE, "featured"], query_fn, options=DETAIL_OPTIONS)
