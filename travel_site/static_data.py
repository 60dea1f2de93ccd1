"""
Bundled package data.

Served when no backend is configured and used to seed the packages table.
"""
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("static_data")

PACKAGES_FILE = Path(__file__).parent / "data" / "packages.json"

PACKAGE_DEFAULTS: Dict[str, Any] = {
    "original_price": None,
    "country_slug": None,
    "rating": 0,
    "reviews": 0,
    "highlights": [],
    "inclusions": [],
    "exclusions": [],
    "itinerary": [],
    "best_time": None,
    "group_size": None,
    "featured": False,
    "overview": None,
}


@lru_cache(maxsize=1)
def load_static_packages() -> Dict[str, List[Dict[str, Any]]]:
    """
    Load the bundled packages, grouped by region slug.

    Every package carries the full TravelPackage shape so fallback data
    looks exactly like transformed database rows.
    """
    with open(PACKAGES_FILE, "r", encoding="utf-8") as f:
        raw = json.load(f)
    grouped = {
        region: [{**PACKAGE_DEFAULTS, **pkg} for pkg in packages]
        for region, packages in raw.items()
    }
    logger.debug(f"Loaded {sum(len(p) for p in grouped.values())} bundled packages")
    return grouped


def all_static_packages() -> List[Dict[str, Any]]:
    """All bundled packages, flattened in file order."""
    return [dict(pkg) for packages in load_static_packages().values() for pkg in packages]


def filter_static_packages(region: Optional[str] = None) -> List[Dict[str, Any]]:
    """Bundled packages whose ``region`` equals the given region (all if None)."""
    packages = all_static_packages()
    if not region:
        return packages
    return [pkg for pkg in packages if pkg["region"] == region]


def find_static_package(package_id: str) -> Optional[Dict[str, Any]]:
    for pkg in all_static_packages():
        if pkg["id"] == package_id:
            return pkg
    return None
