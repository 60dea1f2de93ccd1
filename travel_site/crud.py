"""
CRUD operations (Create, Update, Delete)
Admin and form writes against the configured backend. Reads go through the
cached resource queries; every write here reaches the realtime change feed
and so invalidates those caches.
"""
import logging
from typing import Any, Dict, Optional

from travel_site.backend import Backend, BackendError, Row
from travel_site.static_data import all_static_packages
from travel_site.utils.helpers import slugify

logger = logging.getLogger("crud")


def _require(backend: Optional[Backend]) -> Backend:
    if backend is None or not backend.is_configured:
        raise BackendError("Backend is not configured")
    return backend


# ===== LEADS =====

def create_enquiry(backend: Optional[Backend], data: Dict[str, Any]) -> Row:
    """
    Record a booking enquiry
    """
    row = _require(backend).insert("enquiries", {**data, "status": "new"})
    logger.info(f"Enquiry received from {data.get('email')} ({data.get('source', 'website')})")
    return row


def create_contact_submission(backend: Optional[Backend], data: Dict[str, Any]) -> Row:
    """
    Record a contact-us submission
    """
    return _require(backend).insert("contact_submissions", {**data, "status": "new"})


# ===== PACKAGES =====

def package_to_row(package: Dict[str, Any]) -> Row:
    """
    TravelPackage shape -> packages table row (overview block flattened)
    """
    row = {k: v for k, v in package.items() if k != "overview"}
    overview = package.get("overview") or {}
    if overview:
        row.update({
            "overview_section_title": overview.get("section_title"),
            "overview_description": overview.get("description"),
            "overview_highlights_label": overview.get("highlights_label"),
            "overview_badge_variant": overview.get("highlights_badge_variant"),
            "overview_badge_style": overview.get("highlights_badge_style"),
        })
    row.setdefault("slug", slugify(package.get("title")))
    return row


def upsert_package(backend: Optional[Backend], package_id: str, data: Dict[str, Any]) -> Row:
    """
    Create or replace a package by id
    """
    return _require(backend).upsert("packages", {**package_to_row(data), "id": package_id})


def delete_package(backend: Optional[Backend], package_id: str) -> bool:
    """
    Delete a package; False if it did not exist
    """
    deleted = _require(backend).delete("packages", package_id)
    if deleted:
        logger.info(f"Deleted package {package_id}")
    return deleted


def import_static_packages(backend: Optional[Backend]) -> int:
    """
    Copy the bundled packages into the packages table

    Upserts by id, so running it again only refreshes the same rows.

    Returns:
        Number of packages written
    """
    target = _require(backend)
    count = 0
    for package in all_static_packages():
        target.upsert("packages", package_to_row(package))
        count += 1
    logger.info(f"Imported {count} bundled packages")
    return count


# ===== SEO =====

def upsert_seo_settings(backend: Optional[Backend], data: Dict[str, Any]) -> Row:
    """
    Create or update the SEO settings of one page URL
    """
    return _require(backend).upsert("seo_settings", data, on_conflict="page_url")
