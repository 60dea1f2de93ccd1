"""
Table access for resource queries and admin writes.
"""
import logging
from typing import Optional

from travel_site.realtime import ChangeFeed

from .base import Backend, BackendError, Filters, Row
from .rest import RestBackend
from .sql import SqlBackend

logger = logging.getLogger("backend")


def build_backend(settings, feed: Optional[ChangeFeed] = None) -> Optional[Backend]:
    """
    Build the configured backend.

    Returns:
        SqlBackend when a database URL is set, RestBackend when a hosted URL
        and key are set, otherwise None (unconfigured: callers fall back to
        bundled data or empty results)
    """
    if settings.database_url:
        return SqlBackend.from_url(settings.database_url, feed=feed)
    if settings.backend_url and settings.backend_key:
        return RestBackend(settings.backend_url, settings.backend_key, feed=feed)
    logger.warning("No backend configured, serving bundled fallback data")
    return None


__all__ = [
    "Backend",
    "BackendError",
    "Filters",
    "Row",
    "RestBackend",
    "SqlBackend",
    "build_backend",
]
