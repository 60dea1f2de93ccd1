"""
Resource queries: one cached, realtime-invalidated read per backend table.
"""
from .base import (
    ADMIN_OPTIONS,
    CONTENT_OPTIONS,
    DETAIL_OPTIONS,
    LIST_OPTIONS,
    ResourceQuery,
    is_unconfigured,
    table_query,
)
from .packages import featured_packages_query, package_by_id_query, packages_query, transform_package
from .countries import countries_query, country_by_slug_query
from .content import content_query, content_value_query, get_content_value
from .blog import authors_query, blog_categories_query, blog_posts_query
from .enquiries import contact_submissions_query, enquiries_query
from .group_tours import group_tour_categories_query, group_tours_query
from .seo_settings import seo_settings_for_page_query, seo_settings_query

# Tables whose cached reads are invalidated by realtime changes
REALTIME_TABLES = (
    "packages",
    "countries",
    "content",
    "blog_posts",
    "blog_categories",
    "authors",
    "enquiries",
    "contact_submissions",
    "group_tours",
    "group_tour_categories",
    "seo_settings",
)

__all__ = [
    # Building blocks
    "ResourceQuery",
    "table_query",
    "is_unconfigured",
    "LIST_OPTIONS",
    "DETAIL_OPTIONS",
    "CONTENT_OPTIONS",
    "ADMIN_OPTIONS",
    "REALTIME_TABLES",
    # Packages
    "packages_query",
    "package_by_id_query",
    "featured_packages_query",
    "transform_package",
    # Countries
    "countries_query",
    "country_by_slug_query",
    # Content
    "content_query",
    "content_value_query",
    "get_content_value",
    # Blog
    "blog_posts_query",
    "blog_categories_query",
    "authors_query",
    # Leads
    "enquiries_query",
    "contact_submissions_query",
    # Group tours
    "group_tours_query",
    "group_tour_categories_query",
    # SEO
    "seo_settings_query",
    "seo_settings_for_page_query",
]
