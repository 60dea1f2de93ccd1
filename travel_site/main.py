"""
Travel Site - Main FastAPI Application
Cached, realtime-invalidated reads of site content plus admin/form writes
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse

from config.settings import Settings, settings as default_settings
from travel_site import crud, resources
from travel_site.backend import Backend, BackendError, build_backend
from travel_site.cache import JsonFileStorage, KeyValueStorage, MemoryStorage, QueryCache
from travel_site.query import OptimizedQuery, QueryClient, QueryOptions
from travel_site.realtime import CacheInvalidator, ChangeFeed, invalidate_on_change
from travel_site.schemas import ContactCreate, EnquiryCreate, PackageUpsert, SeoSettingsUpsert
from travel_site.seo import SeoMetadata, render_head, resolve_seo, rewrite_index_html

logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v1.0.0"
APP_NAME = "Travel Site"

_UNCONFIGURED = object()


@dataclass
class SiteContext:
    """Process-wide wiring: one cache, one feed, one backend."""
    settings: Settings
    cache: QueryCache
    feed: ChangeFeed
    client: QueryClient
    backend: Optional[Backend]
    invalidators: List[CacheInvalidator] = field(default_factory=list)

    def open_invalidators(self) -> None:
        """Keep every table's cache coherent with writes for the app's lifetime."""
        for table in resources.REALTIME_TABLES:
            self.invalidators.append(invalidate_on_change(self.feed, self.cache, table).open())

    def close(self) -> None:
        for invalidator in self.invalidators:
            invalidator.close()
        self.invalidators.clear()


def build_context(
    settings: Settings,
    storage: Optional[KeyValueStorage] = None,
    backend: Any = _UNCONFIGURED,
    clock: Optional[Callable[[], float]] = None,
) -> SiteContext:
    """
    Wire cache, change feed, query client and backend.

    Args:
        settings: Application settings
        storage: Cache storage (defaults to the configured cache file, or
            memory when persistence is disabled)
        backend: Explicit backend (None for unconfigured); built from
            settings when omitted
        clock: Cache clock override
    """
    if storage is None:
        storage = JsonFileStorage(settings.cache_file) if settings.cache_enabled else MemoryStorage()
    cache_kwargs = {"clock": clock} if clock is not None else {}
    cache = QueryCache(storage, storage_key=settings.cache_storage_key, **cache_kwargs)
    feed = ChangeFeed()
    if backend is _UNCONFIGURED:
        backend = build_backend(settings, feed=feed)
    elif backend is not None and getattr(backend, "feed", None) is None:
        backend.bind_feed(feed)
    return SiteContext(
        settings=settings,
        cache=cache,
        feed=feed,
        client=QueryClient(
            cache,
            feed,
            default_options=QueryOptions(
                stale_time=settings.default_stale_time,
                cache_time=settings.default_cache_time,
            ),
        ),
        backend=backend,
    )


async def read_query(query: OptimizedQuery) -> Any:
    """Mount a query for one request and return its data."""
    async with query:
        await query.settle()
    if query.state.error:
        raise HTTPException(status_code=502, detail=query.state.error)
    return query.state.data


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    backend: Any = _UNCONFIGURED,
    clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or default_settings
    logging.basicConfig(level=settings.log_level)

    site = build_context(settings, storage=storage, backend=backend, clock=clock)
    site.open_invalidators()
    logger.info(
        f"{APP_NAME} {APP_VERSION} starting: backend={type(site.backend).__name__ if site.backend else None}, "
        f"{len(site.cache)} cached entries"
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        site.close()

    app = FastAPI(
        title=APP_NAME,
        description="Travel packages, destinations and site content",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.site = site

    def write(operation: Callable[..., Any], *args: Any) -> Any:
        """Run an admin/form write, mapping backend failures to HTTP errors."""
        if resources.is_unconfigured(site.backend):
            raise HTTPException(status_code=503, detail="Backend is not configured")
        try:
            return operation(site.backend, *args)
        except BackendError as e:
            raise HTTPException(status_code=502, detail=str(e))

    # ===== SERVICE =====

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "backend": type(site.backend).__name__ if site.backend is not None else None,
        }

    @app.get("/version")
    def version_info():
        """Version information endpoint."""
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "full": f"{APP_NAME} {APP_VERSION}",
        }

    @app.get("/cache/stats")
    def cache_stats():
        """Get cache statistics."""
        return site.client.get_stats()

    @app.post("/cache/invalidate")
    def invalidate_cache(table: Optional[str] = Query(None, description="Table to drop; all when omitted")):
        """Drop cached entries."""
        return {"invalidated": site.client.invalidate(table)}

    # ===== PACKAGES =====

    @app.get("/api/packages")
    async def list_packages(region: Optional[str] = Query(None)):
        return await read_query(resources.packages_query(site.client, site.backend, region))

    @app.get("/api/packages/featured")
    async def featured_packages():
        return await read_query(resources.featured_packages_query(site.client, site.backend))

    @app.get("/api/packages/{package_id}")
    async def get_package(package_id: str):
        package = await read_query(resources.package_by_id_query(site.client, site.backend, package_id))
        if package is None:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    # ===== DESTINATIONS & CONTENT =====

    @app.get("/api/countries")
    async def list_countries(region: Optional[str] = Query(None)):
        return await read_query(resources.countries_query(site.client, site.backend, region))

    @app.get("/api/countries/{slug}")
    async def get_country(slug: str):
        country = await read_query(resources.country_by_slug_query(site.client, site.backend, slug))
        if country is None:
            raise HTTPException(status_code=404, detail="Country not found")
        return country

    @app.get("/api/content")
    async def list_content(section: Optional[str] = Query(None)):
        return await read_query(resources.content_query(site.client, site.backend, section))

    # ===== BLOG =====

    @app.get("/api/blog/posts")
    async def list_blog_posts():
        return await read_query(resources.blog_posts_query(site.client, site.backend))

    @app.get("/api/blog/categories")
    async def list_blog_categories():
        return await read_query(resources.blog_categories_query(site.client, site.backend))

    @app.get("/api/blog/authors")
    async def list_authors():
        return await read_query(resources.authors_query(site.client, site.backend))

    # ===== GROUP TOURS =====

    @app.get("/api/group-tours")
    async def list_group_tours():
        return await read_query(resources.group_tours_query(site.client, site.backend))

    @app.get("/api/group-tours/categories")
    async def list_group_tour_categories():
        return await read_query(resources.group_tour_categories_query(site.client, site.backend))

    # ===== SEO =====

    @app.get("/api/seo")
    async def seo_settings(page_url: Optional[str] = Query(None)):
        """All SEO settings, or the active settings of one page."""
        if page_url:
            return await read_query(
                resources.seo_settings_for_page_query(site.client, site.backend, page_url)
            )
        return await read_query(resources.seo_settings_query(site.client, site.backend))

    async def page_seo(path: str) -> SeoMetadata:
        row = await read_query(resources.seo_settings_for_page_query(site.client, site.backend, path))
        return resolve_seo(path, row, site_url=settings.site_url, site_name=settings.site_name)

    @app.get("/seo/head", response_class=HTMLResponse)
    async def seo_head(path: str = Query("/", description="Route path")):
        """Rendered head tags for a route."""
        return HTMLResponse(render_head(await page_seo(path)))

    @app.get("/seo/page", response_class=HTMLResponse)
    async def seo_page(path: str = Query("/", description="Route path")):
        """The site's index.html with the route's head tags swapped in."""
        if settings.index_html is None or not settings.index_html.is_file():
            raise HTTPException(status_code=404, detail="Index HTML is not configured")
        document = settings.index_html.read_text(encoding="utf-8")
        return HTMLResponse(rewrite_index_html(document, await page_seo(path)))

    # ===== FORMS =====

    @app.post("/api/enquiries", status_code=201)
    def submit_enquiry(enquiry: EnquiryCreate):
        return write(crud.create_enquiry, enquiry.model_dump())

    @app.post("/api/contact", status_code=201)
    def submit_contact(contact: ContactCreate):
        return write(crud.create_contact_submission, contact.model_dump())

    # ===== ADMIN =====

    @app.get("/admin/enquiries")
    async def admin_enquiries():
        return await read_query(resources.enquiries_query(site.client, site.backend))

    @app.get("/admin/contact-submissions")
    async def admin_contact_submissions():
        return await read_query(resources.contact_submissions_query(site.client, site.backend))

    @app.put("/admin/packages/{package_id}")
    def admin_upsert_package(package_id: str, package: PackageUpsert):
        return write(crud.upsert_package, package_id, package.model_dump())

    @app.delete("/admin/packages/{package_id}")
    def admin_delete_package(package_id: str):
        if not write(crud.delete_package, package_id):
            raise HTTPException(status_code=404, detail="Package not found")
        return {"deleted": package_id}

    @app.put("/admin/seo")
    def admin_upsert_seo(seo: SeoSettingsUpsert):
        return write(crud.upsert_seo_settings, seo.model_dump())

    return app


app = create_app()
