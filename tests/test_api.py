"""
API tests: read endpoints, form submissions and admin writes.
"""
import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from travel_site.backend import BackendError, SqlBackend
from travel_site.cache import MemoryStorage
from travel_site.main import create_app
from travel_site.static_data import all_static_packages, filter_static_packages


class FailingBackend:
    is_configured = True
    feed = None

    def bind_feed(self, feed):
        self.feed = feed

    def select(self, table, filters=None, order_by=None, descending=False, limit=None, columns=None):
        raise BackendError("service unavailable")

    def select_one(self, table, filters=None, columns=None):
        raise BackendError("service unavailable")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url=None,
        backend_url=None,
        backend_key=None,
        cache_enabled=False,
    )


@pytest.fixture
def api(settings):
    """App with no backend configured."""
    with TestClient(create_app(settings, storage=MemoryStorage(), backend=None)) as client:
        yield client


@pytest.fixture
def sql_api(settings):
    """App over a fresh in-memory database."""
    backend = SqlBackend.from_url("sqlite://")
    with TestClient(create_app(settings, storage=MemoryStorage(), backend=backend)) as client:
        yield client


PACKAGE = {
    "title": "Swiss Alps Explorer",
    "country": "Switzerland",
    "region": "Europe",
    "duration": "7 Days / 6 Nights",
    "price": "$2,499",
    "highlights": ["Jungfraujoch", "Lake Lucerne"],
    "featured": True,
    "rating": 4.7,
}


# ===== SERVICE =====

def test_health_endpoint_returns_ok_status(api):
    """Test that /health returns status: ok"""
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "backend": None}


def test_health_reports_backend(sql_api):
    assert sql_api.get("/health").json()["backend"] == "SqlBackend"


def test_version_endpoint(api):
    data = api.get("/version").json()
    assert data["name"] == "Travel Site"
    assert data["full"] == f"{data['name']} {data['version']}"


def test_cache_stats_and_invalidate(api):
    api.get("/api/packages", params={"region": "Asia"})
    api.get("/api/packages/featured")

    stats = api.get("/cache/stats").json()
    assert stats["cache"]["entries"] == 2
    assert "packages-changes" in stats["channels"]

    response = api.post("/cache/invalidate", params={"table": "packages"})
    assert response.json() == {"invalidated": 2}
    assert api.get("/cache/stats").json()["cache"]["entries"] == 0


# ===== READS WITHOUT A BACKEND =====

def test_packages_fall_back_to_bundled_data(api):
    response = api.get("/api/packages", params={"region": "Asia"})
    assert response.status_code == 200
    assert response.json() == filter_static_packages("Asia")


def test_featured_packages_fall_back(api):
    assert api.get("/api/packages/featured").json() == all_static_packages()[:3]


def test_package_detail_from_bundled_data(api):
    package = all_static_packages()[0]
    response = api.get(f"/api/packages/{package['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == package["title"]


def test_package_detail_404(api):
    assert api.get("/api/packages/no-such-package").status_code == 404


def test_tables_without_fallback_are_empty(api):
    assert api.get("/api/countries").json() == []
    assert api.get("/api/content", params={"section": "home"}).json() == []
    assert api.get("/api/blog/posts").json() == []
    assert api.get("/api/group-tours").json() == []
    assert api.get("/api/seo").json() == []
    assert api.get("/api/countries/japan").status_code == 404


def test_seo_head_defaults(api):
    response = api.get("/seo/head", params={"path": "/packages"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert '<link rel="canonical" href="https://nymphettetours.com/packages">' in response.text


def test_seo_page_needs_index_html(api):
    assert api.get("/seo/page", params={"path": "/"}).status_code == 404


def test_seo_page_rewrites_index_html(settings, tmp_path):
    index = tmp_path / "index.html"
    index.write_text(
        "<html>\n<head>\n"
        '  <meta charset="utf-8">\n'
        "  <title>Vite App</title>\n"
        "</head>\n<body><div id=\"root\"></div></body>\n</html>\n",
        encoding="utf-8",
    )
    site_settings = settings.model_copy(update={"index_html": index})

    with TestClient(create_app(site_settings, storage=MemoryStorage(), backend=None)) as client:
        response = client.get("/seo/page", params={"path": "/europe"})

    assert response.status_code == 200
    assert "Vite App" not in response.text
    assert '<link rel="canonical" href="https://nymphettetours.com/europe">' in response.text
    assert '<div id="root"></div>' in response.text
    assert response.text.index("<title>") < response.text.index("</head>")


def test_forms_need_a_backend(api):
    response = api.post("/api/enquiries", json={"name": "Ana", "email": "ana@example.com"})
    assert response.status_code == 503


# ===== BACKEND FAILURES =====

def test_fetch_error_returns_502(settings):
    app = create_app(settings, storage=MemoryStorage(), backend=FailingBackend())
    with TestClient(app) as client:
        response = client.get("/api/blog/posts")
    assert response.status_code == 502
    assert response.json()["detail"] == "service unavailable"


# ===== FORMS =====

def test_submit_enquiry(sql_api):
    response = sql_api.post("/api/enquiries", json={
        "name": "Ana",
        "email": "ana@example.com",
        "destination": "Japan",
        "travelers": 2,
    })
    assert response.status_code == 201
    assert response.json()["status"] == "new"

    enquiries = sql_api.get("/admin/enquiries").json()
    assert [e["email"] for e in enquiries] == ["ana@example.com"]


def test_contact_rejects_invalid_email(sql_api):
    response = sql_api.post("/api/contact", json={"name": "Ana", "email": "not-an-email", "message": "Hi"})
    assert response.status_code == 422


def test_submit_contact(sql_api):
    response = sql_api.post("/api/contact", json={"name": "Ana", "email": "ana@example.com", "message": "Hi"})
    assert response.status_code == 201
    assert sql_api.get("/admin/contact-submissions").json()[0]["message"] == "Hi"


# ===== ADMIN =====

def test_admin_package_edit_invalidates_cached_reads(sql_api):
    assert sql_api.put("/admin/packages/swiss-alps", json=PACKAGE).status_code == 200

    first = sql_api.get("/api/packages/swiss-alps").json()
    assert first["price"] == "$2,499"
    assert first["highlights"] == ["Jungfraujoch", "Lake Lucerne"]

    sql_api.put("/admin/packages/swiss-alps", json={**PACKAGE, "price": "$2,199"})

    assert sql_api.get("/api/packages/swiss-alps").json()["price"] == "$2,199"
    assert [p["id"] for p in sql_api.get("/api/packages", params={"region": "Europe"}).json()] == ["swiss-alps"]


def test_admin_delete_package(sql_api):
    sql_api.put("/admin/packages/swiss-alps", json=PACKAGE)
    assert sql_api.get("/api/packages/swiss-alps").status_code == 200

    assert sql_api.delete("/admin/packages/swiss-alps").json() == {"deleted": "swiss-alps"}
    assert sql_api.get("/api/packages/swiss-alps").status_code == 404
    assert sql_api.delete("/admin/packages/swiss-alps").status_code == 404


def test_admin_seo_settings_drive_head(sql_api):
    response = sql_api.put("/admin/seo", json={
        "page_url": "/about",
        "meta_title": "About Nymphette",
        "meta_description": "Who we are",
    })
    assert response.status_code == 200

    head = sql_api.get("/seo/head", params={"path": "/about"}).text
    assert "<title>About Nymphette</title>" in head

    sql_api.put("/admin/seo", json={
        "page_url": "/about",
        "meta_title": "About Us",
        "meta_description": "Who we are",
    })
    assert len(sql_api.get("/api/seo").json()) == 1
    assert sql_api.get("/api/seo", params={"page_url": "/about"}).json()["meta_title"] == "About Us"
