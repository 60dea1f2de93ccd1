"""
Tests for admin and form writes.
"""
import pytest

from travel_site import crud
from travel_site.backend import BackendError
from travel_site.static_data import all_static_packages


def test_writes_require_a_backend():
    with pytest.raises(BackendError):
        crud.create_enquiry(None, {"name": "Ana", "email": "ana@example.com"})


def test_import_static_packages_is_idempotent(sql_backend):
    expected = len(all_static_packages())

    assert crud.import_static_packages(sql_backend) == expected
    assert crud.import_static_packages(sql_backend) == expected

    rows = sql_backend.select("packages")
    assert len(rows) == expected
    assert {row["id"] for row in rows} == {pkg["id"] for pkg in all_static_packages()}


def test_package_to_row_flattens_overview():
    row = crud.package_to_row({
        "id": "swiss",
        "title": "Swiss Alps Explorer",
        "overview": {"section_title": "Why the Alps", "description": "Peaks"},
    })
    assert "overview" not in row
    assert row["overview_section_title"] == "Why the Alps"
    assert row["overview_description"] == "Peaks"
    assert row["slug"] == "swiss-alps-explorer"


def test_upsert_seo_settings_matches_on_page_url(sql_backend):
    first = crud.upsert_seo_settings(sql_backend, {
        "page_url": "/", "meta_title": "Home", "meta_description": "Welcome",
    })
    second = crud.upsert_seo_settings(sql_backend, {
        "page_url": "/", "meta_title": "Home page", "meta_description": "Welcome",
    })

    assert second["id"] == first["id"]
    assert [row["meta_title"] for row in sql_backend.select("seo_settings")] == ["Home page"]


def test_delete_missing_package(sql_backend):
    assert crud.delete_package(sql_backend, "missing") is False
