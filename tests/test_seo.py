"""
Tests for SEO metadata resolution and head rendering.
"""
import json
import re

from travel_site.seo import (
    NO_INDEX,
    SEO_DEFAULTS,
    SITE_URL,
    render_head,
    resolve_seo,
    rewrite_index_html,
)


def test_defaults_without_settings_row():
    meta = resolve_seo("/packages")
    assert meta.title == SEO_DEFAULTS["title"]
    assert meta.description == SEO_DEFAULTS["description"]
    assert meta.canonical_url == f"{SITE_URL}/packages"
    assert meta.robots is None
    assert meta.structured_data["@type"] == "TravelAgency"


def test_settings_row_beats_defaults():
    row = {
        "meta_title": "Asia Packages",
        "meta_description": "Tours across Asia",
        "canonical_url": "https://example.com/asia",
        "og_title": "Asia on a budget",
        "robots_meta": "index,follow",
    }
    meta = resolve_seo("/asia", row)
    assert meta.title == "Asia Packages"
    assert meta.canonical_url == "https://example.com/asia"
    assert meta.to_dict()["og_title"] == "Asia on a budget"
    assert meta.robots == "index,follow"


def test_override_beats_settings_row():
    row = {"meta_title": "From settings", "og_title": "OG from settings"}
    meta = resolve_seo("/blog", row, overrides={"title": "From page"})
    assert meta.title == "From page"
    # An explicit title also drives the Open Graph title
    assert meta.to_dict()["og_title"] == "From page"


def test_no_index_wins():
    meta = resolve_seo("/admin", {"robots_meta": "index,follow"}, no_index=True)
    assert meta.robots == NO_INDEX


def test_render_head_escapes_values():
    meta = resolve_seo("/", overrides={"title": 'Tours & "Trips" <new>'})
    head = render_head(meta)
    assert "<title>Tours &amp; &quot;Trips&quot; &lt;new&gt;</title>" in head
    assert '<meta property="og:title" content="Tours &amp; &quot;Trips&quot; &lt;new&gt;">' in head
    assert f'<link rel="canonical" href="{SITE_URL}/">' in head


def test_render_head_skips_empty_robots():
    head = render_head(resolve_seo("/"))
    assert 'name="robots"' not in head


def test_structured_data_cannot_close_script():
    meta = resolve_seo("/", overrides={"structured_data": {"name": "</script><b>"}})
    head = render_head(meta)
    payload = re.search(r'<script type="application/ld\+json">(.*)</script>', head).group(1)
    assert "</script>" not in payload
    assert json.loads(payload) == {"name": "</script><b>"}



def test_rewrite_index_html_replaces_existing_tags():
    document = (
        "<html>\n<head>\n"
        '  <meta charset="utf-8">\n'
        "  <title>Old title</title>\n"
        '  <meta name="description" content="old">\n'
        '  <meta property="og:title" content="old">\n'
        '  <link rel="canonical" href="https://old.example.com/">\n'
        "</head>\n<body></body>\n</html>\n"
    )
    meta = resolve_seo("/europe", {"meta_title": "Europe Tours"})

    result = rewrite_index_html(document, meta)

    assert "Old title" not in result
    assert 'content="old"' not in result
    assert "old.example.com" not in result
    assert '<meta charset="utf-8">' in result
    assert result.count("<title>") == 1
    assert result.index("<title>Europe Tours</title>") < result.index("</head>")
