"""
SEO head metadata.

Resolves a page's title/description/Open Graph/Twitter/canonical/structured
data from its ``seo_settings`` row, explicit overrides and site defaults,
and renders them as head tags.
"""
import html
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

SITE_URL = "https://nymphettetours.com"
SITE_NAME = "Nymphette Tours"

SEO_DEFAULTS: Dict[str, Any] = {
    "title": "Nymphette Tours - Premium Travel Packages & Group Tours Worldwide",
    "description": (
        "Discover premium travel packages, curated group tours, and custom trips "
        "worldwide. Expert travel planning with 24/7 support."
    ),
    "keywords": "travel packages, group tours, holidays, custom trips",
    "image": "/images/hero-travel.jpg",
    "locale": "en_US",
    "twitter_handle": "@nymphettetours",
    "twitter_site": "@nymphettetours",
    "twitter_card": "summary_large_image",
}

NO_INDEX = "noindex,nofollow"


def organization_schema(site_url: str = SITE_URL, site_name: str = SITE_NAME) -> Dict[str, Any]:
    """Default structured data: the agency itself."""
    return {
        "@context": "https://schema.org",
        "@type": "TravelAgency",
        "name": site_name,
        "url": site_url,
        "logo": f"{site_url}{SEO_DEFAULTS['image']}",
        "contactPoint": {
            "@type": "ContactPoint",
            "contactType": "customer service",
            "areaServed": "Worldwide",
        },
    }


@dataclass
class SeoMetadata:
    """Everything that goes into a page's head."""
    title: str
    description: str
    keywords: str
    canonical_url: str
    image: str
    og_type: str = "website"
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    robots: Optional[str] = None
    site_name: str = SITE_NAME
    structured_data: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "keywords": self.keywords,
            "canonical_url": self.canonical_url,
            "image": self.image,
            "og_type": self.og_type,
            "og_title": self.og_title or self.title,
            "og_description": self.og_description or self.description,
            "robots": self.robots,
            "structured_data": self.structured_data,
        }


def resolve_seo(
    path: str,
    settings_row: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
    no_index: bool = False,
    site_url: str = SITE_URL,
    site_name: str = SITE_NAME,
) -> SeoMetadata:
    """
    Work out a page's metadata.

    Precedence for each field: explicit override, then the page's
    ``seo_settings`` row, then site defaults.

    Args:
        path: Route path, e.g. "/packages"
        settings_row: Active seo_settings row for the path, if any
        overrides: Per-page values (title, description, keywords, image,
            url, type, structured_data)
        no_index: Force ``noindex,nofollow``
    """
    row = settings_row or {}
    overrides = overrides or {}

    def pick(override_key: str, row_key: str, default: Any) -> Any:
        return overrides.get(override_key) or row.get(row_key) or default

    title = pick("title", "meta_title", SEO_DEFAULTS["title"])
    description = pick("description", "meta_description", SEO_DEFAULTS["description"])
    robots = NO_INDEX if no_index else (row.get("robots_meta") or None)

    return SeoMetadata(
        title=title,
        description=description,
        keywords=pick("keywords", "meta_keywords", SEO_DEFAULTS["keywords"]),
        canonical_url=pick("url", "canonical_url", f"{site_url}{path}"),
        image=pick("image", "og_image", SEO_DEFAULTS["image"]),
        og_type=overrides.get("type") or "website",
        og_title=row.get("og_title") if not overrides.get("title") else None,
        og_description=row.get("og_description") if not overrides.get("description") else None,
        robots=robots,
        site_name=site_name,
        structured_data=pick(
            "structured_data", "structured_data", organization_schema(site_url, site_name)
        ),
    )


def _meta(attr: str, name: str, content: Optional[str]) -> Optional[str]:
    if not content:
        return None
    return f'<meta {attr}="{html.escape(name)}" content="{html.escape(str(content))}">'


def render_head(meta: SeoMetadata) -> str:
    """Render head tags, one per line, all values HTML-escaped."""
    og_title = meta.og_title or meta.title
    og_description = meta.og_description or meta.description
    tags = [
        f"<title>{html.escape(meta.title)}</title>",
        _meta("name", "description", meta.description),
        _meta("name", "keywords", meta.keywords),
        _meta("name", "robots", meta.robots),
        # Open Graph
        _meta("property", "og:type", meta.og_type),
        _meta("property", "og:title", og_title),
        _meta("property", "og:description", og_description),
        _meta("property", "og:image", meta.image),
        _meta("property", "og:url", meta.canonical_url),
        _meta("property", "og:site_name", meta.site_name),
        _meta("property", "og:locale", SEO_DEFAULTS["locale"]),
        # Twitter
        _meta("name", "twitter:card", SEO_DEFAULTS["twitter_card"]),
        _meta("name", "twitter:site", SEO_DEFAULTS["twitter_site"]),
        _meta("name", "twitter:creator", SEO_DEFAULTS["twitter_handle"]),
        _meta("name", "twitter:title", og_title),
        _meta("name", "twitter:description", og_description),
        _meta("name", "twitter:image", meta.image),
        f'<link rel="canonical" href="{html.escape(meta.canonical_url)}">',
    ]
    if meta.structured_data:
        # "</" must not appear inside a script element
        payload = json.dumps(meta.structured_data).replace("</", "<\\/")
        tags.append(f'<script type="application/ld+json">{payload}</script>')
    return "\n".join(tag for tag in tags if tag)


# Tags replaced when rewriting an HTML shell
_HEAD_TAG_PATTERNS = [
    r"<title>.*?</title>",
    r'<meta\s+name="(?:description|keywords|robots|twitter:[^"]*)"[^>]*>',
    r'<meta\s+property="og:[^"]*"[^>]*>',
    r'<link\s+rel="canonical"[^>]*>',
    r'<script\s+type="application/ld\+json">.*?</script>',
]


def rewrite_index_html(document: str, meta: SeoMetadata) -> str:
    """
    Replace the SEO tags of an HTML shell with freshly rendered ones.

    Existing title/meta/canonical/structured-data tags are removed and the
    rendered head is inserted before ``</head>``.
    """
    cleaned = document
    for pattern in _HEAD_TAG_PATTERNS:
        cleaned = re.sub(r"[ \t]*" + pattern + r"[ \t]*\n?", "", cleaned, flags=re.IGNORECASE | re.DOTALL)

    head = render_head(meta)
    match = re.search(r"</head>", cleaned, flags=re.IGNORECASE)
    if match is None:
        return head + "\n" + cleaned
    return cleaned[:match.start()] + head + "\n" + cleaned[match.start():]
