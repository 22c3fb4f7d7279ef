"""Sitemap service."""

from datetime import datetime, timezone

from ..config import SITE_URL
from ..models import SiteLayout
from .render import render_sitemap

STATIC_PAGES = (
    {"loc": "/", "changefreq": "daily", "priority": "1.0"},
    {"loc": "/products/", "changefreq": "daily", "priority": "0.9"},
    {"loc": "/about.html", "changefreq": "monthly", "priority": "0.5"},
    {"loc": "/contact.html", "changefreq": "monthly", "priority": "0.5"},
    {"loc": "/privacy.html", "changefreq": "monthly", "priority": "0.3"},
)


def build_sitemap(layout: SiteLayout) -> str:
    pages = [dict(page) for page in STATIC_PAGES]
    for path in layout.article_files():
        lastmod = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc).date().isoformat()
        pages.append({
            "loc": f"/products/{path.name}",
            "lastmod": lastmod,
            "changefreq": "weekly",
            "priority": "0.8",
        })
    return render_sitemap(pages)


def update_sitemap(layout: SiteLayout) -> int:
    """Write sitemap.xml. Returns the number of URLs."""
    articles = len(layout.article_files())
    layout.sitemap.write_text(build_sitemap(layout), encoding="utf-8")
    total = len(STATIC_PAGES) + articles
    print(f"Sitemap updated: {articles} articles, {total} URLs ({SITE_URL})", flush=True)
    return total
