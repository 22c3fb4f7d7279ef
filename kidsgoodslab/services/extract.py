"""Regex extraction of article metadata from rendered pages."""

import html
import json
import re
from pathlib import Path

from ..config import SITE_NAME
from ..models import PageMeta

TITLE_RE = re.compile(r'<h1 class="article-title">([^<]+)</h1>')
CATEGORY_RE = re.compile(r'<span class="article-category">([^<]+)</span>')
EXCERPT_RE = re.compile(r'<p class="article-excerpt">([^<]+)</p>')
RATING_RE = re.compile(r'<(?:div|span) class="rating-score">([^<]+)</(?:div|span)>')
DATE_RE = re.compile(r'<span class="article-date">([^<]+)</span>')
IMAGE_ASIN_RE = re.compile(r"m\.media-amazon\.com/images/P/([A-Z0-9]{10})")
LINK_ASIN_RE = re.compile(r"amazon\.co\.jp/dp/([A-Z0-9]{10})")

INLINE_NAME_RE = re.compile(r'font-weight:600;margin-bottom:8px;"?>([^<]+)<')
SPEC_NAME_RE = re.compile(r"<dt>商品名</dt>\s*<dd>([^<]+)</dd>")
BOLD_NAME_RE = re.compile(r"<b>商品名</b>\s*[:：]\s*([^<]+)<")
JSON_LD_RE = re.compile(r'<script type="application/ld\+json">\s*(\{.*?\})\s*</script>', re.DOTALL)
HEAD_TITLE_RE = re.compile(r"<title>([^<]+)</title>")
SITE_SUFFIX_RE = re.compile(rf"\s*-\s*{re.escape(SITE_NAME)}$")

DEFAULT_CATEGORY_NAME = "ベビー用品"
DEFAULT_RATING = "4.0"


def _first(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return html.unescape(match.group(1)).strip() if match else None


def extract_title(page: str) -> str | None:
    return _first(TITLE_RE, page)


def extract_category(page: str) -> str | None:
    """Japanese category name shown on the page."""
    return _first(CATEGORY_RE, page)


def extract_asin(page: str) -> str | None:
    """ASIN from the product image, falling back to the first /dp/ link."""
    match = IMAGE_ASIN_RE.search(page) or LINK_ASIN_RE.search(page)
    return match.group(1) if match else None


def extract_link_asin(page: str) -> str | None:
    match = LINK_ASIN_RE.search(page)
    return match.group(1) if match else None


def extract_image_asin(page: str) -> str | None:
    match = IMAGE_ASIN_RE.search(page)
    return match.group(1) if match else None


def extract_product_name(page: str, slug: str) -> str:
    """Product name, tried in order: product card, details list, bold label, JSON-LD, <title>, slug."""
    for pattern in (INLINE_NAME_RE, SPEC_NAME_RE, BOLD_NAME_RE):
        name = _first(pattern, page)
        if name:
            return name

    json_ld = JSON_LD_RE.search(page)
    if json_ld:
        try:
            data = json.loads(json_ld.group(1))
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict) and data.get("name"):
            return str(data["name"]).strip()

    title = _first(HEAD_TITLE_RE, page)
    if title:
        return SITE_SUFFIX_RE.sub("", title)

    return slug


def extract_page_meta(path: Path) -> PageMeta | None:
    """Card metadata for an article page, or None when it has no article title."""
    page = path.read_text(encoding="utf-8")
    title = extract_title(page)
    if not title:
        return None

    excerpt = _first(EXCERPT_RE, page) or ""
    return PageMeta(
        file=path.name,
        title=title[:50],
        category=extract_category(page) or DEFAULT_CATEGORY_NAME,
        excerpt=excerpt[:60],
        rating=_first(RATING_RE, page) or DEFAULT_RATING,
        date=_first(DATE_RE, page) or "",
        asin=extract_image_asin(page),
        mtime=path.stat().st_mtime,
    )
