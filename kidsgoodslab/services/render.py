"""HTML rendering - article pages, comparison pages, index cards and CTAs."""

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..clients.amazon import image_url, product_url
from ..config import SITE_NAME, SITE_URL
from ..models import Article, ComparedProduct, ComparisonArticle
from ..models.category import category_key, category_name
from ..utils import stars, today_dotted

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

H2_SPLIT_RE = re.compile(r"<h2>", re.IGNORECASE)

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    keep_trailing_newline=True,
)


def _render(template: str, **context) -> str:
    context.setdefault("site_name", SITE_NAME)
    context.setdefault("site_url", SITE_URL)
    context.setdefault("year", date.today().year)
    return _env.get_template(template).render(**context)


def insert_mid_article_ctas(content: str, product_name: str, amazon_url: str) -> str:
    """Insert a small CTA after the 2nd <h2> section and a medium one after the 5th.

    Content with fewer than three <h2> headings is returned unchanged.
    """
    sections = H2_SPLIT_RE.split(content)
    if len(sections) < 4:
        return content

    cta_small = _render("cta_small.html", product_name=product_name, amazon_url=amazon_url)
    cta_medium = _render("cta_medium.html", product_name=product_name, amazon_url=amazon_url)

    parts = [sections[0]]
    for i, section in enumerate(sections[1:], start=1):
        parts.append("<h2>" + section)
        if i == 2:
            parts.append(cta_small)
        if i == 5:
            parts.append(cta_medium)
    return "".join(parts)


def render_article(
    slug: str,
    product_name: str,
    category: str,
    article: Article,
    asin: str | None,
    has_ogp: bool = True,
    date_str: str | None = None,
) -> str:
    """Full review page with product card, mid-article CTAs and bottom CTA."""
    amazon_url = product_url(asin, product_name)
    return _render(
        "article.html",
        slug=slug,
        title=article.title,
        description=article.excerpt,
        category_name=category_name(category),
        date=date_str or today_dotted(),
        product_name=product_name,
        asin=asin,
        amazon_url=amazon_url,
        image_url=image_url(asin) if asin else "",
        has_ogp=has_ogp,
        content=insert_mid_article_ctas(article.content, product_name, amazon_url),
    )


@dataclass
class ComparisonEntry:
    """A compared product with its link and star bar."""

    product: ComparedProduct
    url: str
    stars: str
    is_winner: bool


def render_comparison(
    slug: str,
    category: str,
    article: ComparisonArticle,
    asins: dict[str, str | None],
    date_str: str | None = None,
) -> str:
    entries = [
        ComparisonEntry(
            product=p,
            url=product_url(asins.get(p.name), p.name),
            stars=stars(p.rating),
            is_winner=p.name == article.winner,
        )
        for p in article.products
    ]
    return _render(
        "comparison.html",
        slug=slug,
        title=article.title,
        description=article.meta_description,
        excerpt=article.excerpt,
        category_name=category_name(category),
        date=date_str or today_dotted(),
        article=article,
        entries=entries,
    )


def render_card(
    slug: str,
    title: str,
    category_label: str,
    excerpt: str,
    rating: str,
    date_str: str,
    has_ogp: bool,
    in_products_dir: bool,
) -> str:
    """Index card for one article.

    category_label is the Japanese name shown on the card.
    """
    prefix = "../" if in_products_dir else ""
    return _render(
        "card.html",
        category_key=category_key(category_label),
        href=f"{slug}.html" if in_products_dir else f"products/{slug}.html",
        image_src=f"{prefix}images/ogp/{slug}.png" if has_ogp else "",
        category_name=category_label,
        title=title,
        excerpt=excerpt,
        stars=stars(rating),
        date=date_str,
    ).rstrip("\n")


def render_sitemap(pages: list[dict]) -> str:
    return _render("sitemap.xml", pages=pages)
