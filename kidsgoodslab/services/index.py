"""Index service - rebuild the article grids on the home and listing pages."""

import logging

from ..models import PageMeta, SiteLayout
from .extract import extract_page_meta
from .render import render_card

logger = logging.getLogger(__name__)

GRID_START = '<div class="products-grid">'
HOME_END_MARKER = "<!-- About Section -->"
LISTING_END_MARKER = "<!-- Footer -->"
GRID_CLOSE = "\n      </div>\n    </div>\n  </section>\n\n  "


def scan_pages(layout: SiteLayout) -> list[PageMeta]:
    """Metadata for every article that has a title."""
    pages = []
    for path in layout.article_files():
        meta = extract_page_meta(path)
        if meta is None:
            logger.warning(f"Skipping {path.name}: no article title")
            continue
        pages.append(meta)
    return pages


def sort_pages(pages: list[PageMeta]) -> list[PageMeta]:
    """Newest date first; same date, most recently modified first."""
    return sorted(
        pages,
        key=lambda p: (p.date.replace(".", ""), p.mtime),
        reverse=True,
    )


def build_cards(layout: SiteLayout, pages: list[PageMeta], in_products_dir: bool) -> str:
    return "\n".join(
        render_card(
            slug=p.slug,
            title=p.title,
            category_label=p.category,
            excerpt=p.excerpt,
            rating=p.rating,
            date_str=p.date,
            has_ogp=layout.ogp_path(p.slug).exists(),
            in_products_dir=in_products_dir,
        )
        for p in pages
    )


def replace_grid(page: str, cards: str, end_marker: str) -> str | None:
    """Swap everything between the grid opening and end_marker. None when markers are missing."""
    start = page.find(GRID_START)
    end = page.find(end_marker)
    if start == -1 or end <= start:
        return None
    before = page[: start + len(GRID_START)]
    return before + "\n" + cards + GRID_CLOSE + page[end:]


def rebuild_index(layout: SiteLayout) -> int:
    """Rewrite both index grids. Returns the number of cards written."""
    pages = sort_pages(scan_pages(layout))
    print(f"Extracted {len(pages)} articles", flush=True)

    targets = (
        (layout.index_html, HOME_END_MARKER, False),
        (layout.products_index, LISTING_END_MARKER, True),
    )
    for path, end_marker, in_products_dir in targets:
        if not path.exists():
            logger.warning(f"Index page not found: {path}")
            continue
        updated = replace_grid(
            path.read_text(encoding="utf-8"),
            build_cards(layout, pages, in_products_dir),
            end_marker,
        )
        if updated is None:
            logger.warning(f"Could not find grid markers in {path}")
            continue
        path.write_text(updated, encoding="utf-8")
        print(f"Updated {path.name} with {len(pages)} cards", flush=True)

    return len(pages)


def add_card(index_path, card: str) -> bool:
    """Append a card after the last </article> of the grid. False when no grid is found."""
    page = index_path.read_text(encoding="utf-8")
    start = page.find(GRID_START)
    if start == -1:
        return False

    end_candidates = [
        pos for pos in (page.find(m, start) for m in (HOME_END_MARKER, "<!-- No Results", LISTING_END_MARKER))
        if pos != -1
    ]
    end = min(end_candidates) if end_candidates else len(page)
    last_article = page.rfind("</article>", start, end)
    insert_at = last_article + len("</article>") if last_article != -1 else start + len(GRID_START)

    index_path.write_text(page[:insert_at] + "\n" + card + page[insert_at:], encoding="utf-8")
    return True
