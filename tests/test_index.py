import os

from kidsgoodslab.services.index import add_card, rebuild_index, replace_grid, sort_pages
from kidsgoodslab.models import PageMeta

from conftest import write_article


def test_sort_pages_newest_first():
    pages = [
        PageMeta(file="a.html", title="a", category="食品", date="2025.01.01", mtime=5),
        PageMeta(file="b.html", title="b", category="食品", date="2025.02.01", mtime=1),
        PageMeta(file="c.html", title="c", category="食品", date="2025.01.01", mtime=9),
    ]
    assert [p.file for p in sort_pages(pages)] == ["b.html", "c.html", "a.html"]


def test_replace_grid_requires_markers():
    assert replace_grid("<div>no grid</div>", "cards", "<!-- Footer -->") is None


def test_rebuild_index_writes_both_pages(site):
    write_article(site, "older", title="古い記事", date_str="2024.12.01")
    write_article(site, "newer", title="新しい記事", date_str="2025.01.15")
    (site.ogp_dir).mkdir(parents=True)
    site.ogp_path("newer").write_bytes(b"png")

    assert rebuild_index(site) == 2

    home = site.index_html.read_text(encoding="utf-8")
    assert "old card" not in home
    assert home.index("新しい記事") < home.index("古い記事")
    assert 'href="products/newer.html"' in home
    assert 'src="images/ogp/newer.png"' in home
    assert "<!-- About Section -->" in home

    listing = site.products_index.read_text(encoding="utf-8")
    assert 'href="older.html"' in listing
    assert 'src="../images/ogp/newer.png"' in listing
    assert "<!-- Footer -->" in listing


def test_rebuild_index_skips_untitled_pages(site):
    write_article(site, "ok", title="記事")
    (site.products_dir / "draft.html").write_text("<p>draft</p>", encoding="utf-8")
    assert rebuild_index(site) == 1


def test_rebuild_index_same_date_uses_mtime(site):
    first = write_article(site, "first", title="先の記事", date_str="2025.01.01")
    second = write_article(site, "second", title="後の記事", date_str="2025.01.01")
    os.utime(first, (1000, 1000))
    os.utime(second, (2000, 2000))
    rebuild_index(site)
    home = site.index_html.read_text(encoding="utf-8")
    assert home.index("後の記事") < home.index("先の記事")


def test_add_card_after_last_article(site):
    assert add_card(site.index_html, '<article class="product-card">new card</article>')
    home = site.index_html.read_text(encoding="utf-8")
    assert home.index("old card") < home.index("new card") < home.index("<!-- About Section -->")


def test_add_card_without_grid(tmp_path):
    page = tmp_path / "index.html"
    page.write_text("<html></html>", encoding="utf-8")
    assert add_card(page, "<article></article>") is False
    assert page.read_text(encoding="utf-8") == "<html></html>"
